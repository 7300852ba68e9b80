"""Payee classification core: name matching, tiered classification and batch processing."""
