"""Utility functions for the payee classifier."""
