"""Tiered payee classification: exclusion, rules, fuzzy matching, AI and fallback."""
