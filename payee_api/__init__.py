"""HTTP API for payee classification."""
