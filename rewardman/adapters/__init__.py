"""LedgerBackend implementations."""
