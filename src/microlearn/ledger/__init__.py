"""Hint-credit ledger."""
