"""Verification of identities issued by the auth collaborator."""
