"""Learner reports and tier-based redaction."""
