"""Learner dashboard."""
