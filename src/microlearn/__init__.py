"""Adaptive micro-learning core service."""
