"""Liveness, readiness and version probes."""
