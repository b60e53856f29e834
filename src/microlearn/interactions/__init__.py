"""Interaction event ingestion: accept, enqueue, drain."""
