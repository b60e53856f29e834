"""Payment confirmation webhook."""
