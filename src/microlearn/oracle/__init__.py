"""External oracles: recommendation, quiz generation/scoring, reports, storage links."""
