"""Quiz attempts: generation, submission, scoring."""
