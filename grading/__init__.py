"""Assessment and grading engine."""
