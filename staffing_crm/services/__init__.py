"""Business logic: scoring, conversions, assignments, activity and search."""
