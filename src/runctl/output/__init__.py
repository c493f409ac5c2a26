"""Output layer — render ServiceResult for humans or as JSON."""
