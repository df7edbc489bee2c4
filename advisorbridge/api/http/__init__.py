"""HTTP endpoint helpers."""
