"""HTTP API for advisorbridge."""
