"""CLI module for advisorbridge."""
