"""HTTP API for the score gate."""
