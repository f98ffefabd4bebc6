"""HTTP API for label generation."""
