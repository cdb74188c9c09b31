"""HTTP API for Prophet."""
