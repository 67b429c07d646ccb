"""HTTP API for the sale service."""
