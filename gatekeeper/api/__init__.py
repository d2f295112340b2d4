"""HTTP API for Gatekeeper."""
