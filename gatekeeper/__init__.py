"""Gatekeeper: permission resolution, attribute filtering and audit emission."""

__version__ = "0.1.0"
