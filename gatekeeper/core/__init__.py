"""Core policy-enforcement components for Gatekeeper."""
