"""Database layer for Gatekeeper (SQLAlchemy, async)."""
