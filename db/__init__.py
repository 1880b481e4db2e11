"""Persistence layer: SQLAlchemy models and session helpers."""
