"""Persistence layer: engine/session management, ORM models and repositories."""
