"""Alembic script directory for the todos schema."""
