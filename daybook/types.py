"""Portable SQL types that work across PostgreSQL and SQLite.

PostgreSQL stores documents as native JSONB.
SQLite (and any other dialect) falls back to plain JSON.
"""

from sqlalchemy import JSON, TypeDecorator


class JSONDocument(TypeDecorator):
    """``JSONB`` on PG, ``JSON`` on other dialects."""

    impl = JSON
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            from sqlalchemy.dialects.postgresql import JSONB

            return dialect.type_descriptor(JSONB())
        return dialect.type_descriptor(JSON())

    def process_bind_param(self, value, dialect):
        if value is not None and not isinstance(value, dict):
            raise TypeError(f"Document payload must be a dict, got {type(value).__name__}")
        return value
