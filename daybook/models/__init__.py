"""SQLAlchemy ORM models.

All models are imported here so that Alembic can discover them
via ``Base.metadata`` when generating migrations.
"""

from daybook.models.document import Document  # noqa: F401

__all__ = [
    "Document",
]
