"""Document Store.

Key-value JSON documents addressed by ``(collection, document_id)``,
persisted in the ``documents`` table. Writes are last-write-wins; there
are no transactions beyond the caller's session.
"""

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from daybook.models.document import Document

logger = logging.getLogger(__name__)


class UndefinedFieldError(ValueError):
    """A document payload contained a ``None`` value."""


def _find_undefined(value: Any, path: str = "") -> str | None:
    if value is None:
        return path or "<root>"
    if isinstance(value, dict):
        for key, item in value.items():
            found = _find_undefined(item, f"{path}.{key}" if path else str(key))
            if found is not None:
                return found
    elif isinstance(value, list):
        for index, item in enumerate(value):
            found = _find_undefined(item, f"{path}[{index}]")
            if found is not None:
                return found
    return None


def strip_undefined(value: Any) -> Any:
    """Recursively drop ``None`` values from dicts and lists."""
    if isinstance(value, dict):
        return {k: strip_undefined(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [strip_undefined(v) for v in value if v is not None]
    return value


async def _get_row(db: AsyncSession, collection: str, document_id: str) -> Document | None:
    result = await db.execute(
        select(Document).where(
            Document.collection == collection,
            Document.document_id == document_id,
        )
    )
    return result.scalar_one_or_none()


async def get_document(
    db: AsyncSession,
    collection: str,
    document_id: str,
) -> dict | None:
    """Return a copy of the stored payload, or None when absent."""
    row = await _get_row(db, collection, document_id)
    if row is None:
        return None
    return dict(row.data)


async def set_document(
    db: AsyncSession,
    collection: str,
    document_id: str,
    data: dict,
    merge: bool = True,
) -> None:
    """Create or update a document.

    With ``merge`` only the given top-level fields are replaced; without
    it the payload becomes the whole document.

    Raises:
        UndefinedFieldError: If any value in ``data`` is None.
    """
    undefined = _find_undefined(data)
    if undefined is not None:
        raise UndefinedFieldError(
            f"Undefined value for field '{undefined}' in {collection}/{document_id}"
        )

    row = await _get_row(db, collection, document_id)
    if row is None:
        db.add(Document(collection=collection, document_id=document_id, data=dict(data)))
    elif merge:
        row.data = {**row.data, **data}
    else:
        row.data = dict(data)

    await db.flush()
    logger.info("Stored %s/%s (merge=%s)", collection, document_id, merge)


async def delete_document(
    db: AsyncSession,
    collection: str,
    document_id: str,
) -> bool:
    """Delete a document; returns False if it did not exist."""
    row = await _get_row(db, collection, document_id)
    if row is None:
        return False
    await db.delete(row)
    await db.flush()
    logger.info("Deleted %s/%s", collection, document_id)
    return True


async def list_documents(
    db: AsyncSession,
    collection: str,
    prefix: str | None = None,
) -> list[tuple[str, dict]]:
    """``(document_id, payload)`` pairs ordered by id, optionally by id prefix."""
    query = select(Document).where(Document.collection == collection)
    if prefix is not None:
        query = query.where(Document.document_id.startswith(prefix, autoescape=True))
    result = await db.execute(query.order_by(Document.document_id))
    return [(row.document_id, dict(row.data)) for row in result.scalars().all()]
