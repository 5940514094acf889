"""Office Tracker Service.

Loads and saves one ``OfficeTrackerRecord`` per user and month, and runs
the compliance calculator over it.
"""

import logging
import re
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from daybook.config import settings
from daybook.schemas.office_tracker import OfficeTrackerRecord
from daybook.services import document_store
from daybook.services.calendar_utils import month_range, parse_month_key
from daybook.services.compliance import ComplianceResult, TrackerSettings, compute_compliance

logger = logging.getLogger(__name__)

COLLECTION = "office_tracker"

# Guards against user ids that are themselves a prefix of another id.
_MONTH_SUFFIX_RE = re.compile(r"^\d{4}-\d{2}$")


def document_id(user_id: str, month: str) -> str:
    """``{userId}_{YYYY-MM}``."""
    return f"{user_id}_{month}"


def default_record(user_id: str, month: str) -> OfficeTrackerRecord:
    return OfficeTrackerRecord(
        user_id=user_id,
        month=month,
        required_percentage=settings.DEFAULT_REQUIRED_PERCENTAGE,
    )


def tracker_settings(record: OfficeTrackerRecord) -> TrackerSettings:
    return TrackerSettings(
        required_percentage=record.required_percentage,
        exclude_weekends=record.exclude_weekends,
        exclude_bank_holidays=record.exclude_bank_holidays,
    )


def record_range(record: OfficeTrackerRecord) -> tuple[date, date]:
    first = parse_month_key(record.month)
    return month_range(first.year, first.month)


async def load_month(db: AsyncSession, user_id: str, month: str) -> OfficeTrackerRecord:
    """Return the saved month, or the default configuration if none exists."""
    data = await document_store.get_document(db, COLLECTION, document_id(user_id, month))
    if data is None:
        return default_record(user_id, month)
    return OfficeTrackerRecord.model_validate({**data, "user_id": user_id, "month": month})


async def save_month(db: AsyncSession, record: OfficeTrackerRecord) -> None:
    """Overwrite the stored month with ``record``.

    The whole document is replaced so removed exclusions do not linger.
    """
    payload = record.model_dump(mode="json")
    payload["office_days"] = sorted(payload["office_days"])
    await document_store.set_document(
        db,
        COLLECTION,
        document_id(record.user_id, record.month),
        document_store.strip_undefined(payload),
        merge=False,
    )
    logger.info(
        "Saved office tracker %s for %s (%d office, %d excluded)",
        record.month, record.user_id, len(record.office_days), len(record.excluded_days),
    )


def evaluate_month(
    record: OfficeTrackerRecord,
    leave_days: frozenset[date] = frozenset(),
) -> ComplianceResult:
    """Compliance for the record's month, optionally overlaying booked leave."""
    start, end = record_range(record)
    return compute_compliance(
        start,
        end,
        set(record.office_days),
        record.excluded_days,
        tracker_settings(record),
        leave_days=leave_days,
    )


def with_days(
    record: OfficeTrackerRecord,
    office_days,
    excluded_days,
) -> OfficeTrackerRecord:
    """Copy of ``record`` carrying new office and exclusion collections."""
    return record.model_copy(
        update={
            "office_days": sorted(office_days),
            "excluded_days": dict(sorted(excluded_days.items())),
        }
    )


async def list_tracked_months(db: AsyncSession, user_id: str) -> list[str]:
    """Month keys with saved tracker data, oldest first."""
    prefix = f"{user_id}_"
    documents = await document_store.list_documents(db, COLLECTION, prefix=prefix)
    months = (doc_id[len(prefix):] for doc_id, _ in documents)
    return [m for m in months if _MONTH_SUFFIX_RE.match(m)]


async def delete_all_months(db: AsyncSession, user_id: str) -> int:
    months = await list_tracked_months(db, user_id)
    for month in months:
        await document_store.delete_document(db, COLLECTION, document_id(user_id, month))
    return len(months)
