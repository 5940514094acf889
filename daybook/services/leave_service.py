"""Leave Service.

Business logic for a user's holiday-leave allowance and bookings. The
whole ``LeaveRecord`` is rewritten on every change.
"""

import logging
from datetime import date

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from daybook.config import settings
from daybook.schemas.leave import (
    LeaveEntry,
    LeaveEntryCreate,
    LeaveEntryResponse,
    LeaveRecord,
    LeaveSummary,
)
from daybook.services import document_store
from daybook.services.leave import (
    LeaveSpan,
    can_book,
    count_working_days,
    leave_days,
    new_entry_id,
    tap_day,
    used_days,
)

logger = logging.getLogger(__name__)

COLLECTION = "holiday_leave"


def _spans(record: LeaveRecord) -> list[LeaveSpan]:
    return [LeaveSpan(**entry.model_dump()) for entry in record.entries]


def _entries(spans: list[LeaveSpan]) -> list[LeaveEntry]:
    return [
        LeaveEntry(id=s.id, from_date=s.from_date, to_date=s.to_date, note=s.note)
        for s in spans
    ]


async def load_leave(db: AsyncSession, user_id: str) -> LeaveRecord:
    """Return the stored record, or the default allowance with no bookings."""
    data = await document_store.get_document(db, COLLECTION, user_id)
    if data is None:
        return LeaveRecord(available_days=settings.DEFAULT_AVAILABLE_DAYS)
    return LeaveRecord.model_validate(data)


async def save_leave(db: AsyncSession, user_id: str, record: LeaveRecord) -> None:
    # Entries without a note must not carry a null "note" field.
    payload = document_store.strip_undefined(record.model_dump(mode="json"))
    await document_store.set_document(db, COLLECTION, user_id, payload, merge=False)
    logger.info(
        "Saved leave for %s (%d available, %d entries)",
        user_id, record.available_days, len(record.entries),
    )


def booked_days(
    record: LeaveRecord,
    range_start: date | None = None,
    range_end: date | None = None,
) -> frozenset[date]:
    """Working dates covered by the user's bookings within the range."""
    return leave_days(_spans(record), range_start, range_end)


def summarize(record: LeaveRecord) -> LeaveSummary:
    used = used_days(_spans(record))
    return LeaveSummary(
        available_days=record.available_days,
        used_days=used,
        remaining_days=record.available_days - used,
        entries=[
            LeaveEntryResponse(
                **entry.model_dump(),
                working_days=count_working_days(entry.from_date, entry.to_date),
            )
            for entry in record.entries
        ],
    )


async def add_entry(db: AsyncSession, user_id: str, body: LeaveEntryCreate) -> LeaveEntry:
    """Book a leave range.

    Raises:
        HTTPException 422: If the range contains no working day.
    """
    if not can_book(body.from_date, body.to_date):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Leave must cover at least one working day",
        )

    record = await load_leave(db, user_id)
    entry = LeaveEntry(
        id=new_entry_id(),
        from_date=body.from_date,
        to_date=body.to_date,
        note=body.note,
    )
    record.entries.append(entry)
    await save_leave(db, user_id, record)
    return entry


async def delete_entry(db: AsyncSession, user_id: str, entry_id: str) -> None:
    """Remove a booking.

    Raises:
        HTTPException 404: If no entry has this id.
    """
    record = await load_leave(db, user_id)
    remaining = [e for e in record.entries if e.id != entry_id]
    if len(remaining) == len(record.entries):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Leave entry not found",
        )
    record.entries = remaining
    await save_leave(db, user_id, record)


async def set_available_days(db: AsyncSession, user_id: str, available_days: int) -> LeaveRecord:
    record = await load_leave(db, user_id)
    record.available_days = available_days
    await save_leave(db, user_id, record)
    return record


async def tap_leave_day(db: AsyncSession, user_id: str, day: date) -> LeaveRecord:
    """Quick-add or quick-remove a one-day booking from the calendar.

    Raises:
        HTTPException 422: If ``day`` is a weekend or bank holiday.
    """
    if count_working_days(day, day) == 0:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Weekends and bank holidays cannot be booked",
        )

    record = await load_leave(db, user_id)
    record.entries = _entries(tap_day(_spans(record), day))
    await save_leave(db, user_id, record)
    return record
