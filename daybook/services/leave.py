"""Holiday leave counting.

Leave consumes weekdays that are not bank holidays. Office-tracker
exclusions play no part here; leave only reaches the office tracker
through :func:`leave_days`, which feeds the compliance calculator.
"""

import uuid
from collections.abc import Iterable, Set
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum

from daybook.services import bank_holidays
from daybook.services.calendar_utils import days_in_range, is_weekend

# Longest bookable span, inclusive of both ends
MAX_LEAVE_SPAN_DAYS = 366


class LeaveCellStatus(str, Enum):
    OUTSIDE = "outside"
    BANK_HOLIDAY = "bank-holiday"
    WEEKEND = "weekend"
    LEAVE = "leave"
    LEAVE_START = "leave-start"
    LEAVE_END = "leave-end"
    LEAVE_MID = "leave-mid"
    NONE = "none"


@dataclass(frozen=True)
class LeaveSpan:
    """The date-bearing part of a leave entry."""

    id: str
    from_date: date
    to_date: date
    note: str | None = None


def new_entry_id() -> str:
    return uuid.uuid4().hex


def _is_leave_day(d: date) -> bool:
    return not is_weekend(d) and not bank_holidays.is_bank_holiday(d)


def count_working_days(from_date: date, to_date: date) -> int:
    """Weekdays in ``[from_date, to_date]`` that are not bank holidays."""
    return sum(1 for d in days_in_range(from_date, to_date) if _is_leave_day(d))


def can_book(from_date: date, to_date: date) -> bool:
    return to_date >= from_date and count_working_days(from_date, to_date) > 0


def _clamped(entry: LeaveSpan, range_start: date | None, range_end: date | None) -> list[date]:
    start = entry.from_date if range_start is None else max(entry.from_date, range_start)
    end = entry.to_date if range_end is None else min(entry.to_date, range_end)
    return days_in_range(start, end)


def leave_days(
    entries: Iterable[LeaveSpan],
    range_start: date | None = None,
    range_end: date | None = None,
) -> frozenset[date]:
    """Every working date covered by any entry, limited to the given range."""
    return frozenset(
        d
        for entry in entries
        for d in _clamped(entry, range_start, range_end)
        if _is_leave_day(d)
    )


def used_days(entries: Iterable[LeaveSpan]) -> int:
    """Working days summed per entry; overlapping entries count twice."""
    return sum(count_working_days(e.from_date, e.to_date) for e in entries)


def tap_day(entries: list[LeaveSpan], day: date) -> list[LeaveSpan]:
    """Quick toggle from the leave calendar.

    A single-day entry on ``day`` is removed; a day inside a longer entry
    is left alone (delete the entry instead); any other day gets a new
    one-day entry.
    """
    single = next((e for e in entries if e.from_date == e.to_date == day), None)
    if single is not None:
        return [e for e in entries if e.id != single.id]
    if day in leave_days(entries, day, day):
        return list(entries)
    return [*entries, LeaveSpan(id=new_entry_id(), from_date=day, to_date=day)]


def leave_cell_status(day: date, in_month: bool, booked: Set[date]) -> LeaveCellStatus:
    """Calendar styling of one leave-calendar cell, including range ends."""
    if not in_month:
        return LeaveCellStatus.OUTSIDE
    if bank_holidays.is_bank_holiday(day):
        return LeaveCellStatus.BANK_HOLIDAY
    if is_weekend(day):
        return LeaveCellStatus.WEEKEND
    if day not in booked:
        return LeaveCellStatus.NONE

    prev_leave = day - timedelta(days=1) in booked
    next_leave = day + timedelta(days=1) in booked
    if not prev_leave and not next_leave:
        return LeaveCellStatus.LEAVE
    if not prev_leave:
        return LeaveCellStatus.LEAVE_START
    if not next_leave:
        return LeaveCellStatus.LEAVE_END
    return LeaveCellStatus.LEAVE_MID
