"""Office-day and exclusion mutations.

Every helper takes the current ``(office_days, excluded_days)`` pair and
returns new collections. None of them can leave a date both marked as an
office day and excluded.
"""

from collections.abc import Mapping, Set
from datetime import date

from daybook.services.compliance import ExclusionType

OfficeState = tuple[frozenset[date], dict[date, ExclusionType]]


def add_exclusion(
    office_days: Set[date],
    excluded_days: Mapping[date, ExclusionType],
    day: date,
    kind: ExclusionType = ExclusionType.EXCLUDED,
) -> OfficeState:
    """Exclude ``day`` and drop its office mark in the same step."""
    return frozenset(office_days - {day}), {**excluded_days, day: ExclusionType(kind)}


def remove_exclusion(
    office_days: Set[date],
    excluded_days: Mapping[date, ExclusionType],
    day: date,
) -> OfficeState:
    """Drop the exclusion only; the office mark is not restored."""
    remaining = {d: kind for d, kind in excluded_days.items() if d != day}
    return frozenset(office_days), remaining


def tap_day(
    office_days: Set[date],
    excluded_days: Mapping[date, ExclusionType],
    day: date,
    working_day_set: Set[date],
) -> OfficeState:
    """Short interaction on a calendar cell.

    An excluded day gets its exclusion cleared. Otherwise the office mark
    is toggled, but only for working days or days that are already marked.
    """
    if day in excluded_days:
        return remove_exclusion(office_days, excluded_days, day)
    if day not in working_day_set and day not in office_days:
        return frozenset(office_days), dict(excluded_days)
    return frozenset(office_days ^ {day}), dict(excluded_days)


def hold_day(
    office_days: Set[date],
    excluded_days: Mapping[date, ExclusionType],
    day: date,
) -> OfficeState:
    """Long interaction: toggle between excluded and not excluded."""
    if day in excluded_days:
        return remove_exclusion(office_days, excluded_days, day)
    return add_exclusion(office_days, excluded_days, day, ExclusionType.EXCLUDED)


def mark_today(
    office_days: Set[date],
    excluded_days: Mapping[date, ExclusionType],
    today: date,
    range_start: date,
    range_end: date,
) -> OfficeState:
    """Toggle today's office mark when today lies in the viewed range.

    An exclusion on today is cleared first so the invariant holds.
    """
    if not range_start <= today <= range_end:
        return frozenset(office_days), dict(excluded_days)
    if today in excluded_days:
        office, excluded = remove_exclusion(office_days, excluded_days, today)
        return office | {today}, excluded
    return frozenset(office_days ^ {today}), dict(excluded_days)
