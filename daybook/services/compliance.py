"""Office compliance calculator.

Pure functions that turn a month of office marks and exclusions into a
working-day pool, the number of office days required by a percentage
policy, and a three-state compliance status.

A date leaves the working-day pool for the first matching reason, in this
order:

1. weekend, when weekends are auto-excluded
2. bank holiday, when bank holidays are auto-excluded
3. a manual exclusion (``excluded`` or ``holiday``)
4. a booked leave day

Automatic exclusions therefore always win when their toggle is on.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from daybook.services import bank_holidays
from daybook.services.calendar_utils import days_in_range, is_weekend

# selected >= required * 3/4 counts as "at risk" rather than "not meeting"
AT_RISK_NUMERATOR = 3
AT_RISK_DENOMINATOR = 4


class ExclusionType(str, Enum):
    EXCLUDED = "excluded"
    HOLIDAY = "holiday"


class ComplianceStatus(str, Enum):
    ON_TRACK = "on-track"
    AT_RISK = "at-risk"
    NOT_MEETING = "not-meeting"


class DayStatus(str, Enum):
    OFFICE = "office"
    HOME = "home"
    EXCLUDED = "excluded"
    WEEKEND = "weekend"
    HOLIDAY = "holiday"
    LEAVE = "leave"
    OUTSIDE_RANGE = "outside-range"


@dataclass(frozen=True)
class TrackerSettings:
    required_percentage: int = 60
    exclude_weekends: bool = True
    exclude_bank_holidays: bool = True


@dataclass(frozen=True)
class ComplianceResult:
    range_start: date
    range_end: date
    total_days: int
    weekend_count: int
    bank_holiday_count: int
    manual_excluded_count: int
    leave_excluded_count: int
    working_day_set: frozenset[date] = field(repr=False)
    required_office_days: int
    selected_office_days: int
    progress_percentage: int
    status: ComplianceStatus
    holiday_table_covered: bool

    @property
    def working_days(self) -> int:
        return len(self.working_day_set)

    @property
    def total_excluded(self) -> int:
        return (
            self.weekend_count
            + self.bank_holiday_count
            + self.manual_excluded_count
            + self.leave_excluded_count
        )


def required_office_days(working_days: int, required_percentage: int) -> int:
    """``ceil(working_days * pct / 100)`` without float rounding."""
    return -(-working_days * required_percentage // 100)


def progress_percentage(selected: int, required: int) -> int:
    """Share of the requirement met, rounded half up and capped at 100."""
    if required <= 0:
        return 100
    return min(100, (200 * selected + required) // (2 * required))


def compliance_status(selected: int, required: int) -> ComplianceStatus:
    if selected >= required:
        return ComplianceStatus.ON_TRACK
    if selected * AT_RISK_DENOMINATOR >= required * AT_RISK_NUMERATOR:
        return ComplianceStatus.AT_RISK
    return ComplianceStatus.NOT_MEETING


def compute_compliance(
    range_start: date,
    range_end: date,
    office_days: Iterable[date],
    excluded_days: Mapping[date, ExclusionType],
    settings: TrackerSettings,
    leave_days: Iterable[date] = (),
) -> ComplianceResult:
    """Evaluate one date range (normally a calendar month).

    Office marks outside the range or on excluded dates are ignored here;
    they are not removed from the caller's data.
    """
    leave = frozenset(leave_days)
    weekend_count = bank_holiday_count = manual_count = leave_count = 0
    working: set[date] = set()
    covered = True

    all_days = days_in_range(range_start, range_end)
    for day in all_days:
        covered = covered and bank_holidays.covers(day)
        if settings.exclude_weekends and is_weekend(day):
            weekend_count += 1
        elif settings.exclude_bank_holidays and bank_holidays.is_bank_holiday(day):
            bank_holiday_count += 1
        elif day in excluded_days:
            manual_count += 1
        elif day in leave:
            leave_count += 1
        else:
            working.add(day)

    required = required_office_days(len(working), settings.required_percentage)
    selected = len(working.intersection(office_days))

    return ComplianceResult(
        range_start=range_start,
        range_end=range_end,
        total_days=len(all_days),
        weekend_count=weekend_count,
        bank_holiday_count=bank_holiday_count,
        manual_excluded_count=manual_count,
        leave_excluded_count=leave_count,
        working_day_set=frozenset(working),
        required_office_days=required,
        selected_office_days=selected,
        progress_percentage=progress_percentage(selected, required),
        status=compliance_status(selected, required),
        holiday_table_covered=covered,
    )


def _auto_excluded(day: date, settings: TrackerSettings) -> DayStatus | None:
    if settings.exclude_weekends and is_weekend(day):
        return DayStatus.WEEKEND
    if settings.exclude_bank_holidays and bank_holidays.is_bank_holiday(day):
        return DayStatus.HOLIDAY
    return None


def day_status(
    day: date,
    range_start: date,
    range_end: date,
    office_days: Iterable[date],
    excluded_days: Mapping[date, ExclusionType],
    settings: TrackerSettings,
    leave_days: Iterable[date] = (),
) -> DayStatus:
    """Legend category of a single calendar cell.

    A bank holiday that is still in the working pool (toggle off) shows as
    a holiday unless the user explicitly marked it as an office day.
    """
    if not range_start <= day <= range_end:
        return DayStatus.OUTSIDE_RANGE

    auto = _auto_excluded(day, settings)
    if auto is not None:
        return auto

    exclusion = excluded_days.get(day)
    if exclusion == ExclusionType.HOLIDAY:
        return DayStatus.HOLIDAY
    if exclusion == ExclusionType.EXCLUDED:
        return DayStatus.EXCLUDED
    if day in leave_days:
        return DayStatus.LEAVE

    is_office = day in office_days
    if bank_holidays.is_bank_holiday(day) and not is_office:
        return DayStatus.HOLIDAY
    return DayStatus.OFFICE if is_office else DayStatus.HOME


def is_interactive(
    day: date,
    range_start: date,
    range_end: date,
    settings: TrackerSettings,
) -> bool:
    """Only in-range dates that are not auto-excluded accept taps."""
    return range_start <= day <= range_end and _auto_excluded(day, settings) is None
