"""Office Tracker router.

Endpoints for a user's monthly office-attendance record: the saved data,
the compliance breakdown, a calendar grid, and the tap / hold / exclusion
interactions. Mutating endpoints persist immediately and return the
updated view.
"""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from daybook.core.dependencies import CurrentUser, get_current_user, valid_month
from daybook.database import get_db
from daybook.schemas.office_tracker import (
    ExclusionCreate,
    OfficeCalendarCell,
    OfficeCalendarResponse,
    OfficeTrackerRecord,
    OfficeTrackerSettingsUpdate,
    OfficeTrackerUpdate,
    OfficeTrackerView,
    compliance_response,
)
from daybook.services import bank_holidays, leave_service, office_days
from daybook.services import office_tracker_service as tracker
from daybook.services.calendar_utils import (
    DAY_HEADERS,
    calendar_grid,
    format_month_year,
    format_range_label,
    parse_month_key,
)
from daybook.services.compliance import day_status, is_interactive

router = APIRouter(prefix="/office-tracker", tags=["Office Tracker"])

MonthKey = Annotated[str, Depends(valid_month)]
OverlayLeave = Annotated[
    bool, Query(description="Treat booked leave days as excluded from the working pool")
]


async def _leave_overlay(
    db: AsyncSession,
    record: OfficeTrackerRecord,
    enabled: bool,
) -> frozenset[date]:
    """Booked leave days inside the record's month."""
    if not enabled:
        return frozenset()
    start, end = tracker.record_range(record)
    leave = await leave_service.load_leave(db, record.user_id)
    return leave_service.booked_days(leave, start, end)


async def _view(
    db: AsyncSession,
    record: OfficeTrackerRecord,
    overlay_leave: bool,
) -> OfficeTrackerView:
    leave_days = await _leave_overlay(db, record, overlay_leave)
    result = tracker.evaluate_month(record, leave_days)
    return OfficeTrackerView(
        month_label=format_month_year(result.range_start),
        record=record,
        compliance=compliance_response(
            result, format_range_label(result.range_start, result.range_end)
        ),
    )


def _in_month(record: OfficeTrackerRecord, day: date) -> None:
    start, end = tracker.record_range(record)
    if not start <= day <= end:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"{day.isoformat()} is outside {record.month}",
        )


@router.get("/", response_model=list[str])
async def list_months(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser = Depends(get_current_user),
):
    """Month keys for which the user has saved tracker data."""
    return await tracker.list_tracked_months(db, current_user.uid)


@router.get("/{month}", response_model=OfficeTrackerView)
async def get_month(
    month: MonthKey,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser = Depends(get_current_user),
    overlay_leave: OverlayLeave = True,
):
    """Saved month (or defaults) with its compliance breakdown."""
    record = await tracker.load_month(db, current_user.uid, month)
    return await _view(db, record, overlay_leave)


@router.put("/{month}", response_model=OfficeTrackerView)
async def save_month(
    month: MonthKey,
    body: OfficeTrackerUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser = Depends(get_current_user),
    overlay_leave: OverlayLeave = True,
):
    """Replace the whole month."""
    record = OfficeTrackerRecord(
        user_id=current_user.uid,
        month=month,
        **body.model_dump(),
    )
    record = tracker.with_days(record, record.office_days, record.excluded_days)
    await tracker.save_month(db, record)
    return await _view(db, record, overlay_leave)


@router.patch("/{month}/settings", response_model=OfficeTrackerView)
async def update_settings(
    month: MonthKey,
    body: OfficeTrackerSettingsUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser = Depends(get_current_user),
    overlay_leave: OverlayLeave = True,
):
    """Change the required percentage or the automatic exclusion toggles."""
    record = await tracker.load_month(db, current_user.uid, month)
    record = record.model_copy(update=body.model_dump(exclude_none=True))
    await tracker.save_month(db, record)
    return await _view(db, record, overlay_leave)


@router.get("/{month}/calendar", response_model=OfficeCalendarResponse)
async def get_calendar(
    month: MonthKey,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser = Depends(get_current_user),
    overlay_leave: OverlayLeave = True,
):
    """Monday-first grid with the legend category of every day."""
    record = await tracker.load_month(db, current_user.uid, month)
    leave_days = await _leave_overlay(db, record, overlay_leave)
    start, end = tracker.record_range(record)
    settings = tracker.tracker_settings(record)
    office = set(record.office_days)
    today = date.today()

    cells = []
    for day in calendar_grid(start.year, start.month):
        if day is None:
            cells.append(OfficeCalendarCell(date=None))
            continue
        cells.append(
            OfficeCalendarCell(
                date=day,
                status=day_status(
                    day, start, end, office, record.excluded_days, settings, leave_days
                ),
                interactive=is_interactive(day, start, end, settings),
                is_today=day == today,
                bank_holiday_name=(
                    bank_holidays.holiday_name(day) if bank_holidays.is_bank_holiday(day) else None
                ),
            )
        )

    return OfficeCalendarResponse(
        month=month,
        month_label=format_month_year(parse_month_key(month)),
        day_headers=list(DAY_HEADERS),
        cells=cells,
    )


@router.post("/{month}/days/{day}/tap", response_model=OfficeTrackerView)
async def tap_day(
    month: MonthKey,
    day: date,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser = Depends(get_current_user),
    overlay_leave: OverlayLeave = True,
):
    """Toggle the office mark, or clear an exclusion on an excluded day."""
    record = await tracker.load_month(db, current_user.uid, month)
    _in_month(record, day)
    start, end = tracker.record_range(record)
    if not is_interactive(day, start, end, tracker.tracker_settings(record)):
        return await _view(db, record, overlay_leave)

    leave_days = await _leave_overlay(db, record, overlay_leave)
    working = tracker.evaluate_month(record, leave_days).working_day_set
    record = tracker.with_days(
        record,
        *office_days.tap_day(set(record.office_days), record.excluded_days, day, working),
    )
    await tracker.save_month(db, record)
    return await _view(db, record, overlay_leave)


@router.post("/{month}/days/{day}/hold", response_model=OfficeTrackerView)
async def hold_day(
    month: MonthKey,
    day: date,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser = Depends(get_current_user),
    overlay_leave: OverlayLeave = True,
):
    """Toggle a day between excluded and not excluded."""
    record = await tracker.load_month(db, current_user.uid, month)
    _in_month(record, day)
    start, end = tracker.record_range(record)
    if not is_interactive(day, start, end, tracker.tracker_settings(record)):
        return await _view(db, record, overlay_leave)

    record = tracker.with_days(
        record,
        *office_days.hold_day(set(record.office_days), record.excluded_days, day),
    )
    await tracker.save_month(db, record)
    return await _view(db, record, overlay_leave)


@router.post("/{month}/exclusions", response_model=OfficeTrackerView)
async def add_exclusion(
    month: MonthKey,
    body: ExclusionCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser = Depends(get_current_user),
    overlay_leave: OverlayLeave = True,
):
    """Exclude a date (and drop its office mark)."""
    record = await tracker.load_month(db, current_user.uid, month)
    _in_month(record, body.date)
    record = tracker.with_days(
        record,
        *office_days.add_exclusion(
            set(record.office_days), record.excluded_days, body.date, body.type
        ),
    )
    await tracker.save_month(db, record)
    return await _view(db, record, overlay_leave)


@router.delete("/{month}/exclusions/{day}", response_model=OfficeTrackerView)
async def remove_exclusion(
    month: MonthKey,
    day: date,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser = Depends(get_current_user),
    overlay_leave: OverlayLeave = True,
):
    """Remove an exclusion; the day is not re-marked as an office day."""
    record = await tracker.load_month(db, current_user.uid, month)
    if day not in record.excluded_days:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Exclusion not found",
        )
    record = tracker.with_days(
        record,
        *office_days.remove_exclusion(set(record.office_days), record.excluded_days, day),
    )
    await tracker.save_month(db, record)
    return await _view(db, record, overlay_leave)


@router.post("/{month}/mark-today", response_model=OfficeTrackerView)
async def mark_today(
    month: MonthKey,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser = Depends(get_current_user),
    overlay_leave: OverlayLeave = True,
):
    """Toggle today's office mark; only allowed while viewing the current month."""
    record = await tracker.load_month(db, current_user.uid, month)
    start, end = tracker.record_range(record)
    today = date.today()
    if not start <= today <= end:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Navigate to the current month to mark today",
        )

    record = tracker.with_days(
        record,
        *office_days.mark_today(set(record.office_days), record.excluded_days, today, start, end),
    )
    await tracker.save_month(db, record)
    return await _view(db, record, overlay_leave)
