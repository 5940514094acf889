"""Leave router.

Endpoints for the holiday-leave allowance, bookings and the leave calendar.
"""

from datetime import date, timedelta
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from daybook.core.dependencies import CurrentUser, get_current_user, valid_month
from daybook.database import get_db
from daybook.schemas.leave import (
    AvailableDaysUpdate,
    LeaveCalendarCell,
    LeaveCalendarResponse,
    LeaveEntryCreate,
    LeaveEntryResponse,
    LeaveSummary,
    WorkingDaysPreview,
)
from daybook.services import bank_holidays, leave_service
from daybook.services.calendar_utils import (
    DAY_HEADERS,
    calendar_grid,
    format_month_year,
    parse_month_key,
)
from daybook.services.leave import (
    MAX_LEAVE_SPAN_DAYS,
    can_book,
    count_working_days,
    leave_cell_status,
)

router = APIRouter(prefix="/leave", tags=["Leave"])


@router.get("/", response_model=LeaveSummary)
async def get_leave(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser = Depends(get_current_user),
):
    """Allowance, used and remaining days, and every booking."""
    record = await leave_service.load_leave(db, current_user.uid)
    return leave_service.summarize(record)


@router.put("/available-days", response_model=LeaveSummary)
async def set_available_days(
    body: AvailableDaysUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser = Depends(get_current_user),
):
    record = await leave_service.set_available_days(db, current_user.uid, body.available_days)
    return leave_service.summarize(record)


@router.post("/entries", response_model=LeaveEntryResponse, status_code=status.HTTP_201_CREATED)
async def create_entry(
    body: LeaveEntryCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser = Depends(get_current_user),
):
    """Book a leave range (weekends and bank holidays are not consumed)."""
    entry = await leave_service.add_entry(db, current_user.uid, body)
    return LeaveEntryResponse(
        **entry.model_dump(),
        working_days=count_working_days(entry.from_date, entry.to_date),
    )


@router.delete("/entries/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_entry(
    entry_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser = Depends(get_current_user),
):
    await leave_service.delete_entry(db, current_user.uid, entry_id)
    return None


@router.post("/days/{day}/tap", response_model=LeaveSummary)
async def tap_day(
    day: date,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser = Depends(get_current_user),
):
    """Quick-add a one-day booking, or remove an existing one-day booking."""
    record = await leave_service.tap_leave_day(db, current_user.uid, day)
    return leave_service.summarize(record)


@router.get("/working-days", response_model=WorkingDaysPreview)
async def preview_working_days(
    current_user: CurrentUser = Depends(get_current_user),
    from_date: date = Query(...),
    to_date: date = Query(...),
):
    """Working days a booking would consume, before it is made."""
    if to_date < from_date:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="to_date must not be earlier than from_date",
        )
    if (to_date - from_date).days >= MAX_LEAVE_SPAN_DAYS:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Leave cannot span more than {MAX_LEAVE_SPAN_DAYS} days",
        )
    return WorkingDaysPreview(
        from_date=from_date,
        to_date=to_date,
        working_days=count_working_days(from_date, to_date),
        can_book=can_book(from_date, to_date),
    )


@router.get("/calendar/{month}", response_model=LeaveCalendarResponse)
async def get_calendar(
    month: Annotated[str, Depends(valid_month)],
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser = Depends(get_current_user),
):
    """Full-week grid including the neighbouring months' days."""
    first = parse_month_key(month)
    record = await leave_service.load_leave(db, current_user.uid)
    grid = calendar_grid(first.year, first.month, spill=True)
    # One day either side so range ends at the grid edges are styled correctly
    lo = grid[0] - timedelta(days=1) if grid[0] > date.min else grid[0]
    hi = grid[-1] + timedelta(days=1) if grid[-1] < date.max else grid[-1]
    booked = leave_service.booked_days(record, lo, hi)
    single_day = {e.from_date: e.id for e in record.entries if e.from_date == e.to_date}
    today = date.today()

    cells = []
    for day in grid:
        in_month = day.month == first.month
        is_holiday = in_month and bank_holidays.is_bank_holiday(day)
        cells.append(
            LeaveCalendarCell(
                date=day,
                in_month=in_month,
                status=leave_cell_status(day, in_month, booked),
                interactive=in_month and count_working_days(day, day) == 1,
                is_today=day == today,
                bank_holiday_name=bank_holidays.holiday_name(day) if is_holiday else None,
                single_day_entry_id=single_day.get(day) if in_month else None,
            )
        )

    return LeaveCalendarResponse(
        month=month,
        month_label=format_month_year(first),
        day_headers=list(DAY_HEADERS),
        cells=cells,
    )
