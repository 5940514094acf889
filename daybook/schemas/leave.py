from datetime import date

from pydantic import BaseModel, Field, model_validator

from daybook.services.leave import MAX_LEAVE_SPAN_DAYS, LeaveCellStatus


class LeaveEntry(BaseModel):
    id: str
    from_date: date
    to_date: date
    note: str | None = None


class LeaveEntryCreate(BaseModel):
    from_date: date
    to_date: date
    note: str | None = Field(None, max_length=200)

    @model_validator(mode="after")
    def _to_not_before_from(self):
        if self.to_date < self.from_date:
            raise ValueError("to_date must not be earlier than from_date")
        if (self.to_date - self.from_date).days >= MAX_LEAVE_SPAN_DAYS:
            raise ValueError(f"Leave cannot span more than {MAX_LEAVE_SPAN_DAYS} days")
        if self.note is not None:
            self.note = self.note.strip() or None
        return self


class LeaveRecord(BaseModel):
    """Stored shape of a user's leave allowance and bookings."""

    available_days: int = Field(25, ge=0)
    entries: list[LeaveEntry] = []


class AvailableDaysUpdate(BaseModel):
    available_days: int = Field(ge=0)


class LeaveEntryResponse(LeaveEntry):
    working_days: int


class LeaveSummary(BaseModel):
    available_days: int
    used_days: int
    remaining_days: int  # may be negative when over-booked
    entries: list[LeaveEntryResponse]


class WorkingDaysPreview(BaseModel):
    from_date: date
    to_date: date
    working_days: int
    can_book: bool


class LeaveCalendarCell(BaseModel):
    date: date
    in_month: bool
    status: LeaveCellStatus
    interactive: bool
    is_today: bool = False
    bank_holiday_name: str | None = None
    single_day_entry_id: str | None = None


class LeaveCalendarResponse(BaseModel):
    month: str
    month_label: str
    day_headers: list[str]
    cells: list[LeaveCalendarCell]
