from datetime import date

from pydantic import BaseModel, Field, model_validator

from daybook.services.compliance import ComplianceResult, ComplianceStatus, DayStatus, ExclusionType

# Year 0000 is not a valid date year
MONTH_KEY_PATTERN = r"^([1-9]\d{3}|0[1-9]\d{2}|00[1-9]\d|000[1-9])-(0[1-9]|1[0-2])$"


class OfficeTrackerRecord(BaseModel):
    """Stored shape of one user's month."""

    user_id: str
    month: str = Field(pattern=MONTH_KEY_PATTERN)
    required_percentage: int = Field(60, ge=0, le=100)
    exclude_weekends: bool = True
    exclude_bank_holidays: bool = True
    office_days: list[date] = []
    excluded_days: dict[date, ExclusionType] = {}


class OfficeTrackerUpdate(BaseModel):
    """Full replacement of a month's tracker data."""

    required_percentage: int = Field(ge=0, le=100)
    exclude_weekends: bool = True
    exclude_bank_holidays: bool = True
    office_days: list[date] = []
    excluded_days: dict[date, ExclusionType] = {}

    @model_validator(mode="after")
    def _office_and_excluded_disjoint(self):
        overlap = set(self.office_days) & set(self.excluded_days)
        if overlap:
            raise ValueError(
                "Dates cannot be both office days and excluded: "
                + ", ".join(sorted(d.isoformat() for d in overlap))
            )
        return self


class OfficeTrackerSettingsUpdate(BaseModel):
    required_percentage: int | None = Field(None, ge=0, le=100)
    exclude_weekends: bool | None = None
    exclude_bank_holidays: bool | None = None


class ExclusionCreate(BaseModel):
    date: date
    type: ExclusionType = ExclusionType.EXCLUDED


class ComplianceResponse(BaseModel):
    range_start: date
    range_end: date
    range_label: str
    total_days: int
    weekend_count: int
    bank_holiday_count: int
    manual_excluded_count: int
    leave_excluded_count: int
    total_excluded: int
    working_days: int
    required_office_days: int
    selected_office_days: int
    progress_percentage: int  # 0-100
    status: ComplianceStatus
    holiday_table_covered: bool


class OfficeTrackerView(BaseModel):
    month_label: str
    record: OfficeTrackerRecord
    compliance: ComplianceResponse


class OfficeCalendarCell(BaseModel):
    """One grid slot; ``date`` is None for padding before/after the month."""

    date: date | None
    status: DayStatus | None = None
    interactive: bool = False
    is_today: bool = False
    bank_holiday_name: str | None = None


class OfficeCalendarResponse(BaseModel):
    month: str
    month_label: str
    day_headers: list[str]
    cells: list[OfficeCalendarCell]


def compliance_response(result: ComplianceResult, range_label: str) -> ComplianceResponse:
    return ComplianceResponse(
        range_start=result.range_start,
        range_end=result.range_end,
        range_label=range_label,
        total_days=result.total_days,
        weekend_count=result.weekend_count,
        bank_holiday_count=result.bank_holiday_count,
        manual_excluded_count=result.manual_excluded_count,
        leave_excluded_count=result.leave_excluded_count,
        total_excluded=result.total_excluded,
        working_days=result.working_days,
        required_office_days=result.required_office_days,
        selected_office_days=result.selected_office_days,
        progress_percentage=result.progress_percentage,
        status=result.status,
        holiday_table_covered=result.holiday_table_covered,
    )
