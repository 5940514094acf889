"""Bank Holidays router."""

from datetime import date

from fastapi import APIRouter, Depends, Query

from daybook.core.dependencies import CurrentUser, get_current_user
from daybook.schemas.bank_holiday import BankHolidayListResponse, BankHolidayResponse
from daybook.services import bank_holidays

router = APIRouter(prefix="/bank-holidays", tags=["Bank Holidays"])


@router.get("/", response_model=BankHolidayListResponse)
async def list_bank_holidays(
    current_user: CurrentUser = Depends(get_current_user),
    year: int | None = Query(None, ge=1900, le=2999, description="Defaults to the current year"),
):
    """England & Wales bank holidays for one year."""
    year = year or date.today().year
    table = bank_holidays.get_table()
    return BankHolidayListResponse(
        year=year,
        division=table.division,
        version=table.version,
        covered=table.first_year <= year <= table.last_year,
        holidays=[
            BankHolidayResponse(date=d, name=name)
            for d, name in bank_holidays.bank_holidays_for_year(year)
        ],
    )
