from datetime import date

from pydantic import BaseModel


class BankHolidayResponse(BaseModel):
    date: date
    name: str


class BankHolidayListResponse(BaseModel):
    year: int
    division: str
    version: str
    covered: bool  # False once the year is past the table's horizon
    holidays: list[BankHolidayResponse]
