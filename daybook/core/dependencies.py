from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, HTTPException, Path, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError

from daybook.core.security import decode_token
from daybook.schemas.office_tracker import MONTH_KEY_PATTERN
from daybook.services.calendar_utils import calendar_grid, parse_month_key

# Tokens come from the external identity provider; the URL is documentation only.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token", auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    """Identity of the caller as asserted by the identity provider."""

    uid: str
    email: str | None = None


async def get_current_user(
    token: Annotated[str | None, Depends(oauth2_scheme)],
) -> CurrentUser:
    """Extract and validate the JWT from the Authorization header.

    Raises:
        HTTPException 401: If the token is missing, invalid, or has no subject.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if not token:
        raise credentials_exception

    try:
        payload = decode_token(token)
    except JWTError:
        raise credentials_exception

    user_id = payload.get("sub")
    if not isinstance(user_id, str) or not user_id:
        raise credentials_exception

    return CurrentUser(uid=user_id, email=payload.get("email"))


async def valid_month(
    month: Annotated[str, Path(pattern=MONTH_KEY_PATTERN, description="YYYY-MM")],
) -> str:
    """A ``YYYY-MM`` path key whose month and calendar grid are representable.

    Raises:
        HTTPException 422: If the month (or its spilled grid) falls outside
            the supported date range.
    """
    try:
        first = parse_month_key(month)
        calendar_grid(first.year, first.month, spill=True)
    except (ValueError, OverflowError):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Month {month} is out of range",
        )
    return month
