"""Profile router."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from daybook.core.dependencies import CurrentUser, get_current_user
from daybook.core.rate_limit import limiter
from daybook.database import get_db
from daybook.schemas.profile import ProfileResponse, ProfileUpdate
from daybook.services import profile_service

router = APIRouter(prefix="/profile", tags=["Profile"])


@router.get("/", response_model=ProfileResponse)
async def get_profile(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser = Depends(get_current_user),
):
    return await profile_service.get_profile(db, current_user)


@router.put("/", response_model=ProfileResponse)
async def update_profile(
    body: ProfileUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser = Depends(get_current_user),
):
    """Update display name, company, role, country or photo."""
    return await profile_service.update_profile(db, current_user, body)


@router.delete("/", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit("5/minute")
async def delete_account(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser = Depends(get_current_user),
) -> None:
    """Delete the profile and every tracker and leave record of the user."""
    await profile_service.delete_account(db, current_user)
