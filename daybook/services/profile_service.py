"""Profile Service.

User profiles live in the ``profiles`` collection keyed by the identity
provider's user id. Account deletion removes every document the user owns.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from daybook.core.dependencies import CurrentUser
from daybook.schemas.profile import ProfileResponse, ProfileUpdate
from daybook.services import document_store, leave_service, office_tracker_service

logger = logging.getLogger(__name__)

COLLECTION = "profiles"


async def get_profile(db: AsyncSession, user: CurrentUser) -> ProfileResponse:
    """Stored profile merged over what the identity provider asserts."""
    data = await document_store.get_document(db, COLLECTION, user.uid) or {}
    return ProfileResponse(**{"email": user.email, **data, "uid": user.uid})


async def update_profile(
    db: AsyncSession,
    user: CurrentUser,
    body: ProfileUpdate,
) -> ProfileResponse:
    """Apply the provided fields to the stored profile.

    Fields sent as an explicit null are removed from the document.
    """
    data = await document_store.get_document(db, COLLECTION, user.uid) or {}
    for field, value in body.model_dump(exclude_unset=True).items():
        if value is None:
            data.pop(field, None)
        else:
            data[field] = value
    if user.email is not None:
        data.setdefault("email", user.email)
    await document_store.set_document(db, COLLECTION, user.uid, data, merge=False)
    return await get_profile(db, user)


async def delete_account(db: AsyncSession, user: CurrentUser) -> None:
    """Remove the profile, the leave record and all office-tracker months."""
    months = await office_tracker_service.delete_all_months(db, user.uid)
    await document_store.delete_document(db, leave_service.COLLECTION, user.uid)
    await document_store.delete_document(db, COLLECTION, user.uid)
    logger.info("Deleted account data for %s (%d tracked months)", user.uid, months)
