"""
Profile Service

Self-service profile reads and updates.
"""
import logging
from typing import Any, Dict

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hackhub.errors import AuthorizationError, ConflictError, ErrorCode, HackHubError, NotFoundError, StorageError, ValidationError
from hackhub.orm.profile import Profile

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = {"username", "full_name", "avatar_url", "github_url", "bio", "skills"}


async def get_profile(db: AsyncSession, user_id: str) -> Profile:
    try:
        result = await db.execute(select(Profile).where(Profile.id == user_id))
        profile = result.scalar_one_or_none()
    except SQLAlchemyError as e:
        raise StorageError("get_profile", e) from e
    if not profile:
        raise NotFoundError("Profile", user_id, code=ErrorCode.PROFILE_NOT_FOUND)
    return profile


async def update_profile(db: AsyncSession, user_id: str, changes: Dict[str, Any]) -> Profile:
    """
    Update the caller's own profile.

    Raises:
        AuthorizationError: the payload tries to change is_admin
        ConflictError: username already taken by another profile
    """
    if "is_admin" in changes:
        raise AuthorizationError("Cannot modify admin status", code=ErrorCode.FORBIDDEN)

    if "username" in changes and not changes["username"]:
        raise ValidationError("username cannot be empty", field="username")

    profile = await get_profile(db, user_id)

    try:
        username = changes.get("username")
        if username and username != profile.username:
            taken = await db.execute(
                select(Profile.id).where(Profile.username == username, Profile.id != user_id)
            )
            if taken.scalar_one_or_none() is not None:
                raise ConflictError("Username already taken", code=ErrorCode.USERNAME_TAKEN)

        for key, value in changes.items():
            if key in EDITABLE_FIELDS:
                setattr(profile, key, value)
        await db.commit()
    except HackHubError:
        await db.rollback()
        raise
    except IntegrityError as e:
        # Username claimed concurrently
        await db.rollback()
        raise ConflictError("Username already taken", code=ErrorCode.USERNAME_TAKEN) from e
    except SQLAlchemyError as e:
        await db.rollback()
        raise StorageError("update_profile", e) from e

    logger.info(f"[PROFILE UPDATED] id={user_id}")
    return profile
