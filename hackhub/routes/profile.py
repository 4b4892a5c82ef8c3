"""
Profile API Routes
"""
from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from hackhub.database import get_db
from hackhub.orm.profile import Profile
from hackhub.schemas.profile import ProfileUpdate
from hackhub.security import get_current_user
from hackhub.services import profile_service

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("")
async def get_own_profile(current_user: Profile = Depends(get_current_user)) -> Dict[str, Any]:
    return current_user.to_dict()


@router.patch("")
async def update_own_profile(
    body: ProfileUpdate,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
) -> Dict[str, Any]:
    """Update the caller's profile. `is_admin` can never be set here."""
    changes = body.model_dump(exclude_unset=True)
    changes.update(body.model_extra or {})
    profile = await profile_service.update_profile(db, current_user.id, changes)
    return profile.to_dict()


@router.get("/{user_id}")
async def get_public_profile(
    user_id: str,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
) -> Dict[str, Any]:
    profile = await profile_service.get_profile(db, user_id)
    return profile.to_summary()
