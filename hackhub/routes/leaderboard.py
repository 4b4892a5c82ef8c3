"""
Leaderboard API Routes
"""
from typing import Any, Dict

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from hackhub.database import get_db
from hackhub.orm.profile import Profile
from hackhub.schemas.leaderboard import LeaderboardEntryResponse, LeaderboardUpsert
from hackhub.security import get_current_user, require_admin
from hackhub.services import leaderboard_service

router = APIRouter(prefix="/leaderboard", tags=["leaderboard"])


@router.post("", status_code=status.HTTP_201_CREATED, response_model=LeaderboardEntryResponse)
async def upsert_score(
    body: LeaderboardUpsert,
    admin: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Set a participant's score; ranks of the whole event are recalculated."""
    entry = await leaderboard_service.upsert_entry(db, body.event_id, body.user_id, body.score)
    return entry.to_dict()


@router.get("/{event_id}")
async def get_event_leaderboard(
    event_id: str,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
) -> Dict[str, Any]:
    entries = await leaderboard_service.get_leaderboard(db, event_id)
    return {
        "success": True,
        "event_id": event_id,
        "data": [entry.to_dict(include_profile=True) for entry in entries],
    }
