"""
Leaderboard API Schemas (Pydantic)
"""
from typing import Optional

from pydantic import BaseModel, Field, StrictInt


class LeaderboardUpsert(BaseModel):
    """Admin request to set a participant's score. Ranks are always derived."""
    event_id: str = Field(..., min_length=1, max_length=36)
    user_id: str = Field(..., min_length=1, max_length=36)
    score: StrictInt = Field(..., ge=0)


class LeaderboardEntryResponse(BaseModel):
    id: str
    event_id: str
    user_id: str
    score: int
    rank: int
    updated_at: Optional[str] = None
    username: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
