"""
Profile API Schemas (Pydantic)
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ProfileUpdate(BaseModel):
    """
    Self-service profile update.

    Unknown keys are kept so the service can refuse an `is_admin` change
    explicitly instead of silently dropping it.
    """
    model_config = ConfigDict(extra="allow")

    username: Optional[str] = Field(None, min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_.-]+$")
    full_name: Optional[str] = Field(None, max_length=200)
    avatar_url: Optional[str] = Field(None, max_length=500)
    github_url: Optional[str] = Field(None, max_length=500)
    bio: Optional[str] = Field(None, max_length=2000)
    skills: Optional[List[str]] = None
