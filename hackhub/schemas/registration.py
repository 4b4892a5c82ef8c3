"""
Registration API Schemas (Pydantic)
"""
from typing import Optional

from pydantic import BaseModel, Field

from hackhub.orm.registration import RegistrationStatus


class RegistrationCreate(BaseModel):
    """Request schema for registering the caller for an event."""
    event_id: str = Field(..., min_length=1, max_length=36)
    # Blank values are rejected by the service after trimming
    team_name: str = Field(..., max_length=255)
    project_idea: str = Field(..., max_length=5000)


class RegistrationStatusUpdate(BaseModel):
    status: RegistrationStatus


class RegistrationResponse(BaseModel):
    id: str
    user_id: str
    event_id: str
    team_name: str
    project_idea: str
    status: str
    created_at: Optional[str] = None
