"""
Event API Schemas (Pydantic)
"""
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator


class EventBase(BaseModel):
    description: Optional[str] = None
    registration_open: bool = True
    image_urls: List[str] = Field(default_factory=list)
    themes: List[str] = Field(default_factory=list)
    prizes: Optional[Any] = None


class EventCreate(EventBase):
    """Request schema for creating an event."""
    title: str = Field(..., min_length=1, max_length=255)
    location: str = Field(..., min_length=1, max_length=255)
    start_date: datetime
    end_date: datetime
    max_participants: int = Field(..., gt=0)

    @field_validator("title", "location")
    @classmethod
    def strip_text(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class EventUpdate(BaseModel):
    """Partial update; only fields present in the body are applied."""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    location: Optional[str] = Field(None, min_length=1, max_length=255)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    max_participants: Optional[int] = Field(None, gt=0)
    registration_open: Optional[bool] = None
    image_urls: Optional[List[str]] = None
    themes: Optional[List[str]] = None
    prizes: Optional[Any] = None
