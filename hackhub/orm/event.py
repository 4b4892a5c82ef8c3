"""
hackhub/orm/event.py
Hackathon event with capacity and registration settings
"""
from datetime import datetime
from enum import Enum as PyEnum
from typing import Optional

from sqlalchemy import Column, String, Integer, Boolean, DateTime, Text, CheckConstraint

from hackhub.core.db_types import UniversalJSON, new_uuid, utcnow
from hackhub.orm.base import Base


class EventStatus(str, PyEnum):
    """Display status derived from the event's start/end dates"""
    UPCOMING = "upcoming"
    LIVE = "live"
    PAST = "past"


class Event(Base):
    """
    Hackathon event.

    Deleting an event removes its registrations and leaderboard entries
    (ON DELETE CASCADE on both child tables).
    """
    __tablename__ = "events"

    id = Column(String(36), primary_key=True, default=new_uuid)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    location = Column(String(255), nullable=False)

    start_date = Column(DateTime, nullable=False, index=True)
    end_date = Column(DateTime, nullable=False)

    max_participants = Column(Integer, nullable=False)
    registration_open = Column(Boolean, nullable=False, default=True)

    image_urls = Column(UniversalJSON, nullable=False, default=list)
    themes = Column(UniversalJSON, nullable=False, default=list)
    prizes = Column(UniversalJSON, nullable=True)

    created_at = Column(DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        CheckConstraint("max_participants > 0", name="check_max_participants_positive"),
    )

    def __repr__(self):
        return f"<Event(id={self.id}, title='{self.title}', max={self.max_participants})>"

    def status_at(self, now: Optional[datetime] = None) -> EventStatus:
        now = now or utcnow()
        if now < self.start_date:
            return EventStatus.UPCOMING
        if now > self.end_date:
            return EventStatus.PAST
        return EventStatus.LIVE

    def to_dict(self, participant_count: Optional[int] = None):
        data = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "location": self.location,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "max_participants": self.max_participants,
            "registration_open": self.registration_open,
            "image_urls": self.image_urls or [],
            "themes": self.themes or [],
            "prizes": self.prizes,
            "status": self.status_at().value,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
        if participant_count is not None:
            data["participant_count"] = participant_count
        return data
