"""
hackhub/orm/registration.py
A user's registration for an event
"""
from enum import Enum as PyEnum

from sqlalchemy import Column, String, DateTime, Text, ForeignKey, CheckConstraint, UniqueConstraint
from sqlalchemy.orm import relationship

from hackhub.core.db_types import new_uuid, utcnow
from hackhub.orm.base import Base


class RegistrationStatus(str, PyEnum):
    PENDING = "pending"
    CONFIRMED = "confirmed"        # counted against event capacity
    WAITLISTED = "waitlisted"      # over capacity at insert time


REGISTRATION_UNIQUE_CONSTRAINT = "registrations_user_event_unique"


class Registration(Base):
    """
    One row per (user, event). The unique constraint is the last line of
    defense against concurrent duplicate registrations.
    """
    __tablename__ = "registrations"

    id = Column(String(36), primary_key=True, default=new_uuid)

    user_id = Column(
        String(36),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    event_id = Column(
        String(36),
        ForeignKey("events.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    team_name = Column(String(255), nullable=False)
    project_idea = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, default=RegistrationStatus.PENDING.value, index=True)

    created_at = Column(DateTime, nullable=False, default=utcnow)

    profile = relationship("Profile", lazy="raise")

    __table_args__ = (
        UniqueConstraint("user_id", "event_id", name=REGISTRATION_UNIQUE_CONSTRAINT),
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'waitlisted')",
            name="check_registration_status"
        ),
    )

    def __repr__(self):
        return f"<Registration(id={self.id}, user={self.user_id}, event={self.event_id}, status={self.status})>"

    def to_dict(self, include_profile: bool = False):
        data = {
            "id": self.id,
            "user_id": self.user_id,
            "event_id": self.event_id,
            "team_name": self.team_name,
            "project_idea": self.project_idea,
            "status": self.status,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
        if include_profile:
            data["profile"] = self.profile.to_summary() if self.profile else None
        return data
