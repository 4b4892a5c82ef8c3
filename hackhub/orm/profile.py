"""
hackhub/orm/profile.py
Participant profile. The primary key is the identity provider's subject id.
"""
from sqlalchemy import Column, String, Boolean, DateTime, Text

from hackhub.core.db_types import UniversalJSON, new_uuid, utcnow
from hackhub.orm.base import Base


class Profile(Base):
    """
    Profile of a platform user.

    `is_admin` grants the admin capability (event management, registration
    status changes, leaderboard upserts). It is never writable through the
    self-service profile update.
    """
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, default=new_uuid)

    username = Column(String(50), nullable=False, unique=True, index=True)
    full_name = Column(String(200), nullable=True)
    email = Column(String(255), nullable=True, unique=True, index=True)

    avatar_url = Column(String(500), nullable=True)
    github_url = Column(String(500), nullable=True)
    bio = Column(Text, nullable=True)
    skills = Column(UniversalJSON, nullable=False, default=list)

    is_admin = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<Profile(id={self.id}, username='{self.username}', admin={self.is_admin})>"

    def to_summary(self):
        """Public fields shown next to registrations and leaderboard rows."""
        return {
            "id": self.id,
            "username": self.username,
            "full_name": self.full_name,
            "avatar_url": self.avatar_url,
            "github_url": self.github_url,
            "skills": self.skills or [],
        }

    def to_dict(self):
        data = self.to_summary()
        data.update({
            "email": self.email,
            "bio": self.bio,
            "is_admin": self.is_admin,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        })
        return data
