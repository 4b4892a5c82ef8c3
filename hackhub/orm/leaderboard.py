"""
hackhub/orm/leaderboard.py
Per-event score and derived rank
"""
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, CheckConstraint, UniqueConstraint, Index
from sqlalchemy.orm import relationship

from hackhub.core.db_types import new_uuid, utcnow
from hackhub.orm.base import Base


class LeaderboardEntry(Base):
    """
    Score of one user in one event.

    `rank` is derived by the rank recalculator from every score of the
    event. Clients never set it directly.
    """
    __tablename__ = "leaderboard"

    id = Column(String(36), primary_key=True, default=new_uuid)

    event_id = Column(
        String(36),
        ForeignKey("events.id", ondelete="CASCADE"),
        nullable=False
    )
    user_id = Column(
        String(36),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    score = Column(Integer, nullable=False, default=0)
    rank = Column(Integer, nullable=False, default=0)

    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    profile = relationship("Profile", lazy="raise")

    __table_args__ = (
        UniqueConstraint("event_id", "user_id", name="leaderboard_event_user_unique"),
        CheckConstraint("score >= 0", name="check_leaderboard_score"),
        CheckConstraint("rank >= 0", name="check_leaderboard_rank"),
        Index("idx_leaderboard_event_rank", "event_id", "rank"),
    )

    def __repr__(self):
        return f"<LeaderboardEntry(event={self.event_id}, user={self.user_id}, score={self.score}, rank={self.rank})>"

    def to_dict(self, include_profile: bool = False):
        data = {
            "id": self.id,
            "event_id": self.event_id,
            "user_id": self.user_id,
            "score": self.score,
            "rank": self.rank,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
        if include_profile:
            profile = self.profile
            data["username"] = profile.username if profile else None
            data["full_name"] = profile.full_name if profile else None
            data["avatar_url"] = profile.avatar_url if profile else None
        return data
