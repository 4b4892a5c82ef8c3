from .base import Base

from .profile import Profile
from .event import Event, EventStatus
from .registration import Registration, RegistrationStatus
from .leaderboard import LeaderboardEntry
from .resource import Resource


__all__ = [
    "Base",
    "Profile",
    "Event",
    "EventStatus",
    "Registration",
    "RegistrationStatus",
    "LeaderboardEntry",
    "Resource",
]
