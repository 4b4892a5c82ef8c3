"""
hackhub/routes/__init__.py
Route registration
"""
from fastapi import APIRouter

from hackhub.routes import events, leaderboard, profile, registrations, resources

router = APIRouter()

router.include_router(registrations.router)
router.include_router(leaderboard.router)
router.include_router(events.router)
router.include_router(profile.router)
router.include_router(resources.router)
