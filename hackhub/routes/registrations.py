"""
Registration API Routes

- POST  /registrations                    register the caller (rate limited)
- GET   /registrations/me                 caller's registrations
- GET   /registrations/event/{event_id}   admin: registrations of an event
- PATCH /registrations/{registration_id}  admin: change status
"""
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from hackhub.database import get_db
from hackhub.orm.profile import Profile
from hackhub.rate_limit import enforce_registration_rate_limit
from hackhub.schemas.registration import RegistrationCreate, RegistrationResponse, RegistrationStatusUpdate
from hackhub.security import get_current_user, require_admin
from hackhub.services import registration_service

router = APIRouter(prefix="/registrations", tags=["registrations"])
logger = logging.getLogger(__name__)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=RegistrationResponse)
async def create_registration(
    body: RegistrationCreate,
    current_user: Profile = Depends(enforce_registration_rate_limit),
    db: AsyncSession = Depends(get_db)
):
    """
    Register the authenticated user for an event.

    The new registration is `confirmed` while the event has free capacity,
    otherwise `waitlisted`.
    """
    registration = await registration_service.register(
        db,
        user_id=current_user.id,
        event_id=body.event_id,
        team_name=body.team_name,
        project_idea=body.project_idea,
    )
    return registration.to_dict()


@router.get("/me")
async def my_registrations(
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
) -> Dict[str, Any]:
    registrations = await registration_service.list_user_registrations(db, current_user.id)
    return {"success": True, "data": [r.to_dict() for r in registrations]}


@router.get("/event/{event_id}")
async def event_registrations(
    event_id: str,
    admin: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
) -> Dict[str, Any]:
    registrations = await registration_service.list_event_registrations(db, event_id)
    return {"success": True, "data": [r.to_dict(include_profile=True) for r in registrations]}


@router.patch("/{registration_id}", response_model=RegistrationResponse)
async def update_registration_status(
    registration_id: str,
    body: RegistrationStatusUpdate,
    admin: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    registration = await registration_service.update_registration_status(
        db, registration_id, body.status.value
    )
    logger.info(f"Admin {admin.id} set registration {registration_id} to {registration.status}")
    return registration.to_dict()
