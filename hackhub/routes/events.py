"""
Event API Routes

Listing and detail are public. Create, update and delete need the admin
capability.
"""
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from hackhub.database import get_db
from hackhub.orm.profile import Profile
from hackhub.schemas.event import EventCreate, EventUpdate
from hackhub.security import require_admin
from hackhub.services import event_service

router = APIRouter(prefix="/events", tags=["events"])
logger = logging.getLogger(__name__)


@router.get("")
async def list_events(
    status_filter: Optional[str] = Query(None, alias="status"),
    page: int = Query(1),
    limit: int = Query(20),
    db: AsyncSession = Depends(get_db)
) -> Dict[str, Any]:
    """
    List events ordered by start date.

    Query params:
    - status: live | upcoming | past
    - page: Page number (1-indexed)
    - limit: Results per page (max 100)
    """
    events, total = await event_service.list_events(db, status=status_filter, page=page, limit=limit)
    total_pages = (total + limit - 1) // limit if total > 0 else 0
    return {
        "data": events,
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "total_pages": total_pages,
        }
    }


@router.get("/{event_id}")
async def get_event(event_id: str, db: AsyncSession = Depends(get_db)) -> Dict[str, Any]:
    return await event_service.get_event_detail(db, event_id)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_event(
    body: EventCreate,
    admin: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
) -> Dict[str, Any]:
    event = await event_service.create_event(db, body.model_dump())
    return event.to_dict(participant_count=0)


@router.patch("/{event_id}")
async def update_event(
    event_id: str,
    body: EventUpdate,
    admin: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
) -> Dict[str, Any]:
    await event_service.update_event(db, event_id, body.model_dump(exclude_unset=True))
    return await event_service.get_event_detail(db, event_id)


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_event(
    event_id: str,
    admin: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    await event_service.delete_event(db, event_id)
    logger.info(f"Admin {admin.id} deleted event {event_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
