"""
Event Service

Event listing with display-status filters and pagination, plus admin
create/update/delete.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import select, func, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hackhub.core.db_types import to_naive_utc, utcnow
from hackhub.core.locks import event_lock
from hackhub.errors import ErrorCode, HackHubError, NotFoundError, StorageError, ValidationError
from hackhub.orm.event import Event, EventStatus
from hackhub.orm.leaderboard import LeaderboardEntry
from hackhub.orm.registration import Registration, RegistrationStatus

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100

EDITABLE_FIELDS = {
    "title", "description", "location", "start_date", "end_date",
    "max_participants", "registration_open", "image_urls", "themes", "prizes",
}
REQUIRED_FIELDS = {"title", "location", "start_date", "end_date", "max_participants", "registration_open"}


def validate_pagination(page: int, limit: int, max_limit: int = MAX_PAGE_SIZE):
    if page < 1 or limit < 1 or limit > max_limit:
        raise ValidationError(
            f"Invalid pagination parameters. Page must be >= 1, limit must be between 1 and {max_limit}",
            details={"page": page, "limit": limit}
        )


def _status_filter(status: EventStatus, now):
    if status == EventStatus.UPCOMING:
        return Event.start_date > now
    if status == EventStatus.PAST:
        return Event.end_date < now
    return (Event.start_date <= now) & (Event.end_date >= now)


def _check_dates(start_date, end_date):
    if start_date and end_date and end_date < start_date:
        raise ValidationError("end_date must be on or after start_date", field="end_date")


async def participant_counts(db: AsyncSession, event_ids: List[str]) -> Dict[str, int]:
    """Confirmed registration count per event id."""
    if not event_ids:
        return {}
    result = await db.execute(
        select(Registration.event_id, func.count(Registration.id))
        .where(
            Registration.event_id.in_(event_ids),
            Registration.status == RegistrationStatus.CONFIRMED.value
        )
        .group_by(Registration.event_id)
    )
    counts = {event_id: count for event_id, count in result.all()}
    return {event_id: counts.get(event_id, 0) for event_id in event_ids}


async def list_events(
    db: AsyncSession,
    status: Optional[str] = None,
    page: int = 1,
    limit: int = 20,
) -> Tuple[List[Dict[str, Any]], int]:
    """
    Events ordered by start date, optionally filtered by display status.

    Returns:
        (event dicts with participant_count, total matching events)
    """
    validate_pagination(page, limit)

    conditions = []
    if status:
        try:
            status_value = EventStatus(status)
        except ValueError:
            raise ValidationError("Invalid status filter. Must be live, upcoming, or past", field="status")
        conditions.append(_status_filter(status_value, utcnow()))

    try:
        total_result = await db.execute(select(func.count(Event.id)).where(*conditions))
        total = total_result.scalar() or 0

        result = await db.execute(
            select(Event)
            .where(*conditions)
            .order_by(Event.start_date.asc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        events = list(result.scalars().all())
        counts = await participant_counts(db, [e.id for e in events])
    except SQLAlchemyError as e:
        raise StorageError("list_events", e) from e

    return [e.to_dict(participant_count=counts[e.id]) for e in events], total


async def get_event(db: AsyncSession, event_id: str) -> Event:
    try:
        result = await db.execute(select(Event).where(Event.id == event_id))
        event = result.scalar_one_or_none()
    except SQLAlchemyError as e:
        raise StorageError("get_event", e) from e
    if not event:
        raise NotFoundError("Event", event_id, code=ErrorCode.EVENT_NOT_FOUND)
    return event


async def get_event_detail(db: AsyncSession, event_id: str) -> Dict[str, Any]:
    """Single event with its confirmed participant count and display status."""
    event = await get_event(db, event_id)
    try:
        counts = await participant_counts(db, [event.id])
    except SQLAlchemyError as e:
        raise StorageError("get_event_detail", e) from e
    return event.to_dict(participant_count=counts[event.id])


async def create_event(db: AsyncSession, data: Dict[str, Any]) -> Event:
    fields = {k: v for k, v in data.items() if k in EDITABLE_FIELDS}
    for key in ("start_date", "end_date"):
        if fields.get(key) is not None:
            fields[key] = to_naive_utc(fields[key])
    _check_dates(fields.get("start_date"), fields.get("end_date"))

    event = Event(**fields)
    try:
        db.add(event)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        raise StorageError("create_event", e) from e

    logger.info(f"[EVENT CREATED] id={event.id} title='{event.title}' max={event.max_participants}")
    return event


async def update_event(db: AsyncSession, event_id: str, changes: Dict[str, Any]) -> Event:
    """Apply a partial update. Capacity changes do not re-evaluate existing registrations."""
    event = await get_event(db, event_id)

    updates = {}
    for key, value in changes.items():
        if key not in EDITABLE_FIELDS:
            continue
        if value is None and key in REQUIRED_FIELDS:
            raise ValidationError(f"{key} cannot be null", field=key)
        if key in ("start_date", "end_date") and value is not None:
            value = to_naive_utc(value)
        updates[key] = value
    _check_dates(updates.get("start_date", event.start_date), updates.get("end_date", event.end_date))

    for key, value in updates.items():
        setattr(event, key, value)

    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        raise StorageError("update_event", e) from e

    logger.info(f"[EVENT UPDATED] id={event_id} fields={sorted(updates)}")
    return event


async def delete_event(db: AsyncSession, event_id: str) -> None:
    """Delete the event together with its registrations and leaderboard entries."""
    async with event_lock(event_id):
        try:
            result = await db.execute(
                select(Event).where(Event.id == event_id).with_for_update()
            )
            if result.scalar_one_or_none() is None:
                raise NotFoundError("Event", event_id, code=ErrorCode.EVENT_NOT_FOUND)
            await db.execute(delete(Registration).where(Registration.event_id == event_id))
            await db.execute(delete(LeaderboardEntry).where(LeaderboardEntry.event_id == event_id))
            await db.execute(delete(Event).where(Event.id == event_id))
            await db.commit()
        except HackHubError:
            await db.rollback()
            raise
        except SQLAlchemyError as e:
            await db.rollback()
            raise StorageError("delete_event", e) from e

    logger.info(f"[EVENT DELETED] id={event_id}")
