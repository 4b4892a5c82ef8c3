"""
Registration Service

Capacity-aware event registration.

Core Principles:
- One registration per (user, event), enforced twice: a read-side guard and
  the store's unique constraint
- Status is decided from confirmed count vs. max_participants at insert time
- Duplicate check, status decision and insert run as one serialized unit per
  event
- Notification is best-effort and never rolls back a committed registration
"""
import logging
from typing import List, Optional

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from hackhub import notifications
from hackhub.core.locks import event_lock
from hackhub.errors import (
    DuplicateRegistrationError,
    ErrorCode,
    HackHubError,
    NotFoundError,
    RegistrationClosedError,
    StorageError,
    ValidationError,
)
from hackhub.orm.event import Event
from hackhub.orm.registration import Registration, RegistrationStatus

logger = logging.getLogger(__name__)

REGISTRATION_CREATED = "registration_created"


def _require_text(value: Optional[str], field_name: str) -> str:
    """Trimmed value, or ValidationError when empty/whitespace."""
    if value is None or not isinstance(value, str) or value.strip() == "":
        raise ValidationError(f"{field_name} cannot be empty", field=field_name)
    return value.strip()


# =============================================================================
# Capacity Counter / Duplicate Guard / Status Resolver
# =============================================================================

async def confirmed_count(db: AsyncSession, event_id: str) -> int:
    """Number of confirmed registrations for the event."""
    try:
        result = await db.execute(
            select(func.count(Registration.id))
            .where(
                Registration.event_id == event_id,
                Registration.status == RegistrationStatus.CONFIRMED.value
            )
        )
    except SQLAlchemyError as e:
        raise StorageError("confirmed_count", e) from e
    return result.scalar() or 0


async def has_existing_registration(db: AsyncSession, user_id: str, event_id: str) -> bool:
    """True if the user holds any registration for the event, whatever its status."""
    try:
        result = await db.execute(
            select(Registration.id)
            .where(
                Registration.user_id == user_id,
                Registration.event_id == event_id
            )
            .limit(1)
        )
    except SQLAlchemyError as e:
        raise StorageError("has_existing_registration", e) from e
    return result.scalar_one_or_none() is not None


async def resolve_status(db: AsyncSession, event_id: str) -> RegistrationStatus:
    """
    Decide the status a new registration would get right now.

    Read-decide only. Callers that insert must hold the event lock.

    Raises:
        NotFoundError: event does not exist
    """
    try:
        result = await db.execute(select(Event.max_participants).where(Event.id == event_id))
        max_participants = result.scalar_one_or_none()
    except SQLAlchemyError as e:
        raise StorageError("resolve_status", e) from e

    if max_participants is None:
        raise NotFoundError("Event", event_id, code=ErrorCode.EVENT_NOT_FOUND)

    current = await confirmed_count(db, event_id)
    if current < max_participants:
        return RegistrationStatus.CONFIRMED
    return RegistrationStatus.WAITLISTED


async def _lock_event(db: AsyncSession, event_id: str) -> Optional[Event]:
    """Load the event with a row lock (no-op on SQLite)."""
    try:
        result = await db.execute(
            select(Event).where(Event.id == event_id).with_for_update()
        )
    except SQLAlchemyError as e:
        raise StorageError("load_event", e) from e
    return result.scalar_one_or_none()


# =============================================================================
# Registration Creator
# =============================================================================

async def register(
    db: AsyncSession,
    user_id: str,
    event_id: str,
    team_name: str,
    project_idea: str,
    notifier=None,
) -> Registration:
    """
    Create a registration for the user, confirmed or waitlisted by capacity.

    Checks, in order: non-empty team_name/project_idea, event exists and is
    open, no existing registration. Commits before returning.

    Raises:
        ValidationError, NotFoundError, RegistrationClosedError,
        DuplicateRegistrationError, StorageError
    """
    logger.info(f"[REGISTRATION START] event={event_id} user={user_id}")

    team_name = _require_text(team_name, "team_name")
    project_idea = _require_text(project_idea, "project_idea")

    async with event_lock(event_id):
        try:
            event = await _lock_event(db, event_id)
            if not event:
                raise NotFoundError("Event", event_id, code=ErrorCode.EVENT_NOT_FOUND)
            if not event.registration_open:
                raise RegistrationClosedError(event_id)

            if await has_existing_registration(db, user_id, event_id):
                raise DuplicateRegistrationError(user_id, event_id)

            status = await resolve_status(db, event_id)

            registration = Registration(
                user_id=user_id,
                event_id=event_id,
                team_name=team_name,
                project_idea=project_idea,
                status=status.value,
            )
            db.add(registration)
            await db.flush()
            await db.commit()

        except IntegrityError as e:
            await db.rollback()
            # Lost a race against another process: the unique constraint decides
            if await has_existing_registration(db, user_id, event_id):
                logger.warning(f"[RACE] duplicate registration rejected by store: event={event_id} user={user_id}")
                raise DuplicateRegistrationError(user_id, event_id) from e
            raise StorageError("register", e) from e
        except HackHubError:
            await db.rollback()
            raise
        except SQLAlchemyError as e:
            await db.rollback()
            raise StorageError("register", e) from e

    logger.info(f"[REGISTRATION SUCCESS] event={event_id} user={user_id} -> {registration.status}")

    notifications.dispatch(
        notifier or notifications.default_notifier(),
        REGISTRATION_CREATED,
        registration.to_dict(),
    )

    return registration


# =============================================================================
# Reads and admin operations
# =============================================================================

async def list_user_registrations(db: AsyncSession, user_id: str) -> List[Registration]:
    try:
        result = await db.execute(
            select(Registration)
            .where(Registration.user_id == user_id)
            .order_by(Registration.created_at.desc())
        )
    except SQLAlchemyError as e:
        raise StorageError("list_user_registrations", e) from e
    return list(result.scalars().all())


async def list_event_registrations(db: AsyncSession, event_id: str) -> List[Registration]:
    """All registrations of an event with participant profiles, newest first."""
    try:
        exists = await db.execute(select(Event.id).where(Event.id == event_id))
        if exists.scalar_one_or_none() is None:
            raise NotFoundError("Event", event_id, code=ErrorCode.EVENT_NOT_FOUND)

        result = await db.execute(
            select(Registration)
            .options(selectinload(Registration.profile))
            .where(Registration.event_id == event_id)
            .order_by(Registration.created_at.desc())
        )
    except SQLAlchemyError as e:
        raise StorageError("list_event_registrations", e) from e
    return list(result.scalars().all())


async def update_registration_status(db: AsyncSession, registration_id: str, status: str) -> Registration:
    """Admin-only status change. No capacity re-evaluation happens here."""
    allowed = [s.value for s in RegistrationStatus]
    if status not in allowed:
        raise ValidationError(
            f"Invalid status. Must be one of: {', '.join(allowed)}",
            field="status"
        )

    try:
        result = await db.execute(select(Registration).where(Registration.id == registration_id))
        registration = result.scalar_one_or_none()
        if not registration:
            raise NotFoundError("Registration", registration_id, code=ErrorCode.REGISTRATION_NOT_FOUND)

        previous = registration.status
        registration.status = status
        await db.commit()
    except HackHubError:
        await db.rollback()
        raise
    except SQLAlchemyError as e:
        await db.rollback()
        raise StorageError("update_registration_status", e) from e

    logger.info(f"[REGISTRATION STATUS] id={registration_id} {previous} -> {status}")
    return registration
