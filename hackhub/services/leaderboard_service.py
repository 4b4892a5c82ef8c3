"""
Leaderboard Service

Score upserts and rank derivation for event leaderboards.

Ranks are never written by clients. Every upsert recalculates the ranks of
the whole event in the same transaction, serialized per event.

Ranking schemes (ties always share a rank):
- competition: next distinct score gets its 1-based position   -> 1, 1, 3
- dense:       next distinct score gets previous rank + 1       -> 1, 1, 2
"""
import logging
from typing import List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from hackhub.config import settings
from hackhub.core.locks import event_lock
from hackhub.errors import ErrorCode, HackHubError, NotFoundError, StorageError, ValidationError
from hackhub.orm.event import Event
from hackhub.orm.leaderboard import LeaderboardEntry
from hackhub.orm.profile import Profile

logger = logging.getLogger(__name__)

COMPETITION = "competition"
DENSE = "dense"
RANKING_SCHEMES = (COMPETITION, DENSE)


def assign_ranks(scores: Sequence[int], scheme: str = COMPETITION) -> List[int]:
    """
    Pure function: ranks for `scores`, aligned with the input order.

    >>> assign_ranks([50, 80, 80, 30])
    [3, 1, 1, 4]
    >>> assign_ranks([50, 80, 80, 30], scheme="dense")
    [2, 1, 1, 3]
    """
    if scheme not in RANKING_SCHEMES:
        raise ValueError(f"Unknown ranking scheme: {scheme}")

    order = sorted(range(len(scores)), key=lambda i: -scores[i])
    ranks = [0] * len(scores)

    previous_score = None
    current_rank = 0
    for position, index in enumerate(order, start=1):
        score = scores[index]
        if score != previous_score:
            current_rank = position if scheme == COMPETITION else current_rank + 1
            previous_score = score
        ranks[index] = current_rank
    return ranks


def _validate_score(score) -> int:
    # bool is an int subclass; reject it explicitly
    if isinstance(score, bool) or not isinstance(score, int):
        raise ValidationError("score must be an integer", field="score")
    if score < 0:
        raise ValidationError("score must be greater than or equal to 0", field="score")
    return score


async def _lock_event(db: AsyncSession, event_id: str) -> Optional[Event]:
    result = await db.execute(select(Event).where(Event.id == event_id).with_for_update())
    return result.scalar_one_or_none()


async def _recalculate(db: AsyncSession, event_id: str, scheme: str) -> int:
    """Rewrite changed ranks for the event. Caller holds the event lock and commits."""
    result = await db.execute(
        select(LeaderboardEntry)
        .where(LeaderboardEntry.event_id == event_id)
        .order_by(LeaderboardEntry.score.desc(), LeaderboardEntry.id)
    )
    entries = list(result.scalars().all())

    ranks = assign_ranks([entry.score for entry in entries], scheme)
    changed = 0
    for entry, rank in zip(entries, ranks):
        if entry.rank != rank:
            entry.rank = rank
            changed += 1

    if changed:
        await db.flush()
    logger.info(f"[RANKS] event={event_id} entries={len(entries)} changed={changed} scheme={scheme}")
    return changed


async def recalculate_ranks(db: AsyncSession, event_id: str, scheme: Optional[str] = None) -> int:
    """
    Recalculate and persist ranks for every entry of the event.

    Idempotent: a second run without score changes updates nothing.

    Returns:
        Number of entries whose rank changed
    """
    scheme = scheme or settings.LEADERBOARD_RANKING_SCHEME
    async with event_lock(event_id):
        try:
            if not await _lock_event(db, event_id):
                raise NotFoundError("Event", event_id, code=ErrorCode.EVENT_NOT_FOUND)
            changed = await _recalculate(db, event_id, scheme)
            await db.commit()
        except HackHubError:
            await db.rollback()
            raise
        except SQLAlchemyError as e:
            await db.rollback()
            raise StorageError("recalculate_ranks", e) from e
    return changed


async def upsert_entry(
    db: AsyncSession,
    event_id: str,
    user_id: str,
    score: int,
    scheme: Optional[str] = None,
) -> LeaderboardEntry:
    """
    Create or update the (event, user) score and recalculate the event's ranks.

    Upsert and recalculation commit together.

    Raises:
        ValidationError: score is not an integer >= 0
        NotFoundError: event or profile does not exist
        StorageError: store failure
    """
    score = _validate_score(score)
    scheme = scheme or settings.LEADERBOARD_RANKING_SCHEME

    async with event_lock(event_id):
        try:
            if not await _lock_event(db, event_id):
                raise NotFoundError("Event", event_id, code=ErrorCode.EVENT_NOT_FOUND)

            profile_result = await db.execute(select(Profile.id).where(Profile.id == user_id))
            if profile_result.scalar_one_or_none() is None:
                raise NotFoundError("Profile", user_id, code=ErrorCode.PROFILE_NOT_FOUND)

            result = await db.execute(
                select(LeaderboardEntry)
                .where(
                    LeaderboardEntry.event_id == event_id,
                    LeaderboardEntry.user_id == user_id
                )
            )
            entry = result.scalar_one_or_none()

            if entry:
                logger.info(f"[SCORE UPDATE] event={event_id} user={user_id} {entry.score} -> {score}")
                entry.score = score
            else:
                logger.info(f"[SCORE INSERT] event={event_id} user={user_id} score={score}")
                entry = LeaderboardEntry(event_id=event_id, user_id=user_id, score=score, rank=0)
                db.add(entry)
            await db.flush()

            await _recalculate(db, event_id, scheme)
            await db.commit()

        except HackHubError:
            await db.rollback()
            raise
        except SQLAlchemyError as e:
            await db.rollback()
            raise StorageError("upsert_entry", e) from e

    return entry


async def get_leaderboard(db: AsyncSession, event_id: str) -> List[LeaderboardEntry]:
    """Entries of the event with participant profiles, best rank first."""
    try:
        exists = await db.execute(select(Event.id).where(Event.id == event_id))
        if exists.scalar_one_or_none() is None:
            raise NotFoundError("Event", event_id, code=ErrorCode.EVENT_NOT_FOUND)

        result = await db.execute(
            select(LeaderboardEntry)
            .options(selectinload(LeaderboardEntry.profile))
            .where(LeaderboardEntry.event_id == event_id)
            .order_by(LeaderboardEntry.rank.asc(), LeaderboardEntry.score.desc())
        )
    except SQLAlchemyError as e:
        raise StorageError("get_leaderboard", e) from e
    return list(result.scalars().all())
