"""
Resource Service
"""
from typing import List, Optional, Tuple

from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hackhub.errors import StorageError
from hackhub.orm.resource import Resource
from hackhub.services.event_service import validate_pagination

MAX_PAGE_SIZE = 50


async def list_resources(
    db: AsyncSession,
    category: Optional[str] = None,
    page: int = 1,
    limit: int = 20,
) -> Tuple[List[Resource], int]:
    """Newest resources first, optionally restricted to one category."""
    validate_pagination(page, limit, max_limit=MAX_PAGE_SIZE)

    conditions = [Resource.category == category] if category else []
    try:
        total_result = await db.execute(select(func.count(Resource.id)).where(*conditions))
        result = await db.execute(
            select(Resource)
            .where(*conditions)
            .order_by(Resource.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
    except SQLAlchemyError as e:
        raise StorageError("list_resources", e) from e
    return list(result.scalars().all()), total_result.scalar() or 0
