"""
Resource API Routes
"""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hackhub.database import get_db
from hackhub.orm.profile import Profile
from hackhub.security import get_current_user
from hackhub.services import resource_service

router = APIRouter(prefix="/resources", tags=["resources"])


@router.get("")
async def list_resources(
    category: Optional[str] = Query(None),
    page: int = Query(1),
    limit: int = Query(20),
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
) -> Dict[str, Any]:
    resources, total = await resource_service.list_resources(db, category=category, page=page, limit=limit)
    return {
        "data": [r.to_dict() for r in resources],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "total_pages": (total + limit - 1) // limit if total > 0 else 0,
        }
    }
