"""
hackhub/security.py
Authentication and admin-capability dependencies.

Access tokens are issued by the external identity provider as HS256 JWTs
whose `sub` claim is the profile id. This module only verifies them.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hackhub.config import settings
from hackhub.database import get_db
from hackhub.errors import AuthenticationError, AuthorizationError, ErrorCode, StorageError
from hackhub.orm.profile import Profile

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

# ================= TOKEN UTILS =================


def create_access_token(subject: str, expires_delta: Optional[timedelta] = None, **claims) -> str:
    """Mint a token the way the identity provider does. Used by tooling and tests."""
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=30))
    to_encode = {"sub": subject, "exp": expire, **claims}
    if settings.JWT_AUDIENCE and "aud" not in to_encode:
        to_encode["aud"] = settings.JWT_AUDIENCE
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> Optional[dict]:
    """Decode and validate JWT token. Returns None when invalid or expired."""
    options = {"verify_aud": bool(settings.JWT_AUDIENCE)}
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            options=options,
        )
    except JWTError:
        return None


def token_subject(token: Optional[str]) -> Optional[str]:
    payload = decode_token(token) if token else None
    return payload.get("sub") if payload else None


# ================= AUTH DEPENDENCIES =================

async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> Profile:
    """
    Resolve the caller's profile from the bearer token.
    Raises AuthenticationError (401) when the token is missing, invalid,
    expired, or does not map to a profile.
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Authentication required")

    user_id = token_subject(credentials.credentials)
    if not user_id:
        raise AuthenticationError("Invalid or expired token", code=ErrorCode.AUTH_INVALID)

    try:
        result = await db.execute(select(Profile).where(Profile.id == user_id))
        profile = result.scalar_one_or_none()
    except SQLAlchemyError as e:
        raise StorageError("get_current_user", e) from e

    if not profile:
        logger.warning(f"Token subject {user_id} has no profile")
        raise AuthenticationError("Invalid or expired token", code=ErrorCode.AUTH_INVALID)

    return profile


def is_admin(profile: Profile) -> bool:
    return bool(profile and profile.is_admin)


async def require_admin(current_user: Profile = Depends(get_current_user)) -> Profile:
    """Admin capability check. Raises AuthorizationError (403) for non-admins."""
    if not is_admin(current_user):
        logger.warning(f"Admin access denied for user {current_user.id}")
        raise AuthorizationError("Admin access required")
    return current_user
