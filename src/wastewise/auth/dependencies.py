"""FastAPI authentication dependencies."""

from __future__ import annotations

import jwt
from fastapi import Depends, HTTPException, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from wastewise.auth.jwt import verify_token
from wastewise.auth.service import get_user_by_id
from wastewise.database import get_session
from wastewise.db.models import User

_bearer = HTTPBearer()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Security(_bearer),
    db: AsyncSession = Depends(get_session),
) -> User:
    """
    Extract and verify the bearer JWT, return the User model.

    Raises 401/403 on failure.
    """
    try:
        payload = verify_token(credentials.credentials, expected_type="access")
    except jwt.InvalidTokenError as e:
        raise HTTPException(status_code=401, detail=str(e)) from e

    user = await get_user_by_id(db, int(payload["sub"]))
    if user is None:
        raise HTTPException(status_code=401, detail="User not found")
    if user.is_banned:
        raise HTTPException(status_code=403, detail="Account is banned")
    return user


async def get_staff_user(user: User = Depends(get_current_user)) -> User:
    """Same as get_current_user but additionally requires the staff flag.

    Used for operator actions: driver assignment, pickup completion,
    delivery updates and catalog management.
    """
    if not user.is_staff:
        raise HTTPException(status_code=403, detail="Staff access required")
    return user
