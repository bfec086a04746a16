"""Session helpers and dependencies."""
from __future__ import annotations

from typing import Optional

from fastapi import Cookie, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from finscope.core.cookies import SESSION_COOKIE_NAME, parse_session_cookie
from finscope.core.database import get_db
from finscope.domain.users.models import User


async def get_session_identifier(
    session_value: Optional[str] = Cookie(None, alias=SESSION_COOKIE_NAME),
) -> str:
    """Return the user email carried by the signed session cookie."""
    return parse_session_cookie(session_value)


async def _load_user(email: str, db: AsyncSession) -> User | None:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def get_current_user(
    email: str = Depends(get_session_identifier),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Load the current user from the database using the session value."""
    user = await _load_user(email, db)

    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")

    return user


async def get_optional_user(
    session_value: Optional[str] = Cookie(None, alias=SESSION_COOKIE_NAME),
    db: AsyncSession = Depends(get_db),
) -> User | None:
    """Return the signed-in user, or None for anonymous callers.

    A tampered cookie is still a 401, not an anonymous request.
    """
    if not session_value:
        return None
    email = parse_session_cookie(session_value)
    return await _load_user(email, db)
