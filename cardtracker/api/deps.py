"""
Request-scoped dependencies.

The caller is identified by the X-User-Id header, resolved once per
request and passed explicitly to handlers.
"""

from typing import Annotated

from fastapi import Depends, Header, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from cardtracker.api.schemas import INT32_MAX, INT32_MIN
from cardtracker.config import settings
from cardtracker.db import get_user
from cardtracker.db.database import get_session
from cardtracker.models.db import UserDB
from cardtracker.models.failure import ForbiddenError, MissingUserHeaderError

SessionDep = Annotated[AsyncSession, Depends(get_session)]

# Ids outside the column range are rejected before any lookup
PathId = Annotated[int, Path(ge=INT32_MIN, le=INT32_MAX)]
PageNumber = Annotated[int, Query(ge=1, le=INT32_MAX)]


async def get_current_user(
    session: SessionDep,
    x_user_id: Annotated[str | None, Header()] = None,
) -> UserDB | None:
    """The user named by X-User-Id, or None if absent, malformed or unknown."""
    if x_user_id is None:
        return None
    try:
        user_id = int(x_user_id.strip())
    except ValueError:
        return None
    if not 0 < user_id <= INT32_MAX:
        return None
    return await get_user(session, user_id)


async def require_user(
    user: Annotated[UserDB | None, Depends(get_current_user)],
) -> UserDB:
    if user is None:
        raise MissingUserHeaderError()
    return user


async def require_admin(user: Annotated[UserDB, Depends(require_user)]) -> UserDB:
    if not user.is_admin:
        raise ForbiddenError()
    return user


CurrentUser = Annotated[UserDB, Depends(require_user)]
AdminUser = Annotated[UserDB, Depends(require_admin)]


def page_size_or_default(page_size: int | None) -> int:
    """Bound a requested page size to the configured limits."""
    if page_size is None or page_size <= 0:
        return settings.default_page_size
    return min(page_size, settings.max_page_size)


def split_csv(value: str | None) -> list[str]:
    """Trimmed, de-duplicated comma-separated values in their original order."""
    if value is None:
        return []
    return list(dict.fromkeys(part.strip() for part in value.split(",") if part.strip()))
