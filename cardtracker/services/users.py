"""
User management rules.

Deleting a user and clearing an admin flag both pass through the
last-administrator guard before any row changes. Both lock the
administrator rows (in id order) before reading the target user, so
two concurrent removals serialize on the same locks.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from cardtracker.db.operations import get_user_with_holdings, lock_admins
from cardtracker.models.db import UserDB
from cardtracker.models.failure import NotFoundError, ValidationFailedError
from cardtracker.services.adjustments import ensure_another_admin_remains

logger = logging.getLogger(__name__)


def _user_not_found(user_id: int) -> NotFoundError:
    return NotFoundError(f"User {user_id} was not found.")


async def delete_user(session: AsyncSession, user_id: int) -> None:
    """Delete a user with their holdings and decks."""
    await lock_admins(session)
    user = await get_user_with_holdings(session, user_id)
    if user is None:
        raise _user_not_found(user_id)

    await ensure_another_admin_remains(session, user.is_admin)

    await session.delete(user)
    await session.flush()
    logger.info("Deleted user %d (%s)", user_id, user.username)


async def update_user(
    session: AsyncSession,
    user_id: int,
    name: str | None = None,
    is_admin: bool | None = None,
) -> UserDB:
    """
    Rename a user and/or change their admin flag.

    A None argument leaves that attribute unchanged.
    """
    if is_admin is False:
        await lock_admins(session)
    user = await get_user_with_holdings(session, user_id)
    if user is None:
        raise _user_not_found(user_id)

    if name is not None:
        trimmed = name.strip()
        if not trimmed:
            raise ValidationFailedError.for_field("name", "Name cannot be blank.")
        user.username = trimmed
        user.display_name = trimmed

    if is_admin is not None and is_admin != user.is_admin:
        if not is_admin:
            await ensure_another_admin_remains(session, user.is_admin)
        user.is_admin = is_admin
        logger.info("User %d admin flag set to %s", user_id, is_admin)

    await session.flush()
    return user
