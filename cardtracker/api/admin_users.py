"""
Administrator user management.

Every route requires an admin caller. Deleting or demoting a user is
refused with 409 when it would leave no administrator.
"""

import logging
from datetime import datetime

from fastapi import APIRouter, Response, status
from pydantic import Field

from cardtracker.api.deps import AdminUser, PathId, SessionDep
from cardtracker.api.schemas import CamelModel
from cardtracker.db import create_user, list_users
from cardtracker.models.db import UserDB
from cardtracker.services import delete_user, update_user
from cardtracker.services.validation import raise_for_errors, require_not_blank

router = APIRouter(prefix="/api/admin/users", tags=["admin"])

logger = logging.getLogger(__name__)


class AdminUserResponse(CamelModel):
    id: int
    name: str
    username: str
    display_name: str
    is_admin: bool
    created_utc: datetime


class AdminCreateUserRequest(CamelModel):
    name: str | None = Field(default=None, max_length=255)


class AdminUpdateUserRequest(CamelModel):
    name: str | None = Field(default=None, max_length=255)
    is_admin: bool | None = None


def admin_user_to_response(user: UserDB) -> AdminUserResponse:
    return AdminUserResponse(
        id=user.id,
        name=user.display_name,
        username=user.username,
        display_name=user.display_name,
        is_admin=user.is_admin,
        created_utc=user.created_utc,
    )


@router.get("", response_model=list[AdminUserResponse])
async def get_users(_admin: AdminUser, session: SessionDep) -> list[AdminUserResponse]:
    """List all users ordered by username."""
    return [admin_user_to_response(u) for u in await list_users(session)]


@router.post("", response_model=AdminUserResponse, status_code=status.HTTP_201_CREATED)
async def create_user_route(
    request: AdminCreateUserRequest,
    response: Response,
    admin: AdminUser,
    session: SessionDep,
) -> AdminUserResponse:
    """Create a non-admin user whose username and display name are both `name`."""
    raise_for_errors(
        require_not_blank("name", request.name, "A non-empty name is required to create a user.")
    )
    name = (request.name or "").strip()

    user = await create_user(session, username=name, display_name=name)
    logger.info("Admin %d created user %d (%s)", admin.id, user.id, name)

    response.headers["Location"] = f"/api/admin/users/{user.id}"
    return admin_user_to_response(user)


@router.put("/{user_id}", response_model=AdminUserResponse)
async def update_user_route(
    user_id: PathId,
    request: AdminUpdateUserRequest,
    admin: AdminUser,
    session: SessionDep,
) -> AdminUserResponse:
    """
    Rename a user and/or change their admin flag.

    Demoting the last administrator returns 409.
    """
    user = await update_user(session, user_id, name=request.name, is_admin=request.is_admin)
    logger.info("Admin %d updated user %d", admin.id, user_id)
    return admin_user_to_response(user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user_route(user_id: PathId, admin: AdminUser, session: SessionDep) -> Response:
    """
    Delete a user with their holdings and decks.

    Deleting the last administrator returns 409.
    """
    await delete_user(session, user_id)
    logger.info("Admin %d deleted user %d", admin.id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
