"""
Current-user endpoints.

The caller can read and rename themselves; admin status is managed
only through the admin routes.
"""

from fastapi import APIRouter
from pydantic import Field

from cardtracker.api.deps import CurrentUser, SessionDep
from cardtracker.api.schemas import CamelModel
from cardtracker.models.db import UserDB
from cardtracker.services.validation import FieldError, raise_for_errors, require_not_blank

router = APIRouter(prefix="/api/user", tags=["users"])


class UserResponse(CamelModel):
    id: int
    username: str
    display_name: str
    is_admin: bool


class UpdateMeRequest(CamelModel):
    """Fields to change; omitted fields are kept."""

    username: str | None = Field(default=None, max_length=255)
    display_name: str | None = Field(default=None, max_length=255)


def user_to_response(user: UserDB) -> UserResponse:
    return UserResponse(
        id=user.id,
        username=user.username,
        display_name=user.display_name,
        is_admin=user.is_admin,
    )


@router.get("/me", response_model=UserResponse)
async def get_me(user: CurrentUser) -> UserResponse:
    """Return the user identified by X-User-Id."""
    return user_to_response(user)


@router.put("/me", response_model=UserResponse)
async def update_me(
    request: UpdateMeRequest,
    user: CurrentUser,
    session: SessionDep,
) -> UserResponse:
    """Rename the caller."""
    errors: list[FieldError] = []
    if request.username is not None:
        errors += require_not_blank("username", request.username, "Username cannot be blank.")
    if request.display_name is not None:
        errors += require_not_blank(
            "displayName", request.display_name, "Display name cannot be blank."
        )
    raise_for_errors(errors)

    if request.username is not None:
        user.username = request.username.strip()
    if request.display_name is not None:
        user.display_name = request.display_name.strip()
    await session.flush()
    return user_to_response(user)
