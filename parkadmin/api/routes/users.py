"""
User management endpoints (admins only).

Admins let new Google accounts into the panel (``is_allowed``) and grant
or revoke admin rights. An admin cannot delete or demote themselves, so
the panel never loses its last way in by accident.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy import select

from parkadmin.core.auth import AdminSession, require_admin
from parkadmin.core.errors import NotFoundError, ValidationError
from parkadmin.core.logging import get_logger
from parkadmin.db.base import is_valid_id
from parkadmin.db.deps import DBSession
from parkadmin.models.user import User
from parkadmin.schemas.auth import UserResponse, UserUpdate
from parkadmin.schemas.common import ErrorResponse, MessageResponse

logger = get_logger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid id or self-modification"},
    403: {"model": ErrorResponse, "description": "Admin access required"},
    404: {"model": ErrorResponse, "description": "User not found"},
}


async def _get_user(db, user_id: str) -> User:
    if not is_valid_id(user_id):
        raise ValidationError("Invalid user ID format")
    user = await db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


@router.get("", response_model=List[UserResponse])
async def list_users(db: DBSession, admin: AdminSession = Depends(require_admin)):
    result = await db.execute(select(User).order_by(User.created_at.desc()))
    return [UserResponse.model_validate(u) for u in result.scalars().all()]


@router.get("/{user_id}", response_model=UserResponse, responses=ERROR_RESPONSES)
async def get_user(user_id: str, db: DBSession, admin: AdminSession = Depends(require_admin)):
    return UserResponse.model_validate(await _get_user(db, user_id))


@router.patch("/{user_id}", response_model=UserResponse, responses=ERROR_RESPONSES)
async def update_user(
    user_id: str,
    data: UserUpdate,
    db: DBSession,
    admin: AdminSession = Depends(require_admin),
):
    """Change a user's name or access flags."""
    user = await _get_user(db, user_id)
    fields = data.model_dump(exclude_unset=True, exclude_none=True)

    if user.id == admin.user.id and (fields.get("is_admin") is False or fields.get("is_allowed") is False):
        raise ValidationError("You cannot remove your own access")

    for name, value in fields.items():
        setattr(user, name, value)

    await db.commit()
    await db.refresh(user)

    logger.info("user_updated", user_id=user.id, by=admin.email, changes=sorted(fields))
    return UserResponse.model_validate(user)


@router.delete("/{user_id}", response_model=MessageResponse, responses=ERROR_RESPONSES)
async def delete_user(user_id: str, db: DBSession, admin: AdminSession = Depends(require_admin)):
    user = await _get_user(db, user_id)
    if user.id == admin.user.id:
        raise ValidationError("You cannot delete your own account")

    await db.delete(user)
    await db.commit()

    logger.info("user_deleted", email=user.email, by=admin.email)
    return MessageResponse(message="User deleted successfully")
