"""
Legajos - User Routes
Account management for administrators, plus the caller's own profile.
"""
from uuid import UUID

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from api.auth import get_current_user
from api.rbac import require_admin
from api.schemas.users import PasswordReset, UserCreate, UserEnvelope, UserListResponse, UserUpdate
from api.services import users as service
from core.database import User
from core.database.session import get_db

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/me", response_model=UserEnvelope)
async def me(current_user: User = Depends(get_current_user)):
    """Profile of the authenticated user."""
    return UserEnvelope(user=service.serialize_user(current_user))


@router.get("", response_model=UserListResponse)
async def list_users(
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return UserListResponse(users=await service.list_users(db))


@router.post("", response_model=UserEnvelope, status_code=201)
async def create_user(
    payload: UserCreate,
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return UserEnvelope(user=await service.create_user(db, payload))


@router.patch("/{user_id}", response_model=UserEnvelope)
async def update_user(
    user_id: UUID,
    payload: UserUpdate,
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return UserEnvelope(user=await service.update_user(db, user_id, payload))


@router.post("/{user_id}/reset-password", status_code=204)
async def reset_password(
    user_id: UUID,
    payload: PasswordReset,
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Set a new password for another account."""
    await service.reset_password(db, user_id, payload.new_password)
    return Response(status_code=204)


@router.delete("/{user_id}", status_code=204)
async def delete_user(
    user_id: UUID,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    await service.delete_user(db, user_id, current_user)
    return Response(status_code=204)
