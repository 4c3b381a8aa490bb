"""Legajos - User management."""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from api.auth import get_password_hash
from api.schemas.users import UserCreate, UserResponse, UserUpdate
from core.database.models import User
from core.database.repository import get_user_repository
from core.errors import BadRequestError, ConflictError, NotFoundError
from core.logging import get_logger

logger = get_logger()


def serialize_user(user: User) -> UserResponse:
    return UserResponse.model_validate(user)


async def list_users(db: AsyncSession) -> list[UserResponse]:
    return [serialize_user(u) for u in await get_user_repository(db).list_all()]


async def _get_or_404(db: AsyncSession, user_id: UUID) -> User:
    user = await get_user_repository(db).get_by_id(user_id)
    if user is None:
        raise NotFoundError("Usuario no encontrado")
    return user


async def create_user(db: AsyncSession, payload: UserCreate) -> UserResponse:
    repo = get_user_repository(db)
    if await repo.get_by_email(payload.email):
        raise ConflictError("El email ya está registrado")

    user = repo.add(
        User(
            first_name=payload.first_name,
            last_name=payload.last_name,
            email=payload.email,
            password_hash=get_password_hash(payload.password),
            role=payload.role,
            is_active=True,
        )
    )
    await db.commit()
    await db.refresh(user)
    logger.audit("create", "user", user.id, email=user.email, role=user.role.value)
    return serialize_user(user)


async def update_user(db: AsyncSession, user_id: UUID, payload: UserUpdate) -> UserResponse:
    user = await _get_or_404(db, user_id)
    for field, value in payload.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(user, field, value)
    await db.commit()
    await db.refresh(user)
    logger.audit("update", "user", user.id, fields=sorted(payload.model_fields_set))
    return serialize_user(user)


async def reset_password(db: AsyncSession, user_id: UUID, new_password: str) -> None:
    user = await _get_or_404(db, user_id)
    user.password_hash = get_password_hash(new_password)
    await db.commit()
    logger.audit("reset_password", "user", user.id)


async def delete_user(db: AsyncSession, user_id: UUID, acting_user: User) -> None:
    if user_id == acting_user.id:
        raise BadRequestError("No puedes eliminar tu propia cuenta")
    user = await _get_or_404(db, user_id)
    await db.delete(user)
    await db.commit()
    logger.audit("delete", "user", user_id, by=str(acting_user.id))
