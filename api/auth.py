"""
Legajos - JWT Authentication
Bearer tokens, password hashing and the /auth routes.
"""
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.users import ChangePasswordRequest, LoginRequest, LoginResponse, UserSummary
from core.config import api_settings
from core.database import User
from core.database.repository import get_user_repository
from core.database.session import get_db
from core.errors import BadRequestError, UnauthorizedError
from core.logging import get_logger

logger = get_logger()

# Password hashing
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=api_settings.bcrypt_rounds,
)

# Bearer scheme; missing or non-Bearer headers yield None
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


class TokenData(BaseModel):
    """Token payload data."""
    user_id: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash password."""
    return pwd_context.hash(password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token."""
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=api_settings.jwt_expire_minutes)

    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(
        to_encode,
        api_settings.jwt_secret,
        algorithm=api_settings.jwt_algorithm
    )
    return encoded_jwt


def create_user_token(user: User) -> str:
    role = user.role.value if hasattr(user.role, "value") else user.role
    return create_access_token(data={"sub": str(user.id), "email": user.email, "role": role})


def decode_access_token(token: str) -> TokenData:
    """Decode and verify a token. Raises UnauthorizedError when invalid or expired."""
    try:
        payload = jwt.decode(
            token,
            api_settings.jwt_secret,
            algorithms=[api_settings.jwt_algorithm]
        )
    except JWTError:
        raise UnauthorizedError("Token inválido")
    user_id = payload.get("sub")
    if not user_id:
        raise UnauthorizedError("Token inválido")
    return TokenData(user_id=user_id, email=payload.get("email"), role=payload.get("role"))


async def authenticate_user(db: AsyncSession, email: str, password: str) -> Optional[User]:
    """Active user matching the credentials, else None."""
    user = await get_user_repository(db).get_by_email(email.strip().lower())
    if not user or not user.is_active:
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


async def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db)
) -> User:
    """Authenticated, active user behind the bearer token."""
    if not token:
        raise UnauthorizedError("No autorizado")

    token_data = decode_access_token(token)
    try:
        user_id = UUID(token_data.user_id)
    except ValueError:
        raise UnauthorizedError("Token inválido")

    user = await get_user_repository(db).get_by_id(user_id)
    if user is None or not user.is_active:
        raise UnauthorizedError("Cuenta inactiva o inexistente")
    return user


router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/login", response_model=LoginResponse)
async def login(
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db)
):
    """Exchange email and password for an access token."""
    user = await authenticate_user(db, credentials.email, credentials.password)
    if not user:
        logger.warning("Failed login attempt", email=credentials.email)
        raise UnauthorizedError("Credenciales inválidas")

    user.last_login_at = datetime.utcnow()
    await db.commit()
    logger.audit("login", "user", user.id, email=user.email)

    return LoginResponse(
        access_token=create_user_token(user),
        user=UserSummary.model_validate(user),
    )


@router.post("/change-password", status_code=status.HTTP_204_NO_CONTENT)
async def change_password(
    payload: ChangePasswordRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Change the caller's password."""
    if not verify_password(payload.current_password, current_user.password_hash):
        raise BadRequestError("Contraseña actual incorrecta")
    if verify_password(payload.new_password, current_user.password_hash):
        raise BadRequestError("La nueva contraseña debe ser distinta")

    current_user.password_hash = get_password_hash(payload.new_password)
    await db.commit()
    logger.audit("change_password", "user", current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
