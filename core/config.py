"""Legajos - Configuration
Environment-driven settings. Required values without defaults abort startup.
"""

from pydantic import Field
from pydantic_settings import BaseSettings


class DatabaseSettings(BaseSettings):
    """Relational database configuration."""

    url: str
    pool_size: int = 10
    max_overflow: int = 20
    echo: bool = False

    @property
    def async_url(self) -> str:
        if self.url.startswith("postgresql+asyncpg://") or "+aiosqlite" in self.url:
            return self.url
        if self.url.startswith("postgres://"):
            return "postgresql+asyncpg://" + self.url[len("postgres://") :]
        if self.url.startswith("postgresql://"):
            return "postgresql+asyncpg://" + self.url[len("postgresql://") :]
        if self.url.startswith("sqlite://"):
            return "sqlite+aiosqlite://" + self.url[len("sqlite://") :]
        return self.url

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    class Config:
        env_prefix = "DATABASE_"
        env_file = ".env"
        extra = "ignore"


class APISettings(BaseSettings):
    """FastAPI configuration."""

    title: str = "Legajos API"
    version: str = "1.0.0"
    description: str = "Gestión de legajos, personas y evidencia"
    host: str = "0.0.0.0"
    port: int = 4000
    environment: str = Field(default="development", validation_alias="LEGAJOS_ENV")
    jwt_secret: str
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 30
    bcrypt_rounds: int = 10
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    class Config:
        env_prefix = "API_"
        env_file = ".env"
        extra = "ignore"


class StorageSettings(BaseSettings):
    """Upload storage configuration."""

    root: str = "./uploads"
    photo_max_mb: int = 5
    document_max_mb: int = 15

    @property
    def photo_max_bytes(self) -> int:
        return self.photo_max_mb * 1024 * 1024

    @property
    def document_max_bytes(self) -> int:
        return self.document_max_mb * 1024 * 1024

    class Config:
        env_prefix = "UPLOAD_"
        env_file = ".env"
        extra = "ignore"


class LogSettings(BaseSettings):
    """Log sinks."""

    dir: str = "./logs"
    level: str = "INFO"
    json_format: bool = True
    to_file: bool = True

    class Config:
        env_prefix = "LOG_"
        env_file = ".env"
        extra = "ignore"


# Settings instances
db_settings = DatabaseSettings()
api_settings = APISettings()
storage_settings = StorageSettings()
log_settings = LogSettings()
