"""Legajos - Startup Validation
Validates configuration before accepting traffic.
"""

from loguru import logger

from core.config import api_settings, db_settings, storage_settings
from core.storage import MediaStorage


class StartupError(Exception):
    """Critical startup failure."""

    pass


class StartupValidator:
    """Validates environment and dependencies on startup."""

    def __init__(self):
        self.errors: list[str] = []
        self.warnings: list[str] = []

    def validate_all(self, strict: bool = True) -> bool:
        """Run all validation checks.

        Args:
            strict: If True, raise on any error.

        Returns:
            True if validation passed
        """
        self._validate_jwt_secret()
        self._validate_database()
        self._validate_storage()

        if self.errors:
            for error in self.errors:
                logger.error(f"Startup validation FAILED: {error}")
            if strict:
                raise StartupError(
                    f"Startup validation failed with {len(self.errors)} error(s). "
                    "Fix these issues before starting the application."
                )
            return False

        for warning in self.warnings:
            logger.warning(f"Startup validation WARNING: {warning}")

        logger.info(f"Startup validation passed ({api_settings.environment} mode)")
        return True

    def _validate_jwt_secret(self) -> None:
        secret = api_settings.jwt_secret
        if len(secret) < 32:
            message = f"JWT secret is only {len(secret)} characters - use at least 32"
            if api_settings.is_production:
                self.errors.append(message)
            else:
                self.warnings.append(message)

    def _validate_database(self) -> None:
        if api_settings.is_production and db_settings.is_sqlite:
            self.errors.append("SQLite is not supported in production mode. Use PostgreSQL.")

    def _validate_storage(self) -> None:
        if not MediaStorage(storage_settings.root).health_check():
            self.errors.append(f"No write permission to upload root: {storage_settings.root}")


def run_startup_validation(strict: bool | None = None) -> bool:
    """Run startup validation; strict by default in production."""
    if strict is None:
        strict = api_settings.is_production

    validator = StartupValidator()
    return validator.validate_all(strict=strict)
