"""Legajos - Database Module
Models, async sessions and repositories.
"""

from .models import (
    Base,
    Case,
    CaseMedia,
    Person,
    PersonAddress,
    PersonCase,
    Source,
    SourceRecord,
    User,
)
from .repository import (
    CaseRepository,
    MediaRepository,
    PersonRepository,
    SourceRepository,
    UserRepository,
    get_case_repository,
    get_media_repository,
    get_person_repository,
    get_source_repository,
    get_user_repository,
)
from .session import (
    get_async_session,
    get_db,
    init_db_async,
)


__all__ = [
    # Models
    "Base",
    "Case",
    "CaseMedia",
    "Person",
    "PersonAddress",
    "PersonCase",
    "Source",
    "SourceRecord",
    "User",
    # Session
    "get_async_session",
    "get_db",
    "init_db_async",
    # Repositories
    "CaseRepository",
    "MediaRepository",
    "PersonRepository",
    "SourceRepository",
    "UserRepository",
    "get_case_repository",
    "get_media_repository",
    "get_person_repository",
    "get_source_repository",
    "get_user_repository",
]
