"""Legajos - API Schemas
Pydantic models for request/response validation.
"""

from .cases import (
    CaseCreate,
    CaseEnvelope,
    CaseListResponse,
    CaseResponse,
    CaseUpdate,
    PersonaInput,
)
from .media import DocumentEnvelope, MediaResponse, PhotoEnvelope
from .persons import PersonCreate, PersonEnvelope, PersonListResponse, PersonUpdate
from .sources import SourceCreate, SourceEnvelope, SourceListResponse, SourceUpdate
from .users import LoginRequest, LoginResponse, UserCreate, UserEnvelope, UserListResponse, UserUpdate


__all__ = [
    "CaseCreate",
    "CaseEnvelope",
    "CaseListResponse",
    "CaseResponse",
    "CaseUpdate",
    "DocumentEnvelope",
    "LoginRequest",
    "LoginResponse",
    "MediaResponse",
    "PersonCreate",
    "PersonEnvelope",
    "PersonListResponse",
    "PersonUpdate",
    "PersonaInput",
    "PhotoEnvelope",
    "SourceCreate",
    "SourceEnvelope",
    "SourceListResponse",
    "SourceUpdate",
    "UserCreate",
    "UserEnvelope",
    "UserListResponse",
    "UserUpdate",
]
