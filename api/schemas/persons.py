"""Legajos - Person and source record schemas."""

from datetime import date, datetime, timezone
from typing import Any, Optional
from uuid import UUID

from pydantic import Field, field_validator

from api.schemas.base import CamelModel, InputModel
from api.schemas.sources import SourceSummary
from core.database.models import DocumentType, Nationality, Sex


class PersonCreate(InputModel):
    identity_number: Optional[str] = Field(None, min_length=3, max_length=50)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    birthdate: Optional[date] = None
    notes: Optional[str] = None


class PersonUpdate(InputModel):
    identity_number: Optional[str] = Field(None, min_length=3, max_length=50)
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    birthdate: Optional[date] = None
    notes: Optional[str] = None


class SourceRecordCreate(CamelModel):
    source_id: UUID
    collected_at: Optional[datetime] = None
    raw_payload: Optional[Any] = None
    summary: Optional[str] = None

    @field_validator("collected_at")
    @classmethod
    def to_naive_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        if v is not None and v.tzinfo is not None:
            return v.astimezone(timezone.utc).replace(tzinfo=None)
        return v


class CollectorSummary(CamelModel):
    id: UUID
    first_name: str
    last_name: str
    email: str


class SourceRecordResponse(CamelModel):
    id: UUID
    summary: Optional[str] = None
    collected_at: datetime
    raw_payload: Optional[Any] = None
    source: SourceSummary
    collected_by: Optional[CollectorSummary] = None


class SourceRecordCreated(CamelModel):
    id: UUID
    person_id: UUID
    source_id: UUID
    collected_by_id: Optional[UUID] = None
    collected_at: datetime
    raw_payload: Optional[Any] = None
    summary: Optional[str] = None
    created_at: datetime


class SourceRecordEnvelope(CamelModel):
    record: SourceRecordCreated


class PersonResponse(CamelModel):
    id: UUID
    identity_number: Optional[str] = None
    first_name: str
    last_name: str
    birthdate: Optional[date] = None
    notes: Optional[str] = None
    sex: Optional[Sex] = None
    document_type: Optional[DocumentType] = None
    nationality: Nationality = Nationality.ARGENTINA
    created_at: datetime
    updated_at: Optional[datetime] = None
    records: list[SourceRecordResponse] = []


class PersonEnvelope(CamelModel):
    person: PersonResponse


class PersonListResponse(CamelModel):
    persons: list[PersonResponse]
