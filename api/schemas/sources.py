"""Legajos - Source schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from api.schemas.base import CamelModel, InputModel


class SourceCreate(InputModel):
    name: str = Field(..., min_length=1, max_length=120)
    kind: str = Field(..., min_length=1, max_length=60)
    description: Optional[str] = None


class SourceUpdate(InputModel):
    name: Optional[str] = Field(None, min_length=1, max_length=120)
    kind: Optional[str] = Field(None, min_length=1, max_length=60)
    description: Optional[str] = None


class SourceSummary(CamelModel):
    id: UUID
    name: str
    kind: str


class SourceResponse(SourceSummary):
    description: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class SourceEnvelope(CamelModel):
    source: SourceResponse


class SourceListResponse(CamelModel):
    sources: list[SourceResponse]
