"""Legajos - Case media schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from api.schemas.base import CamelModel, InputModel
from core.database.models import MediaKind


class MediaResponse(CamelModel):
    id: UUID
    kind: MediaKind
    description: Optional[str] = None
    url: str
    original_name: Optional[str] = None
    mime_type: Optional[str] = None
    size: Optional[int] = None
    uploaded_at: datetime
    is_primary: bool = False


class MediaDescriptionUpdate(InputModel):
    description: Optional[str] = Field(None, max_length=200)


class PhotoEnvelope(CamelModel):
    photo: MediaResponse


class DocumentEnvelope(CamelModel):
    document: MediaResponse
