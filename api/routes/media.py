"""
Legajos - Case Media Routes
Photo and document uploads. Files are validated before anything is written.
"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from api.rbac import can_manage_cases
from api.schemas.media import DocumentEnvelope, MediaDescriptionUpdate, PhotoEnvelope
from api.services import media as service
from core.database import User
from core.database.models import MediaKind
from core.database.session import get_db
from core.errors import BadRequestError

router = APIRouter(prefix="/cases/{case_id}", tags=["Case media"])


async def read_upload(file: Optional[UploadFile], kind: MediaKind) -> bytes:
    """Read at most one byte past the limit so oversize files are still caught."""
    if file is None:
        raise BadRequestError("Archivo requerido")
    try:
        return await file.read(service.VALIDATORS[kind].max_size + 1)
    finally:
        await file.close()


@router.post("/photos", response_model=PhotoEnvelope, status_code=201)
async def upload_photo(
    case_id: UUID,
    file: Optional[UploadFile] = File(None),
    description: Optional[str] = Form(None),
    _: User = Depends(can_manage_cases),
    db: AsyncSession = Depends(get_db)
):
    content = await read_upload(file, MediaKind.PHOTO)
    photo = await service.add_media(
        db, case_id, MediaKind.PHOTO, content, file.filename, file.content_type, description
    )
    return PhotoEnvelope(photo=photo)


@router.post("/documents", response_model=DocumentEnvelope, status_code=201)
async def upload_document(
    case_id: UUID,
    file: Optional[UploadFile] = File(None),
    description: Optional[str] = Form(None),
    _: User = Depends(can_manage_cases),
    db: AsyncSession = Depends(get_db)
):
    content = await read_upload(file, MediaKind.DOCUMENT)
    document = await service.add_media(
        db, case_id, MediaKind.DOCUMENT, content, file.filename, file.content_type, description
    )
    return DocumentEnvelope(document=document)


@router.patch("/photos/{photo_id}/primary", response_model=PhotoEnvelope)
async def set_primary_photo(
    case_id: UUID,
    photo_id: UUID,
    _: User = Depends(can_manage_cases),
    db: AsyncSession = Depends(get_db)
):
    return PhotoEnvelope(photo=await service.set_primary_photo(db, case_id, photo_id))


@router.patch("/photos/{photo_id}", response_model=PhotoEnvelope)
async def update_photo(
    case_id: UUID,
    photo_id: UUID,
    payload: MediaDescriptionUpdate,
    _: User = Depends(can_manage_cases),
    db: AsyncSession = Depends(get_db)
):
    photo = await service.update_description(db, case_id, photo_id, MediaKind.PHOTO, payload.description)
    return PhotoEnvelope(photo=photo)


@router.patch("/documents/{document_id}", response_model=DocumentEnvelope)
async def update_document(
    case_id: UUID,
    document_id: UUID,
    payload: MediaDescriptionUpdate,
    _: User = Depends(can_manage_cases),
    db: AsyncSession = Depends(get_db)
):
    document = await service.update_description(
        db, case_id, document_id, MediaKind.DOCUMENT, payload.description
    )
    return DocumentEnvelope(document=document)


@router.delete("/photos/{photo_id}", status_code=204)
async def delete_photo(
    case_id: UUID,
    photo_id: UUID,
    _: User = Depends(can_manage_cases),
    db: AsyncSession = Depends(get_db)
):
    await service.remove_media(db, case_id, photo_id, MediaKind.PHOTO)
    return Response(status_code=204)


@router.delete("/documents/{document_id}", status_code=204)
async def delete_document(
    case_id: UUID,
    document_id: UUID,
    _: User = Depends(can_manage_cases),
    db: AsyncSession = Depends(get_db)
):
    await service.remove_media(db, case_id, document_id, MediaKind.DOCUMENT)
    return Response(status_code=204)
