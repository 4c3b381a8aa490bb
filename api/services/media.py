"""Legajos - Case photos and documents."""

from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.media import MediaResponse
from api.services.cases import serialize_media
from core.contacts import clean_text
from core.database.models import CaseMedia, MediaKind
from core.database.repository import get_case_repository, get_media_repository
from core.errors import BadRequestError, NotFoundError, UploadError
from core.logging import get_logger
from core.security import FileValidator, document_validator, photo_validator
from core.storage import MediaStorage, get_storage

logger = get_logger()

DESCRIPTION_LIMIT = 200
DEFAULT_DESCRIPTIONS = {
    MediaKind.PHOTO: "Foto del investigado",
    MediaKind.DOCUMENT: "Documento adjunto",
}
FOLDERS = {
    MediaKind.PHOTO: "photos",
    MediaKind.DOCUMENT: "documents",
}
VALIDATORS: dict[MediaKind, FileValidator] = {
    MediaKind.PHOTO: photo_validator,
    MediaKind.DOCUMENT: document_validator,
}


def normalize_description(description: Optional[str], kind: MediaKind) -> str:
    return clean_text(description, DESCRIPTION_LIMIT) or DEFAULT_DESCRIPTIONS[kind]


async def add_media(
    db: AsyncSession,
    case_id: UUID,
    kind: MediaKind,
    content: bytes,
    original_name: Optional[str],
    mime_type: Optional[str],
    description: Optional[str] = None,
    storage: Optional[MediaStorage] = None,
) -> MediaResponse:
    """Validate, store and register an uploaded file.

    The case must exist before anything is written. When the row cannot be
    inserted the file just written is removed again.
    """
    storage = storage or get_storage()

    if await get_case_repository(db).get_by_id(case_id) is None:
        raise NotFoundError("Caso no encontrado")

    valid, error = VALIDATORS[kind].validate(original_name, mime_type, len(content))
    if not valid:
        logger.warning("Upload rejected", case_id=str(case_id), kind=kind.value, reason=error)
        raise UploadError(error)

    media_repo = get_media_repository(db)
    is_primary = False
    if kind == MediaKind.PHOTO:
        is_primary = await media_repo.get_primary_photo(case_id) is None

    relative_path = storage.save(case_id, FOLDERS[kind], content, original_name, mime_type)
    try:
        media = media_repo.add(
            CaseMedia(
                case_id=case_id,
                kind=kind,
                file_path=relative_path,
                original_name=original_name,
                mime_type=mime_type,
                size=len(content),
                description=normalize_description(description, kind),
                is_primary=is_primary,
            )
        )
        await db.commit()
        await db.refresh(media)
    except Exception:
        await db.rollback()
        storage.remove(relative_path)
        raise

    logger.audit("upload", "case_media", media.id, case_id=str(case_id), kind=kind.value, size=media.size)
    return serialize_media(media)


async def _get_media(db: AsyncSession, case_id: UUID, media_id: UUID, kind: MediaKind) -> CaseMedia:
    media = await get_media_repository(db).get_for_case(case_id, media_id)
    if media is None:
        raise NotFoundError("Archivo no encontrado")
    if media.kind != kind:
        raise BadRequestError("Tipo de archivo no coincide")
    return media


async def update_description(
    db: AsyncSession,
    case_id: UUID,
    media_id: UUID,
    kind: MediaKind,
    description: Optional[str],
) -> MediaResponse:
    media = await _get_media(db, case_id, media_id, kind)
    media.description = normalize_description(description, media.kind)
    await db.commit()
    await db.refresh(media)
    logger.audit("update", "case_media", media.id, case_id=str(case_id))
    return serialize_media(media)


async def set_primary_photo(db: AsyncSession, case_id: UUID, photo_id: UUID) -> MediaResponse:
    """Make one photo the case's primary photo; all others lose the flag."""
    media_repo = get_media_repository(db)
    photo = await media_repo.get_for_case(case_id, photo_id)
    if photo is None or photo.kind != MediaKind.PHOTO:
        raise NotFoundError("Foto no encontrada")

    try:
        await media_repo.clear_primary(case_id)
        photo.is_primary = True
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    await db.refresh(photo)
    logger.audit("set_primary", "case_media", photo.id, case_id=str(case_id))
    return serialize_media(photo)


async def remove_media(
    db: AsyncSession,
    case_id: UUID,
    media_id: UUID,
    kind: MediaKind,
    storage: Optional[MediaStorage] = None,
) -> None:
    """Delete the row and the file. Removing the primary photo promotes the
    most recently uploaded remaining photo."""
    storage = storage or get_storage()
    media_repo = get_media_repository(db)
    media = await _get_media(db, case_id, media_id, kind)
    was_primary = media.kind == MediaKind.PHOTO and media.is_primary
    file_path = media.file_path

    await media_repo.delete(media)
    await db.flush()

    if was_primary:
        successor = await media_repo.latest_photo(case_id)
        if successor is not None:
            successor.is_primary = True

    await db.commit()
    storage.remove(file_path)
    logger.audit("delete", "case_media", media_id, case_id=str(case_id), kind=kind.value)
