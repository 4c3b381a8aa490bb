"""Legajos - Intelligence sources."""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.sources import SourceCreate, SourceResponse, SourceUpdate
from core.database.models import Source
from core.database.repository import get_source_repository
from core.errors import NotFoundError
from core.logging import get_logger

logger = get_logger()


async def list_sources(db: AsyncSession) -> list[SourceResponse]:
    return [SourceResponse.model_validate(s) for s in await get_source_repository(db).list_all()]


async def create_source(db: AsyncSession, payload: SourceCreate) -> SourceResponse:
    source = get_source_repository(db).add(Source(**payload.model_dump()))
    await db.commit()
    await db.refresh(source)
    logger.audit("create", "source", source.id, name=source.name)
    return SourceResponse.model_validate(source)


async def update_source(db: AsyncSession, source_id: UUID, payload: SourceUpdate) -> SourceResponse:
    source = await get_source_repository(db).get_by_id(source_id)
    if source is None:
        raise NotFoundError("Fuente no encontrada")
    for field, value in payload.model_dump(exclude_unset=True).items():
        if value is None and field != "description":
            continue
        setattr(source, field, value)
    await db.commit()
    await db.refresh(source)
    logger.audit("update", "source", source.id)
    return SourceResponse.model_validate(source)
