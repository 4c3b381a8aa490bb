"""Legajos - Source Routes"""
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.auth import get_current_user
from api.rbac import can_manage_sources
from api.schemas.sources import SourceCreate, SourceEnvelope, SourceListResponse, SourceUpdate
from api.services import sources as service
from core.database import User
from core.database.session import get_db

router = APIRouter(prefix="/sources", tags=["Sources"])


@router.get("", response_model=SourceListResponse)
async def list_sources(
    _: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return SourceListResponse(sources=await service.list_sources(db))


@router.post("", response_model=SourceEnvelope, status_code=201)
async def create_source(
    payload: SourceCreate,
    _: User = Depends(can_manage_sources),
    db: AsyncSession = Depends(get_db)
):
    return SourceEnvelope(source=await service.create_source(db, payload))


@router.patch("/{source_id}", response_model=SourceEnvelope)
async def update_source(
    source_id: UUID,
    payload: SourceUpdate,
    _: User = Depends(can_manage_sources),
    db: AsyncSession = Depends(get_db)
):
    return SourceEnvelope(source=await service.update_source(db, source_id, payload))
