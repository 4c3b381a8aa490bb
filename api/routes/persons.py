"""
Legajos - Person Routes
Persons of interest and the source records collected about them.
"""
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.auth import get_current_user
from api.rbac import can_manage_persons
from api.schemas.persons import (
    PersonCreate,
    PersonEnvelope,
    PersonListResponse,
    PersonUpdate,
    SourceRecordCreate,
    SourceRecordEnvelope,
)
from api.services import persons as service
from core.database import User
from core.database.session import get_db

router = APIRouter(prefix="/persons", tags=["Persons"])


@router.get("", response_model=PersonListResponse)
async def list_persons(
    _: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """List persons, newest first, with their latest source records."""
    return PersonListResponse(persons=await service.list_persons(db))


@router.get("/{person_id}", response_model=PersonEnvelope)
async def get_person(
    person_id: UUID,
    _: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return PersonEnvelope(person=await service.get_person(db, person_id))


@router.post("", response_model=PersonEnvelope, status_code=201)
async def create_person(
    payload: PersonCreate,
    _: User = Depends(can_manage_persons),
    db: AsyncSession = Depends(get_db)
):
    return PersonEnvelope(person=await service.create_person(db, payload))


@router.patch("/{person_id}", response_model=PersonEnvelope)
async def update_person(
    person_id: UUID,
    payload: PersonUpdate,
    _: User = Depends(can_manage_persons),
    db: AsyncSession = Depends(get_db)
):
    return PersonEnvelope(person=await service.update_person(db, person_id, payload))


@router.post("/{person_id}/sources", response_model=SourceRecordEnvelope, status_code=201)
async def add_source_record(
    person_id: UUID,
    payload: SourceRecordCreate,
    current_user: User = Depends(can_manage_persons),
    db: AsyncSession = Depends(get_db)
):
    """Attach information collected from a source to a person."""
    record = await service.add_source_record(db, person_id, payload, current_user)
    return SourceRecordEnvelope(record=record)
