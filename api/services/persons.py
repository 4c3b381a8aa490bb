"""Legajos - Persons and their source records."""

from datetime import datetime
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.persons import (
    PersonCreate,
    PersonResponse,
    PersonUpdate,
    SourceRecordCreate,
    SourceRecordCreated,
    SourceRecordResponse,
)
from core.database.models import Nationality, Person, SourceRecord, User
from core.database.repository import get_person_repository, get_source_repository
from core.errors import ConflictError, NotFoundError
from core.logging import get_logger

logger = get_logger()

LIST_RECORD_LIMIT = 5


def serialize_person(person: Person, record_limit: int | None = None) -> PersonResponse:
    records = sorted(person.source_records, key=lambda r: r.collected_at, reverse=True)
    if record_limit is not None:
        records = records[:record_limit]
    response = PersonResponse.model_validate(
        {
            "id": person.id,
            "identity_number": person.identity_number,
            "first_name": person.first_name,
            "last_name": person.last_name,
            "birthdate": person.birthdate,
            "notes": person.notes,
            "sex": person.sex,
            "document_type": person.document_type,
            "nationality": person.nationality or Nationality.ARGENTINA,
            "created_at": person.created_at,
            "updated_at": person.updated_at,
            "records": [SourceRecordResponse.model_validate(r) for r in records],
        }
    )
    return response


async def _get_or_404(db: AsyncSession, person_id: UUID) -> Person:
    person = await get_person_repository(db).get_full(person_id)
    if person is None:
        raise NotFoundError("Persona no encontrada")
    return person


async def _ensure_identity_free(db: AsyncSession, identity_number: str | None, person_id: UUID | None = None):
    if not identity_number:
        return
    existing = await get_person_repository(db).get_by_identity_number(identity_number)
    if existing is not None and existing.id != person_id:
        raise ConflictError("El documento ya está registrado")


async def list_persons(db: AsyncSession) -> list[PersonResponse]:
    persons = await get_person_repository(db).list_all()
    return [serialize_person(p, LIST_RECORD_LIMIT) for p in persons]


async def get_person(db: AsyncSession, person_id: UUID) -> PersonResponse:
    return serialize_person(await _get_or_404(db, person_id))


async def create_person(db: AsyncSession, payload: PersonCreate) -> PersonResponse:
    await _ensure_identity_free(db, payload.identity_number)
    person = get_person_repository(db).add(
        Person(
            identity_number=payload.identity_number,
            first_name=payload.first_name,
            last_name=payload.last_name,
            birthdate=payload.birthdate,
            notes=payload.notes,
            nationality=Nationality.ARGENTINA,
            emails=[],
            phones=[],
            social_networks=[],
        )
    )
    await db.commit()
    logger.audit("create", "person", person.id)
    return await get_person(db, person.id)


async def update_person(db: AsyncSession, person_id: UUID, payload: PersonUpdate) -> PersonResponse:
    person = await _get_or_404(db, person_id)
    changes = payload.model_dump(exclude_unset=True)
    if "identity_number" in changes:
        await _ensure_identity_free(db, changes["identity_number"], person.id)
    for field, value in changes.items():
        if value is None and field in ("first_name", "last_name"):
            continue
        setattr(person, field, value)
    await db.commit()
    logger.audit("update", "person", person.id, fields=sorted(changes))
    return await get_person(db, person.id)


async def add_source_record(
    db: AsyncSession,
    person_id: UUID,
    payload: SourceRecordCreate,
    collected_by: User,
) -> SourceRecordCreated:
    person = await get_person_repository(db).get_by_id(person_id)
    if person is None:
        raise NotFoundError("Persona no encontrada")
    source = await get_source_repository(db).get_by_id(payload.source_id)
    if source is None:
        raise NotFoundError("Fuente no encontrada")

    record = SourceRecord(
        person_id=person.id,
        source_id=source.id,
        collected_by_id=collected_by.id,
        collected_at=payload.collected_at or datetime.utcnow(),
        raw_payload=payload.raw_payload,
        summary=payload.summary,
    )
    db.add(record)
    await db.commit()
    await db.refresh(record)
    logger.audit("create", "source_record", record.id, person_id=str(person.id), source_id=str(source.id))
    return SourceRecordCreated.model_validate(record)
