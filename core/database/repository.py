"""
Legajos - Database Repository Pattern
Query methods with the eager loading each resource needs.
"""
from typing import Optional, List, TypeVar, Generic
from uuid import UUID

from sqlalchemy import select, delete, update, desc, nulls_last
from sqlalchemy.orm import selectinload
from sqlalchemy.ext.asyncio import AsyncSession

from .models import (
    Case, CaseMedia, EstadoRequerimiento, MediaKind,
    Person, PersonCase, Source, SourceRecord, User,
)

T = TypeVar('T')


def _case_options():
    return (
        selectinload(Case.media),
        selectinload(Case.person_links)
        .selectinload(PersonCase.person)
        .selectinload(Person.addresses),
    )


class BaseRepository(Generic[T]):
    """Base repository with common query patterns."""

    def __init__(self, db: AsyncSession, model: type):
        self.db = db
        self.model = model

    async def get_by_id(self, id: UUID) -> Optional[T]:
        """Get entity by ID."""
        result = await self.db.execute(
            select(self.model).where(self.model.id == id)
        )
        return result.scalar_one_or_none()

    def add(self, entity: T) -> T:
        self.db.add(entity)
        return entity

    async def delete(self, entity: T) -> None:
        await self.db.delete(entity)


class UserRepository(BaseRepository[User]):
    def __init__(self, db: AsyncSession):
        super().__init__(db, User)

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def list_all(self) -> List[User]:
        result = await self.db.execute(select(User).order_by(desc(User.created_at)))
        return list(result.scalars().all())


class SourceRepository(BaseRepository[Source]):
    def __init__(self, db: AsyncSession):
        super().__init__(db, Source)

    async def list_all(self) -> List[Source]:
        result = await self.db.execute(select(Source).order_by(Source.name))
        return list(result.scalars().all())


class PersonRepository(BaseRepository[Person]):
    """Persons with their addresses and source records."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, Person)

    def _with_records(self, query):
        return query.options(
            selectinload(Person.addresses),
            selectinload(Person.source_records).selectinload(SourceRecord.source),
            selectinload(Person.source_records).selectinload(SourceRecord.collected_by),
        ).execution_options(populate_existing=True)

    async def get_full(self, person_id: UUID) -> Optional[Person]:
        result = await self.db.execute(
            self._with_records(select(Person).where(Person.id == person_id))
        )
        return result.scalar_one_or_none()

    async def get_with_addresses(self, person_id: UUID) -> Optional[Person]:
        result = await self.db.execute(
            select(Person)
            .where(Person.id == person_id)
            .options(selectinload(Person.addresses))
        )
        return result.scalar_one_or_none()

    async def get_by_identity_number(self, identity_number: str) -> Optional[Person]:
        result = await self.db.execute(
            select(Person)
            .where(Person.identity_number == identity_number)
            .options(selectinload(Person.addresses))
        )
        return result.scalar_one_or_none()

    async def list_all(self) -> List[Person]:
        result = await self.db.execute(
            self._with_records(select(Person).order_by(desc(Person.created_at)))
        )
        return list(result.scalars().unique().all())


class CaseRepository(BaseRepository[Case]):
    """Cases always load their media and linked person."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, Case)

    async def get_full(self, case_id: UUID) -> Optional[Case]:
        result = await self.db.execute(
            select(Case)
            .where(Case.id == case_id)
            .options(*_case_options())
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_all(self, estado: Optional[EstadoRequerimiento] = None) -> List[Case]:
        query = select(Case).options(*_case_options()).order_by(
            nulls_last(desc(Case.priority_value)), desc(Case.creado_en)
        )
        if estado is not None:
            query = query.where(Case.estado_requerimiento == estado)
        result = await self.db.execute(query.execution_options(populate_existing=True))
        return list(result.scalars().unique().all())

    async def list_by_ids(self, ids: List[UUID]) -> List[Case]:
        result = await self.db.execute(
            select(Case)
            .where(Case.id.in_(ids))
            .options(*_case_options())
            .order_by(desc(Case.creado_en))
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().unique().all())

    async def clear_person_links(self, case_id: UUID) -> None:
        await self.db.execute(delete(PersonCase).where(PersonCase.case_id == case_id))


class MediaRepository(BaseRepository[CaseMedia]):
    def __init__(self, db: AsyncSession):
        super().__init__(db, CaseMedia)

    async def get_for_case(self, case_id: UUID, media_id: UUID) -> Optional[CaseMedia]:
        result = await self.db.execute(
            select(CaseMedia).where(CaseMedia.id == media_id, CaseMedia.case_id == case_id)
        )
        return result.scalar_one_or_none()

    async def get_primary_photo(self, case_id: UUID) -> Optional[CaseMedia]:
        result = await self.db.execute(
            select(CaseMedia).where(
                CaseMedia.case_id == case_id,
                CaseMedia.kind == MediaKind.PHOTO,
                CaseMedia.is_primary.is_(True),
            )
        )
        return result.scalars().first()

    async def latest_photo(self, case_id: UUID) -> Optional[CaseMedia]:
        result = await self.db.execute(
            select(CaseMedia)
            .where(CaseMedia.case_id == case_id, CaseMedia.kind == MediaKind.PHOTO)
            .order_by(desc(CaseMedia.uploaded_at))
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def clear_primary(self, case_id: UUID) -> None:
        await self.db.execute(
            update(CaseMedia)
            .where(CaseMedia.case_id == case_id, CaseMedia.kind == MediaKind.PHOTO)
            .values(is_primary=False)
            .execution_options(synchronize_session="fetch")
        )


def get_user_repository(db: AsyncSession) -> UserRepository:
    return UserRepository(db)


def get_person_repository(db: AsyncSession) -> PersonRepository:
    return PersonRepository(db)


def get_source_repository(db: AsyncSession) -> SourceRepository:
    return SourceRepository(db)


def get_case_repository(db: AsyncSession) -> CaseRepository:
    return CaseRepository(db)


def get_media_repository(db: AsyncSession) -> MediaRepository:
    return MediaRepository(db)
