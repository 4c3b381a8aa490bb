"""
Legajos - Database Models
SQLAlchemy ORM models for users, persons, cases, media and source intelligence.
Supports PostgreSQL (production) and SQLite (testing).
"""
from datetime import datetime
from enum import Enum as PyEnum
from uuid import uuid4

from sqlalchemy import (
    Column, String, DateTime, Date, Boolean, Text, Integer, BigInteger, Numeric,
    ForeignKey, Enum, JSON, Index, UniqueConstraint, TypeDecorator
)
from sqlalchemy.dialects.postgresql import UUID as PG_UUID, JSONB
from sqlalchemy.orm import declarative_base
from sqlalchemy.orm import relationship
from sqlalchemy.types import CHAR

Base = declarative_base()


class GUID(TypeDecorator):
    """Platform-independent GUID type.
    Uses PostgreSQL's UUID type when available, otherwise stores as CHAR(36).
    """
    impl = CHAR
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == 'postgresql':
            return dialect.type_descriptor(PG_UUID(as_uuid=True))
        else:
            return dialect.type_descriptor(CHAR(36))

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        elif dialect.name == 'postgresql':
            return value
        else:
            return str(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return value
        elif dialect.name == 'postgresql':
            return value
        else:
            from uuid import UUID
            return UUID(value)


class JSONType(TypeDecorator):
    """Platform-independent JSON type.
    Uses PostgreSQL's JSONB type when available, otherwise uses JSON.
    """
    impl = JSON
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == 'postgresql':
            return dialect.type_descriptor(JSONB())
        else:
            return dialect.type_descriptor(JSON())


UUID = GUID


def _enum(enum_cls):
    """Store enum values (not member names) in a portable VARCHAR column."""
    return Enum(
        enum_cls,
        values_callable=lambda members: [m.value for m in members],
        native_enum=False,
        length=30,
    )


class UserRole(str, PyEnum):
    ADMIN = "ADMIN"
    OPERATOR = "OPERATOR"
    CONSULTANT = "CONSULTANT"


class Sex(str, PyEnum):
    MASCULINO = "MASCULINO"
    FEMENINO = "FEMENINO"
    OTRO = "OTRO"


class DocumentType(str, PyEnum):
    DNI = "DNI"
    PASAPORTE = "PASAPORTE"
    CEDULA_IDENTIDAD = "CEDULA_IDENTIDAD"
    OTRO = "OTRO"


class Nationality(str, PyEnum):
    ARGENTINA = "ARGENTINA"
    OTRO = "OTRO"


class Jurisdiccion(str, PyEnum):
    FEDERAL = "FEDERAL"
    PROVINCIAL = "PROVINCIAL"
    SIN_DATO = "SIN_DATO"


class EstadoRequerimiento(str, PyEnum):
    CAPTURA_VIGENTE = "CAPTURA_VIGENTE"
    SIN_EFECTO = "SIN_EFECTO"
    DETENIDO = "DETENIDO"


class FuerzaAsignada(str, PyEnum):
    PFA = "PFA"
    GNA = "GNA"
    PNA = "PNA"
    PSA = "PSA"
    SD = "S/D"


class Recompensa(str, PyEnum):
    SI = "SI"
    NO = "NO"
    SIN_DATO = "SIN_DATO"


class MediaKind(str, PyEnum):
    PHOTO = "PHOTO"
    DOCUMENT = "DOCUMENT"


class User(Base):
    """Application account."""
    __tablename__ = "users"

    id = Column(UUID(), primary_key=True, default=uuid4)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(_enum(UserRole), default=UserRole.OPERATOR, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    last_login_at = Column(DateTime)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    collected_records = relationship("SourceRecord", back_populates="collected_by", passive_deletes=True)


class Person(Base):
    """Person of interest. Contact lists are stored in order."""
    __tablename__ = "persons"

    id = Column(UUID(), primary_key=True, default=uuid4)
    identity_number = Column(String(50), unique=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    sex = Column(_enum(Sex))
    document_type = Column(_enum(DocumentType))
    document_name = Column(String(120))
    birthdate = Column(Date)
    notes = Column(Text)
    nationality = Column(_enum(Nationality), default=Nationality.ARGENTINA, nullable=False)
    other_nationality = Column(String(120))

    # [{"value": ...}], [{"network": ..., "handle": ...}]
    emails = Column(JSONType(), default=list, nullable=False)
    phones = Column(JSONType(), default=list, nullable=False)
    social_networks = Column(JSONType(), default=list, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    addresses = relationship(
        "PersonAddress",
        back_populates="person",
        order_by="PersonAddress.position",
        cascade="all, delete-orphan",
    )
    source_records = relationship(
        "SourceRecord",
        back_populates="person",
        cascade="all, delete-orphan",
    )
    case_links = relationship("PersonCase", back_populates="person", cascade="all, delete-orphan")

    __table_args__ = (
        Index('ix_persons_name', 'last_name', 'first_name'),
    )


class PersonAddress(Base):
    """Address of a person; position keeps input order."""
    __tablename__ = "person_addresses"

    id = Column(UUID(), primary_key=True, default=uuid4)
    person_id = Column(UUID(), ForeignKey("persons.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, default=0, nullable=False)
    street = Column(String(120))
    street_number = Column(String(20))
    province = Column(String(120))
    locality = Column(String(120))
    reference = Column(String(255))
    is_principal = Column(Boolean, default=False, nullable=False)

    person = relationship("Person", back_populates="addresses")

    __table_args__ = (
        Index('ix_person_addresses_person', 'person_id', 'position'),
    )


class Source(Base):
    """Intelligence source."""
    __tablename__ = "sources"

    id = Column(UUID(), primary_key=True, default=uuid4)
    name = Column(String(120), nullable=False)
    kind = Column(String(60), nullable=False)
    description = Column(Text)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    records = relationship("SourceRecord", back_populates="source")


class SourceRecord(Base):
    """Information about a person collected from a source."""
    __tablename__ = "source_records"

    id = Column(UUID(), primary_key=True, default=uuid4)
    person_id = Column(UUID(), ForeignKey("persons.id", ondelete="CASCADE"), nullable=False)
    source_id = Column(UUID(), ForeignKey("sources.id", ondelete="RESTRICT"), nullable=False)
    collected_by_id = Column(UUID(), ForeignKey("users.id", ondelete="SET NULL"))
    collected_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    raw_payload = Column(JSONType())
    summary = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    person = relationship("Person", back_populates="source_records")
    source = relationship("Source", back_populates="records")
    collected_by = relationship("User", back_populates="collected_records")

    __table_args__ = (
        Index('ix_source_records_person_collected', 'person_id', 'collected_at'),
    )


class Case(Base):
    """Judicial case file (legajo)."""
    __tablename__ = "cases"

    id = Column(UUID(), primary_key=True, default=uuid4)
    numero_causa = Column(String(120))
    caratula = Column(String(255))
    juzgado_interventor = Column(String(255))
    secretaria = Column(String(255))
    fiscalia = Column(String(255))
    jurisdiccion = Column(_enum(Jurisdiccion), default=Jurisdiccion.SIN_DATO, nullable=False)
    delito = Column(String(255))
    fecha_hecho = Column(Date)
    estado_requerimiento = Column(
        _enum(EstadoRequerimiento), default=EstadoRequerimiento.CAPTURA_VIGENTE, nullable=False
    )
    fuerza_asignada = Column(_enum(FuerzaAsignada), default=FuerzaAsignada.SD, nullable=False)
    recompensa = Column(_enum(Recompensa), default=Recompensa.SIN_DATO, nullable=False)
    reward_amount = Column(Numeric(17, 2))
    priority_value = Column(Integer)
    additional_info = Column(JSONType(), default=list, nullable=False)

    creado_en = Column(DateTime, default=datetime.utcnow, nullable=False)
    actualizado_en = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    media = relationship(
        "CaseMedia",
        back_populates="case",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="CaseMedia.uploaded_at",
    )
    person_links = relationship(
        "PersonCase",
        back_populates="case",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index('ix_cases_estado_creado', 'estado_requerimiento', 'creado_en'),
    )

    @property
    def person(self):
        return self.person_links[0].person if self.person_links else None

    @property
    def photos(self):
        return [m for m in self.media if m.kind == MediaKind.PHOTO]

    @property
    def documents(self):
        return [m for m in self.media if m.kind == MediaKind.DOCUMENT]


class PersonCase(Base):
    """Link between a case and its person."""
    __tablename__ = "person_cases"

    id = Column(UUID(), primary_key=True, default=uuid4)
    case_id = Column(UUID(), ForeignKey("cases.id", ondelete="CASCADE"), nullable=False)
    person_id = Column(UUID(), ForeignKey("persons.id", ondelete="CASCADE"), nullable=False)
    role = Column(String(60))
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    case = relationship("Case", back_populates="person_links")
    person = relationship("Person", back_populates="case_links")

    __table_args__ = (
        UniqueConstraint('case_id', 'person_id', name='uq_person_cases_case_person'),
    )


class CaseMedia(Base):
    """Photo or document attached to a case."""
    __tablename__ = "case_media"

    id = Column(UUID(), primary_key=True, default=uuid4)
    case_id = Column(UUID(), ForeignKey("cases.id", ondelete="CASCADE"), nullable=False)
    kind = Column(_enum(MediaKind), nullable=False)
    file_path = Column(String(500), nullable=False)
    original_name = Column(String(255))
    mime_type = Column(String(100))
    size = Column(BigInteger)
    description = Column(String(200))
    is_primary = Column(Boolean, default=False, nullable=False)
    uploaded_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    case = relationship("Case", back_populates="media")

    __table_args__ = (
        Index('ix_case_media_case_kind', 'case_id', 'kind'),
    )
