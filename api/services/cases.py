"""Legajos - Case service
The case/person upsert: a case and its person are created or updated in one
transaction, with the person's contact sub-documents normalized on the way.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.cases import (
    CaseCreate,
    CaseResponse,
    CaseUpdate,
    PersonaInput,
    PersonaResponse,
    RewardAmountStatus,
)
from api.schemas.media import MediaResponse
from core.contacts import (
    EMAIL_LIMIT,
    PHONE_LIMIT,
    legacy_address,
    parse_additional_info,
    parse_social_networks,
    parse_value_entries,
    principal_address,
    sanitize_additional_info,
    sanitize_addresses,
    sanitize_emails,
    sanitize_phones,
    sanitize_social_networks,
)
from core.database.models import (
    Case,
    CaseMedia,
    EstadoRequerimiento,
    FuerzaAsignada,
    Jurisdiccion,
    Nationality,
    Person,
    PersonAddress,
    PersonCase,
    Recompensa,
)
from core.database.repository import get_case_repository, get_person_repository
from core.errors import BadRequestError, ConflictError, NotFoundError
from core.formatting import compute_age, reward_amount_text
from core.logging import get_logger
from core.storage import MediaStorage, get_storage, media_url

logger = get_logger()

CASE_TEXT_FIELDS = (
    "numero_causa",
    "caratula",
    "juzgado_interventor",
    "secretaria",
    "fiscalia",
    "delito",
    "fecha_hecho",
    "priority_value",
)
CASE_ENUM_FIELDS = ("jurisdiccion", "estado_requerimiento", "fuerza_asignada", "recompensa")
PERSON_NULLABLE_FIELDS = (
    "sex",
    "document_type",
    "document_name",
    "birthdate",
    "notes",
    "other_nationality",
)
LEGACY_ADDRESS_FIELDS = ("street", "street_number", "province", "locality", "reference")


# -- serialization ---------------------------------------------------------

def serialize_media(media: CaseMedia) -> MediaResponse:
    return MediaResponse(
        id=media.id,
        kind=media.kind,
        description=media.description,
        url=media_url(media.file_path),
        original_name=media.original_name,
        mime_type=media.mime_type,
        size=media.size,
        uploaded_at=media.uploaded_at,
        is_primary=bool(media.is_primary),
    )


def serialize_persona(person: Person) -> PersonaResponse:
    emails = parse_value_entries(person.emails, EMAIL_LIMIT)
    phones = parse_value_entries(person.phones, PHONE_LIMIT)
    addresses = [
        {
            "street": a.street,
            "street_number": a.street_number,
            "province": a.province,
            "locality": a.locality,
            "reference": a.reference,
            "is_principal": bool(a.is_principal),
        }
        for a in person.addresses
    ]
    main = principal_address(addresses) or {}

    return PersonaResponse.model_validate(
        {
            "id": person.id,
            "first_name": person.first_name,
            "last_name": person.last_name,
            "sex": person.sex,
            "identity_number": person.identity_number,
            "document_type": person.document_type,
            "document_name": person.document_name,
            "birthdate": person.birthdate,
            "age": compute_age(person.birthdate),
            "notes": person.notes,
            "nationality": person.nationality or Nationality.ARGENTINA,
            "other_nationality": person.other_nationality,
            "emails": emails,
            "phones": phones,
            "social_networks": parse_social_networks(person.social_networks),
            "addresses": addresses,
            "email": emails[0]["value"] if emails else None,
            "phone": phones[0]["value"] if phones else None,
            **{field: main.get(field) for field in LEGACY_ADDRESS_FIELDS},
        }
    )


def reward_status(case: Case) -> Optional[RewardAmountStatus]:
    if case.reward_amount is not None:
        return RewardAmountStatus.KNOWN
    if case.recompensa == Recompensa.SI:
        return RewardAmountStatus.UNKNOWN
    return None


def serialize_case(case: Case) -> CaseResponse:
    person = case.person
    return CaseResponse(
        id=case.id,
        numero_causa=case.numero_causa,
        caratula=case.caratula,
        juzgado_interventor=case.juzgado_interventor,
        secretaria=case.secretaria,
        fiscalia=case.fiscalia,
        jurisdiccion=case.jurisdiccion,
        delito=case.delito,
        fecha_hecho=case.fecha_hecho,
        estado_requerimiento=case.estado_requerimiento,
        fuerza_asignada=case.fuerza_asignada,
        recompensa=case.recompensa,
        reward_amount=reward_amount_text(case),
        reward_amount_status=reward_status(case),
        priority_value=case.priority_value,
        creado_en=case.creado_en,
        actualizado_en=case.actualizado_en,
        additional_info=parse_additional_info(case.additional_info),
        photos=[serialize_media(m) for m in case.photos],
        documents=[serialize_media(m) for m in case.documents],
        persona=serialize_persona(person) if person is not None else None,
    )


# -- person upsert ---------------------------------------------------------

def _build_addresses(entries: list[dict]) -> list[PersonAddress]:
    return [PersonAddress(position=index, **entry) for index, entry in enumerate(entries)]


def apply_persona(person: Person, persona: PersonaInput) -> None:
    """Copy the provided persona fields onto the person.

    Lists replace the stored lists wholesale; the single-value legacy fields
    are only used when the matching list is absent from the payload.
    """
    provided = persona.model_fields_set

    if persona.first_name:
        person.first_name = persona.first_name
    if persona.last_name:
        person.last_name = persona.last_name
    if "identity_number" in provided:
        person.identity_number = persona.identity_number
    for field in PERSON_NULLABLE_FIELDS:
        if field in provided:
            setattr(person, field, getattr(persona, field))
    if persona.nationality is not None:
        person.nationality = persona.nationality
    if person.nationality != Nationality.OTRO:
        person.other_nationality = None

    if "emails" in provided and persona.emails is not None:
        person.emails = sanitize_emails(persona.emails)
    elif "email" in provided:
        person.emails = sanitize_emails([persona.email] if persona.email else [])

    if "phones" in provided and persona.phones is not None:
        person.phones = sanitize_phones(persona.phones)
    elif "phone" in provided:
        person.phones = sanitize_phones([persona.phone] if persona.phone else [])

    if "social_networks" in provided and persona.social_networks is not None:
        person.social_networks = sanitize_social_networks(persona.social_networks)

    if "addresses" in provided and persona.addresses is not None:
        person.addresses = _build_addresses(sanitize_addresses(persona.addresses))
    elif provided.intersection(LEGACY_ADDRESS_FIELDS):
        person.addresses = _build_addresses(
            legacy_address(**{field: getattr(persona, field) for field in LEGACY_ADDRESS_FIELDS})
        )


async def ensure_person(
    db: AsyncSession,
    persona: PersonaInput,
    current_person_id: Optional[UUID] = None,
) -> Person:
    """Resolve the person a case payload refers to, updating or creating it.

    Lookup order: explicit personId, the case's current person, then an
    existing person with the same identity number. Only when all three miss
    is a new person created, which requires first and last name.
    """
    repo = get_person_repository(db)
    person = None

    if persona.person_id is not None:
        person = await repo.get_with_addresses(persona.person_id)
        if person is None:
            raise NotFoundError("Persona no encontrada")
    elif current_person_id is not None:
        person = await repo.get_with_addresses(current_person_id)

    if person is None and persona.identity_number:
        person = await repo.get_by_identity_number(persona.identity_number)

    if person is None:
        if not persona.first_name or not persona.last_name:
            raise BadRequestError("Nombre y apellido son obligatorios")
        person = Person(
            first_name=persona.first_name,
            last_name=persona.last_name,
            nationality=Nationality.ARGENTINA,
            emails=[],
            phones=[],
            social_networks=[],
            addresses=[],
        )
        db.add(person)
    elif persona.identity_number and persona.identity_number != person.identity_number:
        other = await repo.get_by_identity_number(persona.identity_number)
        if other is not None and other.id != person.id:
            raise ConflictError("El documento ya está registrado")

    apply_persona(person, persona)
    await db.flush()
    return person


async def attach_person_to_case(db: AsyncSession, case_id: UUID, person_id: UUID) -> None:
    """A case links to exactly one person: drop existing links, add one."""
    await get_case_repository(db).clear_person_links(case_id)
    db.add(PersonCase(case_id=case_id, person_id=person_id))
    await db.flush()


# -- case operations -------------------------------------------------------

async def list_cases(db: AsyncSession, estado: Optional[EstadoRequerimiento] = None) -> list[CaseResponse]:
    return [serialize_case(c) for c in await get_case_repository(db).list_all(estado)]


async def load_case(db: AsyncSession, case_id: UUID) -> Case:
    case = await get_case_repository(db).get_full(case_id)
    if case is None:
        raise NotFoundError("Caso no encontrado")
    return case


async def get_case(db: AsyncSession, case_id: UUID) -> CaseResponse:
    return serialize_case(await load_case(db, case_id))


async def create_case(db: AsyncSession, payload: CaseCreate) -> CaseResponse:
    recompensa = payload.recompensa or Recompensa.SIN_DATO
    try:
        person = await ensure_person(db, payload.persona)
        case = Case(
            numero_causa=payload.numero_causa,
            caratula=payload.caratula,
            juzgado_interventor=payload.juzgado_interventor,
            secretaria=payload.secretaria,
            fiscalia=payload.fiscalia,
            jurisdiccion=payload.jurisdiccion or Jurisdiccion.SIN_DATO,
            delito=payload.delito,
            fecha_hecho=payload.fecha_hecho,
            estado_requerimiento=payload.estado_requerimiento or EstadoRequerimiento.CAPTURA_VIGENTE,
            fuerza_asignada=payload.fuerza_asignada or FuerzaAsignada.SD,
            recompensa=recompensa,
            reward_amount=(
                Decimal(payload.reward_amount)
                if recompensa == Recompensa.SI and payload.reward_amount
                else None
            ),
            priority_value=payload.priority_value,
            additional_info=sanitize_additional_info(payload.additional_info) or [],
        )
        db.add(case)
        await db.flush()
        await attach_person_to_case(db, case.id, person.id)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.audit("create", "case", case.id, person_id=str(person.id))
    return await get_case(db, case.id)


async def update_case(db: AsyncSession, case_id: UUID, payload: CaseUpdate) -> CaseResponse:
    provided = payload.model_fields_set - {"persona", "reward_amount_status"}
    marks_unknown = payload.reward_amount_status == RewardAmountStatus.UNKNOWN
    if not provided and payload.persona is None and not marks_unknown:
        raise BadRequestError("No hay cambios para aplicar")

    try:
        case = await load_case(db, case_id)
        current_person = case.person
        # a bare UNKNOWN status only changes a case that has a reward
        if not provided and payload.persona is None and case.recompensa != Recompensa.SI:
            raise BadRequestError("No hay cambios para aplicar")

        for field in CASE_TEXT_FIELDS:
            if field in provided:
                setattr(case, field, getattr(payload, field))
        for field in CASE_ENUM_FIELDS:
            value = getattr(payload, field)
            if field in provided and value is not None:
                setattr(case, field, value)
        if "additional_info" in provided:
            case.additional_info = sanitize_additional_info(payload.additional_info) or []

        resolved = case.recompensa
        if "reward_amount" in provided:
            case.reward_amount = (
                Decimal(payload.reward_amount)
                if resolved == Recompensa.SI and payload.reward_amount
                else None
            )
        elif resolved != Recompensa.SI:
            case.reward_amount = None
        elif marks_unknown:
            case.reward_amount = None

        if payload.persona is not None:
            person = await ensure_person(
                db, payload.persona, current_person.id if current_person else None
            )
            await attach_person_to_case(db, case.id, person.id)
            db.expire(case, ["person_links"])

        case.actualizado_en = datetime.utcnow()
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.audit("update", "case", case_id, fields=sorted(provided))
    return await get_case(db, case_id)


async def delete_case(db: AsyncSession, case_id: UUID, storage: Optional[MediaStorage] = None) -> None:
    """Delete the case and its media rows, then the stored files."""
    storage = storage or get_storage()
    case = await load_case(db, case_id)
    paths = [m.file_path for m in case.media]

    await db.delete(case)
    await db.commit()

    for path in paths:
        storage.remove(path)
    logger.audit("delete", "case", case_id, files=len(paths))
