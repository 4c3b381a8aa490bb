"""Legajos - Case Schemas
Case payloads with their embedded person, and the serialized case view.
"""

import re
from datetime import date, datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import Field, field_validator, model_validator

from api.schemas.base import CamelModel, InputModel
from api.schemas.media import MediaResponse
from core.database.models import (
    DocumentType,
    EstadoRequerimiento,
    FuerzaAsignada,
    Jurisdiccion,
    Nationality,
    Recompensa,
    Sex,
)

REWARD_AMOUNT_PATTERN = re.compile(r"^\d{1,15}(\.\d{1,2})?$")


class RewardAmountStatus(str, Enum):
    KNOWN = "KNOWN"
    UNKNOWN = "UNKNOWN"


class ValueEntry(InputModel):
    value: Optional[str] = None


class SocialNetworkEntry(InputModel):
    network: Optional[str] = None
    handle: Optional[str] = None


class AddressEntry(InputModel):
    street: Optional[str] = None
    street_number: Optional[str] = None
    province: Optional[str] = None
    locality: Optional[str] = None
    reference: Optional[str] = None
    is_principal: bool = False


class AdditionalInfoEntry(InputModel):
    label: Optional[str] = None
    value: Optional[str] = None


class PersonaInput(InputModel):
    """Person embedded in a case payload.

    The single-value fields (email, phone, street...) are accepted for older
    clients and folded into the lists when the list itself is not sent.
    """

    person_id: Optional[UUID] = None
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    sex: Optional[Sex] = None
    document_type: Optional[DocumentType] = None
    document_name: Optional[str] = Field(None, max_length=120)
    identity_number: Optional[str] = Field(None, max_length=50)
    birthdate: Optional[date] = None
    notes: Optional[str] = Field(None, max_length=500)
    nationality: Optional[Nationality] = None
    other_nationality: Optional[str] = Field(None, max_length=120)

    emails: Optional[list[ValueEntry]] = None
    phones: Optional[list[ValueEntry]] = None
    social_networks: Optional[list[SocialNetworkEntry]] = None
    addresses: Optional[list[AddressEntry]] = None

    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    street: Optional[str] = Field(None, max_length=120)
    street_number: Optional[str] = Field(None, max_length=20)
    province: Optional[str] = Field(None, max_length=120)
    locality: Optional[str] = Field(None, max_length=120)
    reference: Optional[str] = Field(None, max_length=255)

    @model_validator(mode="after")
    def check_nationality(self):
        if self.nationality == Nationality.OTRO and not self.other_nationality:
            raise ValueError("Especifica la nacionalidad")
        return self


class CaseFields(InputModel):
    numero_causa: Optional[str] = Field(None, max_length=120)
    caratula: Optional[str] = Field(None, max_length=255)
    juzgado_interventor: Optional[str] = Field(None, max_length=255)
    secretaria: Optional[str] = Field(None, max_length=255)
    fiscalia: Optional[str] = Field(None, max_length=255)
    jurisdiccion: Optional[Jurisdiccion] = None
    delito: Optional[str] = Field(None, max_length=255)
    fecha_hecho: Optional[date] = None
    estado_requerimiento: Optional[EstadoRequerimiento] = None
    fuerza_asignada: Optional[FuerzaAsignada] = None
    recompensa: Optional[Recompensa] = None
    reward_amount: Optional[str] = None
    reward_amount_status: Optional[RewardAmountStatus] = None
    priority_value: Optional[int] = None
    additional_info: Optional[list[AdditionalInfoEntry]] = None

    @field_validator("reward_amount", mode="before")
    @classmethod
    def coerce_amount(cls, v):
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        if isinstance(v, str):
            return v.strip() or None
        return v

    @field_validator("reward_amount")
    @classmethod
    def validate_amount(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not REWARD_AMOUNT_PATTERN.match(v):
            raise ValueError("Monto inválido (máx 2 decimales)")
        return v

    @model_validator(mode="after")
    def check_reward(self):
        if (
            self.recompensa == Recompensa.SI
            and self.reward_amount_status != RewardAmountStatus.UNKNOWN
            and not self.reward_amount
        ):
            raise ValueError("Indica el monto de la recompensa")
        return self


class CaseCreate(CaseFields):
    persona: PersonaInput


class CaseUpdate(CaseFields):
    persona: Optional[PersonaInput] = None


class CaseExportRequest(CamelModel):
    ids: list[UUID] = []


class ValueItem(CamelModel):
    value: str


class SocialNetworkItem(CamelModel):
    network: str
    handle: str


class AddressItem(CamelModel):
    street: Optional[str] = None
    street_number: Optional[str] = None
    province: Optional[str] = None
    locality: Optional[str] = None
    reference: Optional[str] = None
    is_principal: bool = False


class AdditionalInfoItem(CamelModel):
    label: str
    value: str


class PersonaResponse(CamelModel):
    id: UUID
    first_name: str
    last_name: str
    sex: Optional[Sex] = None
    identity_number: Optional[str] = None
    document_type: Optional[DocumentType] = None
    document_name: Optional[str] = None
    birthdate: Optional[date] = None
    age: Optional[int] = None
    notes: Optional[str] = None
    nationality: Nationality = Nationality.ARGENTINA
    other_nationality: Optional[str] = None
    emails: list[ValueItem] = []
    phones: list[ValueItem] = []
    social_networks: list[SocialNetworkItem] = []
    addresses: list[AddressItem] = []
    # Mirrors of the first email/phone and the principal address
    email: Optional[str] = None
    phone: Optional[str] = None
    street: Optional[str] = None
    street_number: Optional[str] = None
    province: Optional[str] = None
    locality: Optional[str] = None
    reference: Optional[str] = None


class CaseResponse(CamelModel):
    id: UUID
    numero_causa: Optional[str] = None
    caratula: Optional[str] = None
    juzgado_interventor: Optional[str] = None
    secretaria: Optional[str] = None
    fiscalia: Optional[str] = None
    jurisdiccion: Jurisdiccion
    delito: Optional[str] = None
    fecha_hecho: Optional[date] = None
    estado_requerimiento: EstadoRequerimiento
    fuerza_asignada: FuerzaAsignada
    recompensa: Recompensa
    reward_amount: Optional[str] = None
    reward_amount_status: Optional[RewardAmountStatus] = None
    priority_value: Optional[int] = None
    creado_en: datetime
    actualizado_en: datetime
    additional_info: list[AdditionalInfoItem] = []
    photos: list[MediaResponse] = []
    documents: list[MediaResponse] = []
    persona: Optional[PersonaResponse] = None


class CaseEnvelope(CamelModel):
    case: CaseResponse


class CaseListResponse(CamelModel):
    cases: list[CaseResponse]
