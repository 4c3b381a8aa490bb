"""Legajos - Display formatting
Labels, dates and summaries shared by the PDF, Excel and ZIP generators.
"""

import re
from datetime import date, datetime
from typing import Optional

from core.contacts import (
    EMAIL_LIMIT,
    PHONE_LIMIT,
    parse_additional_info,
    parse_social_networks,
    parse_value_entries,
)
from core.database.models import Case, EstadoRequerimiento, Person, Recompensa
from core.security import strip_diacritics

EMPTY = "—"

ESTADO_LABELS = {
    EstadoRequerimiento.CAPTURA_VIGENTE: "Captura vigente",
    EstadoRequerimiento.SIN_EFECTO: "Sin efecto",
    EstadoRequerimiento.DETENIDO: "Detenido",
}


def enum_value(value) -> Optional[str]:
    if value is None:
        return None
    return getattr(value, "value", value)


def estado_label(estado) -> str:
    if estado is None:
        return EMPTY
    try:
        return ESTADO_LABELS[EstadoRequerimiento(enum_value(estado))]
    except ValueError:
        return str(enum_value(estado))


def format_enum(value) -> str:
    """'SIN_DATO' -> 'SIN DATO'."""
    text = enum_value(value)
    return text.replace("_", " ") if text else EMPTY


def format_date(value: Optional[date]) -> Optional[str]:
    if value is None:
        return None
    return value.strftime("%d/%m/%Y")


def format_datetime(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.strftime("%d/%m/%Y %H:%M")


def compute_age(birthdate: Optional[date], today: Optional[date] = None) -> Optional[int]:
    """Whole years elapsed; 0 for a birthdate in the future."""
    if birthdate is None:
        return None
    today = today or date.today()
    if birthdate >= today:
        return 0
    years = today.year - birthdate.year
    if (today.month, today.day) < (birthdate.month, birthdate.day):
        years -= 1
    return max(years, 0)


def full_name(person: Optional[Person]) -> str:
    if person is None:
        return ""
    return " ".join(part for part in (person.first_name, person.last_name) if part).strip()


def case_file_base_name(name: Optional[str]) -> str:
    """'LEGAJO <NAME>' with diacritics and punctuation removed."""
    sanitized = strip_diacritics(name or "")
    sanitized = re.sub(r"[^A-Za-z0-9\s]", " ", sanitized)
    sanitized = re.sub(r"\s+", " ", sanitized).strip()
    if not sanitized:
        return "LEGAJO SIN PERSONA"
    return f"LEGAJO {sanitized.upper()}"


def person_phones(person: Optional[Person]) -> list[str]:
    if person is None:
        return []
    return [entry["value"] for entry in parse_value_entries(person.phones, PHONE_LIMIT)]


def person_emails(person: Optional[Person]) -> list[str]:
    if person is None:
        return []
    return [entry["value"] for entry in parse_value_entries(person.emails, EMAIL_LIMIT)]


def person_networks(person: Optional[Person]) -> list[str]:
    if person is None:
        return []
    return [f"{n['network']}: {n['handle']}" for n in parse_social_networks(person.social_networks)]


def format_address(address) -> str:
    parts = [
        part
        for part in (address.street, address.street_number, address.locality, address.province)
        if part
    ]
    text = ", ".join(parts)
    if address.is_principal:
        text = f"[PRINCIPAL] {text}"
    if address.reference:
        text += f" (Ref.: {address.reference})"
    return text


def summarize_addresses(person: Optional[Person]) -> Optional[str]:
    """Every address joined with ' | ', or None."""
    if person is None or not person.addresses:
        return None
    return " | ".join(format_address(address) for address in person.addresses)


def reward_amount_text(case: Case) -> Optional[str]:
    if case.reward_amount is None:
        return None
    return f"{case.reward_amount:.2f}"


def reward_summary(case: Case) -> str:
    if enum_value(case.recompensa) != Recompensa.SI.value:
        return "No"
    return reward_amount_text(case) or "Monto no confirmado"


def additional_info_lines(case: Case) -> list[str]:
    return [f"{item['label']}: {item['value']}" for item in parse_additional_info(case.additional_info)]
