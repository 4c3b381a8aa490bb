"""Legajos - Case form helpers

Convert between the case JSON returned by the API and the flat form values a
user edits, and build the payload sent back on save. Form values use the same
camelCase keys as the API.
"""

from datetime import date
from typing import Any, Optional

from core.contacts import (
    ADDITIONAL_INFO_LABEL_LIMIT,
    ADDITIONAL_INFO_VALUE_LIMIT,
    ADDRESS_LIMITS,
    EMAIL_LIMIT,
    PHONE_LIMIT,
    SOCIAL_HANDLE_LIMIT,
    SOCIAL_NETWORK_LIMIT,
    clean_text,
)

NO_PERSON = "Sin persona asociada"
NO_ADDRESS = "Sin domicilio informado"

ADDRESS_KEYS = {
    "street": "street",
    "streetNumber": "street_number",
    "province": "province",
    "locality": "locality",
    "reference": "reference",
}


def blank_to_none(value: Optional[str]) -> Optional[str]:
    return clean_text(value)


def to_value_entries(entries: Optional[list], fallback: Optional[str] = None) -> list[dict]:
    """Deduplicated {value} entries with the legacy single value first.

    Always returns at least one (possibly empty) row so a form has something
    to edit.
    """
    values: list[str] = []
    for entry in entries or []:
        if not entry:
            continue
        raw = clean_text(entry.get("value") if isinstance(entry, dict) else entry)
        if raw and raw not in values:
            values.append(raw)

    legacy = clean_text(fallback)
    if legacy and legacy not in values:
        values.insert(0, legacy)

    return [{"value": v} for v in values] or [{"value": ""}]


def to_social_entries(entries: Optional[list]) -> list[dict]:
    rows = [
        {"network": entry.get("network") or "", "handle": entry.get("handle") or ""}
        for entry in entries or []
        if entry
    ]
    return rows or [{"network": "", "handle": ""}]


def _blank_address(is_principal: bool) -> dict:
    address = {key: "" for key in ADDRESS_KEYS}
    address["isPrincipal"] = is_principal
    return address


def to_address_entries(addresses: Optional[list], fallback: Optional[dict] = None) -> list[dict]:
    """Address rows for the form.

    Without stored addresses the legacy single-address fields become one
    principal row; with neither an empty principal row is returned.
    """
    rows = []
    for entry in addresses or []:
        if not entry:
            continue
        row = {key: entry.get(key) or "" for key in ADDRESS_KEYS}
        row["isPrincipal"] = bool(entry.get("isPrincipal"))
        rows.append(row)

    if not rows and fallback and any(fallback.get(key) for key in ADDRESS_KEYS):
        row = {key: fallback.get(key) or "" for key in ADDRESS_KEYS}
        row["isPrincipal"] = True
        rows.append(row)

    return rows or [_blank_address(True)]


def case_to_form(record: dict) -> dict:
    """Form values for editing an existing case."""
    persona = record.get("persona") or {}
    recompensa = record.get("recompensa") or "SIN_DATO"

    return {
        "numeroCausa": record.get("numeroCausa") or "",
        "caratula": record.get("caratula") or "",
        "juzgadoInterventor": record.get("juzgadoInterventor") or "",
        "secretaria": record.get("secretaria") or "",
        "fiscalia": record.get("fiscalia") or "",
        "jurisdiccion": record.get("jurisdiccion") or "SIN_DATO",
        "delito": record.get("delito") or "",
        "fechaHecho": (record.get("fechaHecho") or "")[:10],
        "estadoRequerimiento": record.get("estadoRequerimiento") or "CAPTURA_VIGENTE",
        "fuerzaAsignada": record.get("fuerzaAsignada") or "S/D",
        "recompensa": recompensa,
        "rewardAmountStatus": (
            "UNKNOWN" if recompensa == "SI" and not record.get("rewardAmount") else "KNOWN"
        ),
        "rewardAmount": record.get("rewardAmount") or "",
        "persona": {
            "personId": persona.get("id"),
            "firstName": persona.get("firstName") or "",
            "lastName": persona.get("lastName") or "",
            "sex": persona.get("sex") or "MASCULINO",
            "documentType": persona.get("documentType") or "DNI",
            "documentName": persona.get("documentName") or "",
            "birthdate": (persona.get("birthdate") or "")[:10],
            "notes": persona.get("notes") or "",
            "emails": to_value_entries(persona.get("emails"), persona.get("email")),
            "phones": to_value_entries(persona.get("phones"), persona.get("phone")),
            "socialNetworks": to_social_entries(persona.get("socialNetworks")),
            "addresses": to_address_entries(
                persona.get("addresses"), {key: persona.get(key) for key in ADDRESS_KEYS}
            ),
            "nationality": persona.get("nationality") or "ARGENTINA",
            "otherNationality": persona.get("otherNationality") or "",
        },
        "additionalInfo": [
            {"label": entry.get("label", ""), "value": entry.get("value", "")}
            for entry in record.get("additionalInfo") or []
        ],
    }


def _normalize_values(entries: list, max_length: int, lowercase: bool = False) -> list[dict]:
    normalized = []
    for entry in entries or []:
        value = clean_text((entry or {}).get("value"), max_length)
        if value:
            normalized.append({"value": value.lower() if lowercase else value})
    return normalized


def _normalize_social(entries: list) -> list[dict]:
    normalized = []
    for entry in entries or []:
        network = clean_text((entry or {}).get("network"), SOCIAL_NETWORK_LIMIT)
        handle = clean_text((entry or {}).get("handle"), SOCIAL_HANDLE_LIMIT)
        if network and handle:
            normalized.append({"network": network, "handle": handle})
    return normalized


def _normalize_addresses(entries: list) -> list[dict]:
    normalized = []
    for entry in entries or []:
        entry = entry or {}
        address = {
            key: (clean_text(entry.get(key), ADDRESS_LIMITS[field]) or "")
            for key, field in ADDRESS_KEYS.items()
        }
        if any(address.values()):
            address["isPrincipal"] = bool(entry.get("isPrincipal"))
            normalized.append(address)
    return normalized


def _normalize_additional_info(entries: list) -> list[dict]:
    normalized = []
    for entry in entries or []:
        label = clean_text((entry or {}).get("label"), ADDITIONAL_INFO_LABEL_LIMIT)
        value = clean_text((entry or {}).get("value"), ADDITIONAL_INFO_VALUE_LIMIT)
        if label and value:
            normalized.append({"label": label, "value": value})
    return normalized


def _drop_none(data: dict) -> dict:
    return {key: value for key, value in data.items() if value is not None}


def build_case_payload(values: dict) -> dict:
    """API payload from form values.

    Blank text becomes absent, lists are trimmed and filtered, and the legacy
    single-value person fields mirror the first email, first phone and the
    principal address.
    """
    persona = values.get("persona") or {}
    emails = _normalize_values(persona.get("emails"), EMAIL_LIMIT, lowercase=True)
    phones = _normalize_values(persona.get("phones"), PHONE_LIMIT)
    addresses = _normalize_addresses(persona.get("addresses"))
    principal = next((a for a in addresses if a["isPrincipal"]), addresses[0] if addresses else {})

    recompensa = values.get("recompensa") or "SIN_DATO"
    status = values.get("rewardAmountStatus") or "KNOWN"
    nationality = persona.get("nationality") or "ARGENTINA"

    payload = _drop_none(
        {
            "numeroCausa": blank_to_none(values.get("numeroCausa")),
            "caratula": blank_to_none(values.get("caratula")),
            "juzgadoInterventor": blank_to_none(values.get("juzgadoInterventor")),
            "secretaria": blank_to_none(values.get("secretaria")),
            "fiscalia": blank_to_none(values.get("fiscalia")),
            "jurisdiccion": values.get("jurisdiccion") or "SIN_DATO",
            "delito": blank_to_none(values.get("delito")),
            "fechaHecho": blank_to_none(values.get("fechaHecho")),
            "estadoRequerimiento": values.get("estadoRequerimiento") or "CAPTURA_VIGENTE",
            "fuerzaAsignada": values.get("fuerzaAsignada") or "S/D",
            "recompensa": recompensa,
            "rewardAmountStatus": status if recompensa == "SI" else "KNOWN",
        }
    )
    if recompensa == "SI":
        payload["rewardAmount"] = (
            None if status == "UNKNOWN" else blank_to_none(values.get("rewardAmount"))
        )

    payload["persona"] = _drop_none(
        {
            "personId": persona.get("personId"),
            "firstName": persona.get("firstName"),
            "lastName": persona.get("lastName"),
            "sex": persona.get("sex"),
            "documentType": persona.get("documentType"),
            "documentName": blank_to_none(persona.get("documentName")),
            "birthdate": blank_to_none(persona.get("birthdate")),
            "notes": (persona.get("notes") or "").strip(),
            "nationality": nationality,
            "otherNationality": (
                blank_to_none(persona.get("otherNationality")) if nationality == "OTRO" else None
            ),
            "emails": emails,
            "phones": phones,
            "socialNetworks": _normalize_social(persona.get("socialNetworks")),
            "addresses": addresses,
            "email": emails[0]["value"] if emails else None,
            "phone": phones[0]["value"] if phones else None,
            **{key: principal.get(key) or None for key in ADDRESS_KEYS},
        }
    )
    payload["additionalInfo"] = _normalize_additional_info(values.get("additionalInfo"))
    return payload


def compute_age(birthdate: Optional[str], today: Optional[date] = None) -> str:
    """Age in whole years as text, '' for missing, invalid or future dates."""
    if not birthdate:
        return ""
    try:
        born = date.fromisoformat(birthdate[:10])
    except ValueError:
        return ""
    today = today or date.today()
    if born >= today:
        return ""
    years = today.year - born.year - ((today.month, today.day) < (born.month, born.day))
    return str(years)


def _address_pieces(address: dict) -> list[str]:
    pieces = []
    if address.get("street") or address.get("streetNumber"):
        pieces.append(f"{address.get('street') or 'S/D'} {address.get('streetNumber') or ''}".strip())
    if address.get("locality") or address.get("province"):
        pieces.append(", ".join(p for p in (address.get("locality"), address.get("province")) if p))
    if address.get("reference"):
        pieces.append(f"Ref.: {address['reference']}")
    return pieces


def format_person_summary(persona: Optional[dict[str, Any]]) -> str:
    """One-line address summary for a case's person."""
    if not persona:
        return NO_PERSON

    addresses = persona.get("addresses") or []
    if addresses:
        address = next((a for a in addresses if a.get("isPrincipal")), addresses[0])
    else:
        address = persona

    pieces = _address_pieces(address)
    return " · ".join(pieces) if pieces else NO_ADDRESS
