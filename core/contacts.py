"""Legajos - Contact normalization
Trimming, truncation and filtering for the structured sub-documents stored on
persons and cases. Every sanitizer returns None for None input so callers can
tell "not provided" from "provided empty".
"""

from typing import Any, Iterable, Mapping, Optional

ADDITIONAL_INFO_LABEL_LIMIT = 120
ADDITIONAL_INFO_VALUE_LIMIT = 1000
EMAIL_LIMIT = 255
PHONE_LIMIT = 50
SOCIAL_NETWORK_LIMIT = 60
SOCIAL_HANDLE_LIMIT = 120
ADDRESS_LIMITS = {
    "street": 120,
    "street_number": 20,
    "province": 120,
    "locality": 120,
    "reference": 255,
}


def clean_text(value: Any, max_length: Optional[int] = None) -> Optional[str]:
    """Trimmed string or None when blank."""
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    return text[:max_length] if max_length else text


def _field(entry: Any, name: str) -> Any:
    if isinstance(entry, Mapping):
        return entry.get(name)
    return getattr(entry, name, None)


def sanitize_additional_info(items: Optional[Iterable[Any]]) -> Optional[list[dict]]:
    if items is None:
        return None
    sanitized = []
    for item in items:
        label = clean_text(_field(item, "label"), ADDITIONAL_INFO_LABEL_LIMIT)
        value = clean_text(_field(item, "value"), ADDITIONAL_INFO_VALUE_LIMIT)
        if label and value:
            sanitized.append({"label": label, "value": value})
    return sanitized


def sanitize_value_entries(
    entries: Optional[Iterable[Any]],
    max_length: int,
    lowercase: bool = False,
) -> Optional[list[dict]]:
    if entries is None:
        return None
    sanitized = []
    for entry in entries:
        raw = entry if isinstance(entry, str) else _field(entry, "value")
        value = clean_text(raw)
        if not value:
            continue
        if lowercase:
            value = value.lower()
        sanitized.append({"value": value[:max_length]})
    return sanitized


def sanitize_emails(entries: Optional[Iterable[Any]]) -> Optional[list[dict]]:
    return sanitize_value_entries(entries, EMAIL_LIMIT, lowercase=True)


def sanitize_phones(entries: Optional[Iterable[Any]]) -> Optional[list[dict]]:
    return sanitize_value_entries(entries, PHONE_LIMIT)


def sanitize_social_networks(entries: Optional[Iterable[Any]]) -> Optional[list[dict]]:
    """Entries need both a network and a handle."""
    if entries is None:
        return None
    sanitized = []
    for entry in entries:
        network = clean_text(_field(entry, "network"), SOCIAL_NETWORK_LIMIT)
        handle = clean_text(_field(entry, "handle"), SOCIAL_HANDLE_LIMIT)
        if network and handle:
            sanitized.append({"network": network, "handle": handle})
    return sanitized


def sanitize_addresses(entries: Optional[Iterable[Any]]) -> Optional[list[dict]]:
    """Addresses with at least one non-blank field, in input order."""
    if entries is None:
        return None
    sanitized = []
    for entry in entries:
        address = {
            name: clean_text(_field(entry, name), limit)
            for name, limit in ADDRESS_LIMITS.items()
        }
        if not any(address.values()):
            continue
        address["is_principal"] = bool(_field(entry, "is_principal"))
        sanitized.append(address)
    return sanitized


def parse_value_entries(value: Any, max_length: int) -> list[dict]:
    """Read a stored JSON list back, tolerating malformed rows."""
    if not isinstance(value, list):
        return []
    return sanitize_value_entries(
        [item for item in value if isinstance(item, (dict, str))], max_length
    ) or []


def parse_social_networks(value: Any) -> list[dict]:
    if not isinstance(value, list):
        return []
    return sanitize_social_networks([item for item in value if isinstance(item, dict)]) or []


def parse_additional_info(value: Any) -> list[dict]:
    if not isinstance(value, list):
        return []
    return sanitize_additional_info([item for item in value if isinstance(item, dict)]) or []


def principal_address(addresses: list) -> Any:
    """The principal address, else the first one, else None."""
    for address in addresses:
        if _field(address, "is_principal"):
            return address
    return addresses[0] if addresses else None


def legacy_address(street=None, street_number=None, province=None, locality=None, reference=None):
    """Single-address form input folded into the address list."""
    return sanitize_addresses(
        [
            {
                "street": street,
                "street_number": street_number,
                "province": province,
                "locality": locality,
                "reference": reference,
                "is_principal": True,
            }
        ]
    )
