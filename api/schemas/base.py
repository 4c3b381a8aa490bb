"""Legajos - Schema base classes
camelCase on the wire, snake_case in Python.
"""

import re
from typing import Any

from pydantic import BaseModel, field_validator
from pydantic.alias_generators import to_camel

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def sanitize_text(text: str | None, max_length: int | None = None) -> str | None:
    """Trim, drop control characters and turn blanks into None."""
    if text is None:
        return None
    text = re.sub(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]", "", text).strip()
    if max_length:
        text = text[:max_length]
    return text or None


def normalize_email(value: str) -> str:
    value = value.strip().lower()
    if not EMAIL_PATTERN.match(value):
        raise ValueError("Email inválido")
    return value


class CamelModel(BaseModel):
    """Base for every request and response body."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class InputModel(CamelModel):
    """Request body where blank strings count as absent."""

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str):
            return sanitize_text(v)
        return v
