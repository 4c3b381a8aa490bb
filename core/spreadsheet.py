"""Legajos - Excel export
One row per case on a 'Casos' sheet.
"""

import io
from typing import Iterable

from loguru import logger
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font
from openpyxl.utils import get_column_letter

from core.database.models import Case, Recompensa
from core.formatting import (
    EMPTY,
    additional_info_lines,
    compute_age,
    enum_value,
    estado_label,
    format_date,
    format_datetime,
    format_enum,
    full_name,
    person_emails,
    person_phones,
    reward_amount_text,
    summarize_addresses,
)

SHEET_TITLE = "Casos"

COLUMNS = [
    ("ID", 36),
    ("Estado", 18),
    ("Fuerza", 20),
    ("Expediente", 20),
    ("Jurisdicción", 18),
    ("Carátula", 25),
    ("Delito", 25),
    ("Recompensa", 15),
    ("Monto recompensa", 18),
    ("Creado", 22),
    ("Actualizado", 22),
    ("Nombre", 25),
    ("Documento", 22),
    ("Sexo", 12),
    ("Nacimiento", 18),
    ("Edad", 8),
    ("Domicilio", 30),
    ("Teléfonos", 30),
    ("Emails", 30),
    ("Notas", 40),
    ("Información complementaria", 45),
]


def case_row(case: Case) -> list:
    """Cell values for one case, in column order."""
    person = case.person
    if enum_value(case.recompensa) == Recompensa.SI.value:
        amount = reward_amount_text(case) or "Monto no confirmado"
    else:
        amount = EMPTY
    age = compute_age(person.birthdate) if person is not None else None

    return [
        str(case.id),
        estado_label(case.estado_requerimiento),
        enum_value(case.fuerza_asignada) or "S/D",
        case.numero_causa or EMPTY,
        format_enum(case.jurisdiccion),
        case.caratula or EMPTY,
        case.delito or EMPTY,
        enum_value(case.recompensa) or EMPTY,
        amount,
        format_datetime(case.creado_en) or EMPTY,
        format_datetime(case.actualizado_en) or EMPTY,
        full_name(person) or EMPTY,
        (person.identity_number if person is not None else None) or EMPTY,
        (enum_value(person.sex) if person is not None else None) or EMPTY,
        (format_date(person.birthdate) if person is not None else None) or EMPTY,
        age if age is not None else EMPTY,
        summarize_addresses(person) or EMPTY,
        " | ".join(person_phones(person)) or EMPTY,
        " | ".join(person_emails(person)) or EMPTY,
        (person.notes if person is not None else None) or EMPTY,
        " | ".join(additional_info_lines(case)) or EMPTY,
    ]


def build_cases_workbook(cases: Iterable[Case]) -> bytes:
    """Serialize the cases to an .xlsx document."""
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = SHEET_TITLE

    sheet.append([header for header, _ in COLUMNS])
    for index, (_, width) in enumerate(COLUMNS, start=1):
        sheet.column_dimensions[get_column_letter(index)].width = width
    for cell in sheet[1]:
        cell.font = Font(bold=True)
        cell.alignment = Alignment(vertical="center")
    sheet.freeze_panes = "A2"

    count = 0
    for case in cases:
        sheet.append(case_row(case))
        count += 1

    buffer = io.BytesIO()
    workbook.save(buffer)
    logger.debug(f"Built cases workbook with {count} rows")
    return buffer.getvalue()
