"""Legajos - Case exports
PDF dossiers, Excel sheets and ZIP bundles built from fully loaded cases.
"""

import time
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from api.services.cases import load_case
from core.database.models import EstadoRequerimiento
from core.database.repository import get_case_repository
from core.errors import BadRequestError, NotFoundError
from core.export import build_case_zip, build_cases_bundle
from core.logging import get_logger
from core.reports import generate_case_pdf
from core.spreadsheet import build_cases_workbook
from core.storage import MediaStorage

logger = get_logger()

ALL_ESTADOS = "TODOS"


async def export_case_pdf(
    db: AsyncSession, case_id: UUID, storage: Optional[MediaStorage] = None
) -> tuple[bytes, str]:
    case = await load_case(db, case_id)
    with logger.timer("export_pdf"):
        return generate_case_pdf(case, storage)


async def export_case_zip(
    db: AsyncSession, case_id: UUID, storage: Optional[MediaStorage] = None
) -> tuple[bytes, str]:
    case = await load_case(db, case_id)
    with logger.timer("export_zip"):
        return build_case_zip(case, storage)


async def export_cases_excel(db: AsyncSession, ids: list[UUID]) -> tuple[bytes, str]:
    if not ids:
        raise BadRequestError("Debe seleccionar al menos un caso para exportar")
    cases = await get_case_repository(db).list_by_ids(ids)
    content = build_cases_workbook(cases)
    file_name = f"casos_{int(time.time() * 1000)}.xlsx"
    logger.info("Generated Excel export", file_name=file_name, requested=len(ids), exported=len(cases))
    return content, file_name


def resolve_estado(estado: Optional[str]) -> Optional[EstadoRequerimiento]:
    """'TODOS', blank or missing mean every state."""
    if not estado or estado.strip().upper() == ALL_ESTADOS:
        return None
    try:
        return EstadoRequerimiento(estado.strip().upper())
    except ValueError:
        raise BadRequestError("Estado inválido")


async def export_all_cases_zip(
    db: AsyncSession, estado: Optional[str] = None, storage: Optional[MediaStorage] = None
) -> tuple[bytes, str]:
    resolved = resolve_estado(estado)
    cases = await get_case_repository(db).list_all(resolved)
    if not cases:
        if resolved is not None:
            raise NotFoundError(f"No hay casos con estado {resolved.value} para descargar")
        raise NotFoundError("No hay casos para descargar")

    with logger.timer("export_bundle"):
        return build_cases_bundle(cases, resolved.value if resolved else None, storage)


def attachment_headers(file_name: str) -> dict[str, str]:
    return {"Content-Disposition": f'attachment; filename="{file_name}"'}
