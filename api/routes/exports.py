"""Legajos - Export API Routes"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from api.rbac import can_export_cases
from api.schemas.cases import CaseExportRequest
from api.services import exports as service
from core.database.session import get_db

router = APIRouter(prefix="/cases", tags=["Exports"])

PDF_MEDIA_TYPE = "application/pdf"
ZIP_MEDIA_TYPE = "application/zip"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _attachment(content: bytes, file_name: str, media_type: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers=service.attachment_headers(file_name),
    )


@router.post(
    "/export/excel",
    summary="Export selected cases as an Excel sheet",
    dependencies=[Depends(can_export_cases)],
)
async def export_excel(
    payload: CaseExportRequest,
    db: AsyncSession = Depends(get_db),
):
    content, file_name = await service.export_cases_excel(db, payload.ids)
    return _attachment(content, file_name, XLSX_MEDIA_TYPE)


@router.get(
    "/export/zip",
    summary="Export every case, or those in one state, as nested ZIP bundles",
    dependencies=[Depends(can_export_cases)],
)
async def export_all_zip(
    estado: Optional[str] = Query(default=None),
    db: AsyncSession = Depends(get_db),
):
    content, file_name = await service.export_all_cases_zip(db, estado)
    return _attachment(content, file_name, ZIP_MEDIA_TYPE)


@router.get(
    "/{case_id}/export/pdf",
    summary="Export a case dossier as PDF",
    dependencies=[Depends(can_export_cases)],
)
async def export_pdf(
    case_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    content, file_name = await service.export_case_pdf(db, case_id)
    return _attachment(content, file_name, PDF_MEDIA_TYPE)


@router.get(
    "/{case_id}/export/zip",
    summary="Export a case with its files as a ZIP package",
    dependencies=[Depends(can_export_cases)],
)
async def export_zip(
    case_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """The package holds the PDF dossier, a one-row sheet and every stored
    photo and document that is still on disk."""
    content, file_name = await service.export_case_zip(db, case_id)
    return _attachment(content, file_name, ZIP_MEDIA_TYPE)
