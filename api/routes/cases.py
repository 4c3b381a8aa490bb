"""
Legajos - Case Routes
Case files with their embedded person. Create and update run the person
upsert in the same transaction as the case write.
"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from api.auth import get_current_user
from api.rbac import can_manage_cases
from api.schemas.cases import CaseCreate, CaseEnvelope, CaseListResponse, CaseUpdate
from api.services import cases as service
from core.database import User
from core.database.models import EstadoRequerimiento
from core.database.session import get_db

router = APIRouter(prefix="/cases", tags=["Cases"])


@router.get("", response_model=CaseListResponse)
async def list_cases(
    estado: Optional[EstadoRequerimiento] = Query(default=None),
    _: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """List cases by priority (highest first, unset last), then newest."""
    return CaseListResponse(cases=await service.list_cases(db, estado))


@router.get("/{case_id}", response_model=CaseEnvelope)
async def get_case(
    case_id: UUID,
    _: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return CaseEnvelope(case=await service.get_case(db, case_id))


@router.post("", response_model=CaseEnvelope, status_code=201)
async def create_case(
    payload: CaseCreate,
    _: User = Depends(can_manage_cases),
    db: AsyncSession = Depends(get_db)
):
    """Create a case and create or update its person."""
    return CaseEnvelope(case=await service.create_case(db, payload))


@router.patch("/{case_id}", response_model=CaseEnvelope)
async def update_case(
    case_id: UUID,
    payload: CaseUpdate,
    _: User = Depends(can_manage_cases),
    db: AsyncSession = Depends(get_db)
):
    return CaseEnvelope(case=await service.update_case(db, case_id, payload))


@router.delete("/{case_id}", status_code=204)
async def delete_case(
    case_id: UUID,
    _: User = Depends(can_manage_cases),
    db: AsyncSession = Depends(get_db)
):
    """Delete a case, its media rows and the stored files."""
    await service.delete_case(db, case_id)
    return Response(status_code=204)
