"""Public report router — consult-token addressed, read-only."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from rgaa_audit.core.response import DataResponse
from rgaa_audit.db.base import get_db
from rgaa_audit.schemas.report import AuditReport
from rgaa_audit.services.report import ReportService

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/{consult_id}", response_model=DataResponse[AuditReport])
async def get_report(
    consult_id: str,
    session: AsyncSession = Depends(get_db),
):
    """Compute the report of an audit from its stored results."""
    report = await ReportService(session).get_report(consult_id)
    return {"data": report}
