"""Report endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from microlearn.auth.dependencies import get_current_user
from microlearn.database import get_session
from microlearn.db.models import User
from microlearn.dependencies import get_oracle
from microlearn.oracle.base import Oracle
from microlearn.reports.schemas import ReportListResponse
from microlearn.reports.service import ReportService

router = APIRouter(prefix="/api/v1/reports", tags=["Reports"])


@router.get("", response_model=ReportListResponse)
async def list_reports(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> dict:
    """The caller's reports, newest first. FREE users get ``details`` redacted."""
    reports = await ReportService(db).list_reports(user.id)
    return {"reports": reports}


@router.post("/generate", status_code=status.HTTP_202_ACCEPTED)
async def trigger_generation(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    oracle: Oracle = Depends(get_oracle),
) -> dict:
    await ReportService(db).trigger_generation(user.id, oracle)
    return {"status": "accepted", "detail": "Report generation started."}
