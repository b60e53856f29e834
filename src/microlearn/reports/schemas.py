"""Response schemas for report endpoints."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class ReportData(BaseModel):
    """Known report fields; anything else the generator wrote passes through."""

    model_config = ConfigDict(extra="allow")

    summary: Any = None
    details: Any = None
    strengths: Any = None
    weaknesses: Any = None
    engagementScore: Any = None  # noqa: N815


class ReportResponse(BaseModel):
    id: int
    generated_at: str | None
    report_data: ReportData
    upgrade_prompt: str | None = None


class ReportListResponse(BaseModel):
    reports: list[ReportResponse]
