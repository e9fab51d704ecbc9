from datetime import datetime
from typing import Literal

from pydantic import AliasChoices, BaseModel, Field

ReportType = Literal["learner", "course", "system", "quiz_feedback"]


class ReportResponse(BaseModel):
    """AI 리포트 응답 스키마"""
    id: int
    type: ReportType
    target_id: int | None
    content: str
    insights: list[str] | None
    recommendations: list[str] | None
    confidence: float | None
    metadata: dict | None = Field(None, validation_alias=AliasChoices("report_metadata", "metadata"))
    created_at: datetime

    model_config = {"from_attributes": True}


class ReportListResponse(BaseModel):
    reports: list[ReportResponse]
    total: int
