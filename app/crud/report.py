from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.report import NuraReport


async def create_report(
    session: AsyncSession,
    report_type: str,
    content: str,
    insights: list[str],
    recommendations: list[str],
    confidence: float,
    metadata: dict,
    target_id: int | None = None,
) -> NuraReport:
    """AI 리포트 저장"""
    report = NuraReport(
        type=report_type,
        target_id=target_id,
        content=content,
        insights=insights,
        recommendations=recommendations,
        confidence=confidence,
        report_metadata=metadata,
    )
    session.add(report)
    await session.commit()
    await session.refresh(report)
    return report


async def get_reports(
    session: AsyncSession,
    report_type: str | None = None,
    target_id: int | None = None,
    limit: int = 20,
) -> Sequence[NuraReport]:
    """AI 리포트 목록 (최신순)"""
    stmt = select(NuraReport)
    if report_type:
        stmt = stmt.where(NuraReport.type == report_type)
    if target_id is not None:
        stmt = stmt.where(NuraReport.target_id == target_id)
    stmt = stmt.order_by(NuraReport.created_at.desc(), NuraReport.id.desc()).limit(limit)
    result = await session.execute(stmt)
    return result.scalars().all()
