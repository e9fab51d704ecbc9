from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import InvalidDateRangeError
from app.models.base import get_db
from app.schemas import analytics as analytics_schema
from app.services import analytics_service

router = APIRouter(prefix="/analytics", tags=["analytics"])


def get_filters(
    start_date: datetime | None = Query(None, description="시작 시각 (포함)"),
    end_date: datetime | None = Query(None, description="종료 시각 (미포함)"),
    organization_id: str | None = Query(None),
    course_id: int | None = Query(None),
    user_id: int | None = Query(None),
) -> analytics_schema.AnalyticsFilter:
    """쿼리 파라미터를 분석 필터로 변환"""
    if start_date:
        start_date = analytics_service.to_utc(start_date)
    if end_date:
        end_date = analytics_service.to_utc(end_date)
    if start_date and end_date and start_date > end_date:
        raise InvalidDateRangeError()
    return analytics_schema.AnalyticsFilter(
        start_date=start_date,
        end_date=end_date,
        organization_id=organization_id,
        course_id=course_id,
        user_id=user_id,
    )


@router.get("/metrics", response_model=analytics_schema.LearningMetrics)
async def get_learning_metrics(
    filters: analytics_schema.AnalyticsFilter = Depends(get_filters),
    db: AsyncSession = Depends(get_db),
):
    """전체 학습 지표 API"""
    return await analytics_service.get_learning_metrics(db, filters)


@router.get("/courses", response_model=list[analytics_schema.CourseAnalytics])
async def get_course_analytics(
    filters: analytics_schema.AnalyticsFilter = Depends(get_filters),
    db: AsyncSession = Depends(get_db),
):
    """강좌별 지표 API"""
    return await analytics_service.get_course_analytics(db, filters)


@router.get("/users", response_model=list[analytics_schema.UserAnalytics])
async def get_user_analytics(
    filters: analytics_schema.AnalyticsFilter = Depends(get_filters),
    db: AsyncSession = Depends(get_db),
):
    """사용자별 지표 API"""
    return await analytics_service.get_user_analytics(db, filters)


@router.get("/trends", response_model=list[analytics_schema.TrendData])
async def get_learning_trends(
    period: analytics_schema.TrendPeriod = Query("monthly"),
    filters: analytics_schema.AnalyticsFilter = Depends(get_filters),
    db: AsyncSession = Depends(get_db),
):
    """기간별 학습 추이 API"""
    return await analytics_service.get_learning_trends(db, filters, period=period)


@router.get("/skill-gaps", response_model=list[analytics_schema.SkillGap])
async def get_skill_gaps(
    organization_id: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """스킬 격차 분석 API"""
    return await analytics_service.get_skill_gaps(db, organization_id)
