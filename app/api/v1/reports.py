from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.base import get_db
from app.schemas import report as report_schema
from app.services import report_service

router = APIRouter(prefix="/reports", tags=["reports"])


@router.post("/learner/{user_id}", response_model=report_schema.ReportResponse, status_code=status.HTTP_201_CREATED)
async def generate_learner_report(
    user_id: int,
    db: AsyncSession = Depends(get_db),
):
    """학습자 리포트 생성 API"""
    return await report_service.generate_learner_report(db, user_id)


@router.post("/course/{course_id}", response_model=report_schema.ReportResponse, status_code=status.HTTP_201_CREATED)
async def generate_course_report(
    course_id: int,
    db: AsyncSession = Depends(get_db),
):
    """강좌 리포트 생성 API"""
    return await report_service.generate_course_report(db, course_id)


@router.post("/system", response_model=report_schema.ReportResponse, status_code=status.HTTP_201_CREATED)
async def generate_system_report(db: AsyncSession = Depends(get_db)):
    """시스템 리포트 생성 API"""
    return await report_service.generate_system_report(db)


@router.get("", response_model=report_schema.ReportListResponse)
async def list_reports(
    type: report_schema.ReportType | None = Query(None, description="리포트 유형"),
    target_id: int | None = Query(None),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    """리포트 목록 조회 API"""
    return await report_service.list_reports(db, report_type=type, target_id=target_id, limit=limit)
