from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.base import get_db
from app.schemas import course as course_schema, quiz as quiz_schema, tag as tag_schema
from app.services import course_service, quiz_service, tag_service

router = APIRouter(prefix="/courses", tags=["courses"])


@router.post("", response_model=course_schema.CourseWithTagsResponse, status_code=status.HTTP_201_CREATED)
async def create_course(
    request: course_schema.CourseCreateRequest,
    db: AsyncSession = Depends(get_db),
):
    """강좌 생성 API (자동 태깅 포함)"""
    return await course_service.create_course(db, request)


@router.put("/{course_id}", response_model=course_schema.CourseWithTagsResponse)
async def update_course(
    course_id: int,
    request: course_schema.CourseUpdateRequest,
    db: AsyncSession = Depends(get_db),
):
    """강좌 수정 API (재태깅 포함)"""
    return await course_service.update_course(db, course_id, request)


@router.get("/{course_id}/tags", response_model=tag_schema.CourseTagListResponse)
async def get_course_tags(
    course_id: int,
    db: AsyncSession = Depends(get_db),
):
    """강좌 태그 조회 API"""
    return await tag_service.get_course_tags(db, course_id)


@router.post("/{course_id}/auto-tag", response_model=tag_schema.CourseTagListResponse)
async def auto_tag_course(
    course_id: int,
    request: tag_schema.AutoTagRequest,
    db: AsyncSession = Depends(get_db),
):
    """강좌 자동 태깅 API"""
    course = await course_service.get_course(db, course_id)
    return await tag_service.auto_tag(
        db,
        course_id=course.id,
        title=course.title,
        description=course.description,
        content=request.content,
        manual_tags=request.manual_tags,
    )


@router.delete("/{course_id}/tags/{tag_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_course_tag(
    course_id: int,
    tag_id: int,
    db: AsyncSession = Depends(get_db),
):
    """강좌 태그 제거 API"""
    await tag_service.remove_course_tag(db, course_id, tag_id)


@router.get("/{course_id}/quizzes", response_model=quiz_schema.QuizListResponse)
async def get_course_quizzes(
    course_id: int,
    db: AsyncSession = Depends(get_db),
):
    """강좌 퀴즈 목록 조회 API"""
    return await quiz_service.get_course_quizzes(db, course_id)
