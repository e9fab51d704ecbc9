import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.crud import course as course_crud, user as user_crud
from app.exceptions import CourseNotFoundError, UserNotFoundError
from app.schemas.course import CourseCreateRequest, CourseResponse, CourseUpdateRequest, CourseWithTagsResponse
from app.services import tag_service

logger = logging.getLogger(__name__)


async def get_course(session: AsyncSession, course_id: int):
    course = await course_crud.get_course_by_id(session, course_id)
    if not course:
        raise CourseNotFoundError(course_id)
    return course


async def create_course(session: AsyncSession, request: CourseCreateRequest) -> CourseWithTagsResponse:
    """강좌 생성 후 자동 태깅"""
    mentor = await user_crud.get_user_by_id(session, request.mentor_id)
    if not mentor:
        raise UserNotFoundError(request.mentor_id)

    course = await course_crud.create_course(
        session,
        title=request.title,
        mentor_id=request.mentor_id,
        description=request.description,
        organization_id=request.organization_id,
        category=request.category,
        difficulty=request.difficulty,
        is_public=request.is_public,
    )
    logger.info(f"강좌 생성: course_id={course.id}, mentor_id={course.mentor_id}")

    tags = await tag_service.auto_tag(
        session,
        course_id=course.id,
        title=course.title,
        description=course.description,
        content=request.content,
        manual_tags=request.manual_tags,
    )
    return CourseWithTagsResponse(course=CourseResponse.model_validate(course), tags=tags.tags)


async def update_course(
    session: AsyncSession,
    course_id: int,
    request: CourseUpdateRequest,
) -> CourseWithTagsResponse:
    """강좌 수정 후 재태깅 (기존 태그는 더 높은 신뢰도일 때만 갱신)"""
    course = await course_crud.get_course_by_id(session, course_id)
    if not course:
        raise CourseNotFoundError(course_id)

    fields = request.model_dump(exclude_unset=True, exclude={"content", "manual_tags"})
    course = await course_crud.update_course(session, course, **fields)

    tags = await tag_service.auto_tag(
        session,
        course_id=course.id,
        title=course.title,
        description=course.description,
        content=request.content,
        manual_tags=request.manual_tags,
    )
    return CourseWithTagsResponse(course=CourseResponse.model_validate(course), tags=tags.tags)
