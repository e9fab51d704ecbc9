from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.course import Course


async def get_course_by_id(session: AsyncSession, course_id: int) -> Course | None:
    """ID로 강좌 조회"""
    result = await session.execute(select(Course).where(Course.id == course_id))
    return result.scalar_one_or_none()


async def create_course(
    session: AsyncSession,
    title: str,
    mentor_id: int,
    description: str | None = None,
    organization_id: str | None = None,
    category: str | None = None,
    difficulty: str | None = None,
    is_public: bool = True,
) -> Course:
    """강좌 생성"""
    course = Course(
        title=title,
        description=description,
        mentor_id=mentor_id,
        organization_id=organization_id,
        category=category,
        difficulty=difficulty,
        is_public=is_public,
    )
    session.add(course)
    await session.commit()
    await session.refresh(course)
    return course


async def update_course(session: AsyncSession, course: Course, **fields) -> Course:
    """강좌 수정 (None은 NULL 허용 컬럼만 비움)"""
    course.apply_fields(fields)
    await session.commit()
    await session.refresh(course)
    return course
