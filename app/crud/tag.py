from typing import Sequence

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.tag import CourseTag, Tag


async def get_tag_by_id(session: AsyncSession, tag_id: int) -> Tag | None:
    result = await session.execute(select(Tag).where(Tag.id == tag_id))
    return result.scalar_one_or_none()


async def get_tag_by_name(session: AsyncSession, name: str) -> Tag | None:
    """이름으로 태그 조회 (대소문자 무시)"""
    stmt = select(Tag).where(func.lower(Tag.name) == name.strip().lower())
    result = await session.execute(stmt)
    return result.scalars().first()


async def add_tag(
    session: AsyncSession,
    name: str,
    category: str | None,
    description: str | None,
    color: str | None,
) -> Tag:
    """태그 추가 (commit은 호출한 쪽에서)"""
    tag = Tag(name=name.strip(), category=category, description=description, color=color)
    session.add(tag)
    await session.flush()
    return tag


async def get_tags(
    session: AsyncSession,
    category: str | None = None,
    search: str | None = None,
) -> Sequence[Tag]:
    """태그 목록 (이름순, 카테고리/부분 검색 필터)"""
    stmt = select(Tag)
    if category:
        stmt = stmt.where(Tag.category == category)
    if search:
        stmt = stmt.where(func.lower(Tag.name).contains(search.strip().lower()))
    result = await session.execute(stmt.order_by(Tag.name))
    return result.scalars().all()


async def delete_tag(session: AsyncSession, tag_id: int) -> None:
    """태그 삭제 (모든 강좌 연결 먼저 제거)"""
    await session.execute(delete(CourseTag).where(CourseTag.tag_id == tag_id))
    await session.execute(delete(Tag).where(Tag.id == tag_id))
    await session.commit()


async def get_course_tag_link(session: AsyncSession, course_id: int, tag_id: int) -> CourseTag | None:
    stmt = select(CourseTag).where(CourseTag.course_id == course_id, CourseTag.tag_id == tag_id)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def apply_tag_to_course(
    session: AsyncSession,
    course_id: int,
    tag_id: int,
    confidence: float,
) -> CourseTag:
    """강좌에 태그 연결

    이미 연결된 경우 더 높은 신뢰도일 때만 갱신하고, 낮거나 같으면 그대로 둔다.
    commit은 호출한 쪽에서.
    """
    link = await get_course_tag_link(session, course_id, tag_id)
    if link is not None:
        if confidence > link.confidence:
            link.confidence = confidence
            await session.flush()
        return link

    link = CourseTag(course_id=course_id, tag_id=tag_id, confidence=confidence)
    session.add(link)
    await session.flush()
    return link


async def get_course_tags(session: AsyncSession, course_id: int) -> list[dict]:
    """강좌에 연결된 태그 (신뢰도 높은 순)"""
    stmt = (
        select(
            Tag.id.label("tag_id"),
            Tag.name,
            Tag.category,
            Tag.description,
            Tag.color,
            CourseTag.confidence,
        )
        .join(CourseTag, CourseTag.tag_id == Tag.id)
        .where(CourseTag.course_id == course_id)
        .order_by(CourseTag.confidence.desc(), Tag.name)
    )
    result = await session.execute(stmt)
    return [dict(row._mapping) for row in result.all()]


async def remove_course_tag(session: AsyncSession, course_id: int, tag_id: int) -> int:
    """강좌-태그 연결 제거, 삭제된 행 수 반환"""
    result = await session.execute(
        delete(CourseTag).where(CourseTag.course_id == course_id, CourseTag.tag_id == tag_id)
    )
    await session.commit()
    return result.rowcount or 0


async def get_popular_tags(session: AsyncSession, limit: int = 10) -> list[dict]:
    """강좌 연결 수 기준 인기 태그"""
    usage_count = func.count(CourseTag.id).label("usage_count")
    stmt = (
        select(Tag.id, Tag.name, Tag.category, Tag.color, usage_count)
        .outerjoin(CourseTag, CourseTag.tag_id == Tag.id)
        .group_by(Tag.id, Tag.name, Tag.category, Tag.color)
        .order_by(usage_count.desc(), Tag.name)
        .limit(limit)
    )
    result = await session.execute(stmt)
    return [dict(row._mapping) for row in result.all()]


async def update_tag(session: AsyncSession, tag: Tag, **fields) -> Tag:
    """태그 수정 (None은 NULL 허용 컬럼만 비움)"""
    tag.apply_fields(fields)
    await session.commit()
    await session.refresh(tag)
    return tag
