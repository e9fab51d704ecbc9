"""분석용 집계 쿼리

필터는 ``AnalyticsFilter`` 하나로 받고, 테이블마다 어떤 컬럼이 기간/강좌/사용자/조직을
나타내는지 ``FilterScope``에 정의해 where 절로 변환한다. 테이블에 해당 차원이 없으면
그 필터는 적용되지 않는다. 기간은 ``start_date`` 포함, ``end_date`` 미포함.
"""
import dataclasses
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Sequence

from sqlalchemy import ColumnElement, and_, case, distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.course import Assignment, AssignmentSubmission, Certification, Course, Enrollment
from app.models.quiz import Quiz, QuizSubmission
from app.models.user import User
from app.schemas.analytics import AnalyticsFilter


@dataclass(frozen=True)
class FilterScope:
    """테이블별 필터 대상 컬럼"""
    date_column: Any = None
    course_column: Any = None
    user_column: Any = None
    organization_column: Any = None


USER_SCOPE = FilterScope(
    date_column=User.created_at,
    user_column=User.id,
    organization_column=User.organization_id,
)
COURSE_SCOPE = FilterScope(
    date_column=Course.created_at,
    course_column=Course.id,
    organization_column=Course.organization_id,
)
ENROLLMENT_SCOPE = FilterScope(
    date_column=Enrollment.enrolled_at,
    course_column=Enrollment.course_id,
    user_column=Enrollment.user_id,
)
ASSIGNMENT_SUBMISSION_SCOPE = FilterScope(
    date_column=AssignmentSubmission.submitted_at,
    course_column=Assignment.course_id,
    user_column=AssignmentSubmission.user_id,
)
QUIZ_SUBMISSION_SCOPE = FilterScope(
    date_column=QuizSubmission.submitted_at,
    course_column=Quiz.course_id,
    user_column=QuizSubmission.user_id,
)
CERTIFICATION_SCOPE = FilterScope(
    date_column=Certification.issued_at,
    course_column=Certification.course_id,
    user_column=Certification.user_id,
)


def build_conditions(filters: AnalyticsFilter, scope: FilterScope) -> list[ColumnElement[bool]]:
    """필터를 scope 기준 where 조건 목록으로 변환"""
    conditions: list[ColumnElement[bool]] = []

    if scope.date_column is not None:
        if filters.start_date is not None:
            conditions.append(scope.date_column >= filters.start_date)
        if filters.end_date is not None:
            conditions.append(scope.date_column < filters.end_date)

    if filters.course_id is not None and scope.course_column is not None:
        conditions.append(scope.course_column == filters.course_id)

    if filters.user_id is not None and scope.user_column is not None:
        conditions.append(scope.user_column == filters.user_id)

    if filters.organization_id is not None:
        if scope.organization_column is not None:
            conditions.append(scope.organization_column == filters.organization_id)
        elif scope.course_column is not None:
            # 조직 컬럼이 없는 테이블은 강좌 소속 조직으로 판단
            org_courses = select(Course.id).where(Course.organization_id == filters.organization_id)
            conditions.append(scope.course_column.in_(org_courses))

    return conditions


def without_dates(filters: AnalyticsFilter) -> AnalyticsFilter:
    return filters.model_copy(update={"start_date": None, "end_date": None})


def with_dates(filters: AnalyticsFilter, start: datetime, end: datetime) -> AnalyticsFilter:
    return filters.model_copy(update={"start_date": start, "end_date": end})


def _round(value: Any) -> float:
    return round(float(value or 0), 2)


async def count_users(session: AsyncSession, filters: AnalyticsFilter) -> int:
    stmt = select(func.count(User.id)).where(*build_conditions(filters, USER_SCOPE))
    return await session.scalar(stmt) or 0


async def count_courses(session: AsyncSession, filters: AnalyticsFilter) -> int:
    stmt = select(func.count(Course.id)).where(*build_conditions(filters, COURSE_SCOPE))
    return await session.scalar(stmt) or 0


async def count_enrollments(
    session: AsyncSession,
    filters: AnalyticsFilter,
    status: str | None = None,
    scope: FilterScope = ENROLLMENT_SCOPE,
) -> int:
    """수강 신청 수 (status 지정 시 해당 상태만)"""
    conditions = build_conditions(filters, scope)
    if status is not None:
        conditions.append(Enrollment.status == status)
    stmt = select(func.count(Enrollment.id)).where(*conditions)
    return await session.scalar(stmt) or 0


async def count_completions(session: AsyncSession, filters: AnalyticsFilter) -> int:
    """수료 수 (기간은 completed_at 기준)"""
    scope = dataclasses.replace(ENROLLMENT_SCOPE, date_column=Enrollment.completed_at)
    return await count_enrollments(session, filters, status="completed", scope=scope)


async def count_active_users(
    session: AsyncSession,
    filters: AnalyticsFilter,
) -> int:
    """기간 내 수강 기록에 접근한 사용자 수 (접근 기록이 없으면 수강 신청 시각 기준)"""
    last_activity = func.coalesce(Enrollment.last_accessed_at, Enrollment.enrolled_at)
    scope = dataclasses.replace(ENROLLMENT_SCOPE, date_column=last_activity)
    stmt = select(func.count(distinct(Enrollment.user_id))).where(*build_conditions(filters, scope))
    return await session.scalar(stmt) or 0


async def average_progress(session: AsyncSession, filters: AnalyticsFilter) -> float:
    stmt = select(func.avg(Enrollment.progress)).where(*build_conditions(filters, ENROLLMENT_SCOPE))
    return _round(await session.scalar(stmt))


async def average_assignment_score(session: AsyncSession, filters: AnalyticsFilter) -> float:
    """과제 평균 점수 (채점된 제출만)"""
    stmt = (
        select(func.avg(AssignmentSubmission.points))
        .join(Assignment, AssignmentSubmission.assignment_id == Assignment.id)
        .where(AssignmentSubmission.points.is_not(None))
        .where(*build_conditions(filters, ASSIGNMENT_SUBMISSION_SCOPE))
    )
    return _round(await session.scalar(stmt))


async def average_quiz_percentage(session: AsyncSession, filters: AnalyticsFilter) -> float:
    """퀴즈 평균 득점률 (%)"""
    percentage = QuizSubmission.score * 100.0 / QuizSubmission.max_score
    stmt = (
        select(func.avg(percentage))
        .join(Quiz, QuizSubmission.quiz_id == Quiz.id)
        .where(QuizSubmission.max_score > 0)
        .where(*build_conditions(filters, QUIZ_SUBMISSION_SCOPE))
    )
    return _round(await session.scalar(stmt))


def _days_between(session: AsyncSession, start, end):
    """두 timestamp 컬럼 사이 일수 (DB 방언별)"""
    dialect = session.get_bind().dialect.name
    if dialect == "sqlite":
        return func.julianday(end) - func.julianday(start)
    return func.date_part("epoch", end - start) / 86400.0


async def get_courses(session: AsyncSession, filters: AnalyticsFilter) -> Sequence[Course]:
    """필터 대상 강좌 (생성 시각 필터는 적용하지 않음)"""
    stmt = select(Course).where(*build_conditions(without_dates(filters), COURSE_SCOPE)).order_by(Course.id)
    result = await session.execute(stmt)
    return result.scalars().all()


async def get_users(session: AsyncSession, filters: AnalyticsFilter) -> Sequence[User]:
    """필터 대상 사용자 (가입 시각 필터는 적용하지 않음)"""
    stmt = select(User).where(*build_conditions(without_dates(filters), USER_SCOPE)).order_by(User.id)
    result = await session.execute(stmt)
    return result.scalars().all()


async def get_course_enrollment_counts(
    session: AsyncSession,
    organization_id: str | None = None,
) -> list[dict]:
    """강좌별 수강 신청/수료 수"""
    enrollment_count = func.count(Enrollment.id).label("enrollments")
    completion_count = func.coalesce(
        func.sum(case((Enrollment.status == "completed", 1), else_=0)), 0
    ).label("completions")
    stmt = (
        select(Course.id, Course.title, Course.category, enrollment_count, completion_count)
        .outerjoin(Enrollment, Enrollment.course_id == Course.id)
        .group_by(Course.id, Course.title, Course.category)
        .order_by(Course.id)
    )
    if organization_id is not None:
        stmt = stmt.where(Course.organization_id == organization_id)
    result = await session.execute(stmt)
    return [dict(row._mapping) for row in result.all()]


async def count_assignment_submissions(session: AsyncSession, filters: AnalyticsFilter) -> int:
    stmt = (
        select(func.count(AssignmentSubmission.id))
        .join(Assignment, AssignmentSubmission.assignment_id == Assignment.id)
        .where(*build_conditions(filters, ASSIGNMENT_SUBMISSION_SCOPE))
    )
    return await session.scalar(stmt) or 0


async def count_quiz_submissions(session: AsyncSession, filters: AnalyticsFilter) -> int:
    stmt = (
        select(func.count(QuizSubmission.id))
        .join(Quiz, QuizSubmission.quiz_id == Quiz.id)
        .where(*build_conditions(filters, QUIZ_SUBMISSION_SCOPE))
    )
    return await session.scalar(stmt) or 0


ENROLLMENT_GROUP_COLUMNS = {"course": Enrollment.course_id, "user": Enrollment.user_id}
ASSIGNMENT_SUBMISSION_GROUP_COLUMNS = {"course": Assignment.course_id, "user": AssignmentSubmission.user_id}


async def _scalars_by_key(session: AsyncSession, stmt) -> dict[int, Any]:
    result = await session.execute(stmt)
    return {row.key: row.value for row in result.all()}


async def enrollment_stats_by(
    session: AsyncSession,
    filters: AnalyticsFilter,
    by: str,
) -> dict[int, dict]:
    """강좌별(by="course") 또는 사용자별(by="user") 수강 집계를 한 번에 조회

    값: enrollments, completed, average_progress, time_spent_hours, days_to_complete
    """
    group_column = ENROLLMENT_GROUP_COLUMNS[by]
    is_completed = Enrollment.status == "completed"
    days = _days_between(session, Enrollment.enrolled_at, Enrollment.completed_at)
    stmt = (
        select(
            group_column.label("key"),
            func.count(Enrollment.id).label("enrollments"),
            func.coalesce(func.sum(case((is_completed, 1), else_=0)), 0).label("completed"),
            func.avg(Enrollment.progress).label("average_progress"),
            func.coalesce(func.sum(Enrollment.time_spent), 0).label("time_spent"),
            func.avg(case((and_(is_completed, Enrollment.completed_at.is_not(None)), days))).label("days"),
        )
        .where(*build_conditions(filters, ENROLLMENT_SCOPE))
        .group_by(group_column)
    )
    result = await session.execute(stmt)
    return {
        row.key: {
            "enrollments": row.enrollments,
            "completed": int(row.completed),
            "average_progress": _round(row.average_progress),
            "time_spent_hours": _round(row.time_spent / 60),
            "days_to_complete": _round(row.days),
        }
        for row in result.all()
    }


async def count_completions_by(session: AsyncSession, filters: AnalyticsFilter, by: str) -> dict[int, int]:
    """by 기준별 수료 수 (기간은 completed_at 기준)"""
    group_column = ENROLLMENT_GROUP_COLUMNS[by]
    scope = dataclasses.replace(ENROLLMENT_SCOPE, date_column=Enrollment.completed_at)
    stmt = (
        select(group_column.label("key"), func.count(Enrollment.id).label("value"))
        .where(Enrollment.status == "completed")
        .where(*build_conditions(filters, scope))
        .group_by(group_column)
    )
    return await _scalars_by_key(session, stmt)


async def average_assignment_score_by(
    session: AsyncSession,
    filters: AnalyticsFilter,
    by: str,
) -> dict[int, float]:
    """by 기준별 과제 평균 점수 (채점된 제출만)"""
    group_column = ASSIGNMENT_SUBMISSION_GROUP_COLUMNS[by]
    stmt = (
        select(group_column.label("key"), func.avg(AssignmentSubmission.points).label("value"))
        .join(Assignment, AssignmentSubmission.assignment_id == Assignment.id)
        .where(AssignmentSubmission.points.is_not(None))
        .where(*build_conditions(filters, ASSIGNMENT_SUBMISSION_SCOPE))
        .group_by(group_column)
    )
    return {key: _round(value) for key, value in (await _scalars_by_key(session, stmt)).items()}


async def count_certifications_by_user(session: AsyncSession, filters: AnalyticsFilter) -> dict[int, int]:
    stmt = (
        select(Certification.user_id.label("key"), func.count(Certification.id).label("value"))
        .where(*build_conditions(filters, CERTIFICATION_SCOPE))
        .group_by(Certification.user_id)
    )
    return await _scalars_by_key(session, stmt)
