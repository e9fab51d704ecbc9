"""대시보드 분석 집계

캐시 없이 호출마다 다시 조회한다. 기간 구간은 시작 포함, 끝 미포함.
"""
import logging
import math
from datetime import datetime, timedelta, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from app.crud import analytics as analytics_crud
from app.exceptions import TrendRangeTooLargeError
from app.schemas.analytics import (
    AnalyticsFilter,
    CourseAnalytics,
    LearningMetrics,
    SkillGap,
    TrendData,
    TrendPeriod,
    UserAnalytics,
)

logger = logging.getLogger(__name__)

ACTIVE_USER_WINDOW_DAYS = 30
DEFAULT_DAILY_BUCKETS = 30
DEFAULT_WEEKLY_BUCKETS = 12
DEFAULT_MONTHLY_BUCKETS = 6
LOW_ENROLLMENT_THRESHOLD = 10
# 추이 조회 1회당 최대 버킷 수 (버킷마다 쿼리 4회)
MAX_TREND_BUCKETS = {"daily": 366, "weekly": 260, "monthly": 120}

EMPTY_ENROLLMENT_STATS = {
    "enrollments": 0,
    "completed": 0,
    "average_progress": 0.0,
    "time_spent_hours": 0.0,
    "days_to_complete": 0.0,
}


def _now() -> datetime:
    return datetime.now(timezone.utc)


def to_utc(value: datetime) -> datetime:
    """시간대가 없는 시각은 UTC로 간주"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _start_of_day(value: datetime) -> datetime:
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def _start_of_month(value: datetime) -> datetime:
    return _start_of_day(value).replace(day=1)


def _add_months(value: datetime, months: int) -> datetime:
    """월 단위 이동 (월초 날짜 기준)"""
    month_index = value.month - 1 + months
    return value.replace(year=value.year + month_index // 12, month=month_index % 12 + 1, day=1)


def default_trend_start(end: datetime, period: TrendPeriod) -> datetime:
    """기간 단위별 기본 시작 시각 (일간 30일, 주간 12주, 월간 6개월)"""
    if period == "daily":
        return _start_of_day(end) - timedelta(days=DEFAULT_DAILY_BUCKETS - 1)
    if period == "weekly":
        monday = _start_of_day(end) - timedelta(days=end.weekday())
        return monday - timedelta(weeks=DEFAULT_WEEKLY_BUCKETS - 1)
    return _add_months(_start_of_month(end), -(DEFAULT_MONTHLY_BUCKETS - 1))


def count_periods(start: datetime, end: datetime, period: TrendPeriod) -> int:
    """generate_periods가 만들 버킷 수 (목록을 만들지 않고 계산)"""
    if end <= start:
        return 0
    if period == "daily":
        return math.ceil((end - start) / timedelta(days=1))
    if period == "weekly":
        return math.ceil((end - start) / timedelta(weeks=1))
    months = (end.year - start.year) * 12 + end.month - start.month
    return months + (1 if end > _start_of_month(end) else 0)


def generate_periods(start: datetime, end: datetime, period: TrendPeriod) -> list[tuple[str, datetime, datetime]]:
    """[start, end) 구간을 (라벨, 시작, 끝) 버킷 목록으로 분할

    월간 버킷은 달력 월 경계에서 끊는다. 마지막 버킷의 끝은 end로 자른다.
    """
    periods = []
    current = start
    while current < end:
        if period == "daily":
            next_start = current + timedelta(days=1)
            label = current.strftime("%Y-%m-%d")
        elif period == "weekly":
            next_start = current + timedelta(weeks=1)
            year, week, _ = current.isocalendar()
            label = f"{year}-W{week:02d}"
        else:
            next_start = _add_months(_start_of_month(current), 1)
            label = current.strftime("%b %Y")

        periods.append((label, current, min(next_start, end)))
        current = next_start
    return periods


async def get_learning_metrics(session: AsyncSession, filters: AnalyticsFilter) -> LearningMetrics:
    """전체 학습 지표"""
    total_enrollments = await analytics_crud.count_enrollments(session, filters)
    completed = await analytics_crud.count_enrollments(session, filters, status="completed")
    active = await analytics_crud.count_enrollments(session, filters, status="active")

    now = _now()
    recent = analytics_crud.with_dates(filters, now - timedelta(days=ACTIVE_USER_WINDOW_DAYS), now)

    completion_rate = completed / total_enrollments * 100 if total_enrollments else 0

    return LearningMetrics(
        total_users=await analytics_crud.count_users(session, filters),
        total_courses=await analytics_crud.count_courses(session, filters),
        total_enrollments=total_enrollments,
        completed_enrollments=completed,
        active_enrollments=active,
        completion_rate=round(completion_rate, 2),
        average_progress=await analytics_crud.average_progress(session, filters),
        average_score=await analytics_crud.average_assignment_score(session, filters),
        average_quiz_score=await analytics_crud.average_quiz_percentage(session, filters),
        active_users=await analytics_crud.count_active_users(session, recent),
    )


async def get_course_analytics(session: AsyncSession, filters: AnalyticsFilter) -> list[CourseAnalytics]:
    """강좌별 지표 (수강 신청 수 내림차순)

    강좌 수와 상관없이 지표마다 GROUP BY 쿼리 한 번으로 집계한다.
    """
    courses = await analytics_crud.get_courses(session, filters)
    stats = await analytics_crud.enrollment_stats_by(session, filters, by="course")
    completions = await analytics_crud.count_completions_by(session, filters, by="course")
    scores = await analytics_crud.average_assignment_score_by(session, filters, by="course")

    results = []
    for course in courses:
        course_stats = stats.get(course.id, EMPTY_ENROLLMENT_STATS)
        results.append(
            CourseAnalytics(
                course_id=course.id,
                title=course.title,
                enrollments=course_stats["enrollments"],
                completions=completions.get(course.id, 0),
                average_progress=course_stats["average_progress"],
                average_score=scores.get(course.id, 0.0),
                time_to_complete=course_stats["days_to_complete"],
            )
        )

    return sorted(results, key=lambda item: item.enrollments, reverse=True)


async def get_user_analytics(session: AsyncSession, filters: AnalyticsFilter) -> list[UserAnalytics]:
    """사용자별 지표 (평균 진도 내림차순)"""
    users = await analytics_crud.get_users(session, filters)
    stats = await analytics_crud.enrollment_stats_by(session, filters, by="user")
    scores = await analytics_crud.average_assignment_score_by(session, filters, by="user")
    certifications = await analytics_crud.count_certifications_by_user(session, filters)

    results = []
    for user in users:
        user_stats = stats.get(user.id, EMPTY_ENROLLMENT_STATS)
        results.append(
            UserAnalytics(
                user_id=user.id,
                first_name=user.first_name or "",
                last_name=user.last_name or "",
                total_courses=user_stats["enrollments"],
                completed_courses=user_stats["completed"],
                average_progress=user_stats["average_progress"],
                average_score=scores.get(user.id, 0.0),
                time_spent=user_stats["time_spent_hours"],
                certifications=certifications.get(user.id, 0),
            )
        )

    return sorted(results, key=lambda item: item.average_progress, reverse=True)


async def get_learning_trends(
    session: AsyncSession,
    filters: AnalyticsFilter,
    period: TrendPeriod = "monthly",
) -> list[TrendData]:
    """기간 버킷별 수강 신청/수료/신규 가입/활성 사용자 수

    버킷 수가 MAX_TREND_BUCKETS를 넘으면 조회 전에 TrendRangeTooLargeError.
    """
    end = to_utc(filters.end_date) if filters.end_date else _now()
    start = to_utc(filters.start_date) if filters.start_date else default_trend_start(end, period)

    bucket_count = count_periods(start, end, period)
    if bucket_count > MAX_TREND_BUCKETS[period]:
        raise TrendRangeTooLargeError(period, MAX_TREND_BUCKETS[period])

    trends = []
    for label, bucket_start, bucket_end in generate_periods(start, end, period):
        bucket_filters = analytics_crud.with_dates(filters, bucket_start, bucket_end)
        trends.append(
            TrendData(
                period=label,
                start=bucket_start,
                end=bucket_end,
                enrollments=await analytics_crud.count_enrollments(session, bucket_filters),
                completions=await analytics_crud.count_completions(session, bucket_filters),
                new_users=await analytics_crud.count_users(session, bucket_filters),
                active_users=await analytics_crud.count_active_users(session, bucket_filters),
            )
        )

    logger.debug(f"학습 추이 조회: period={period}, 버킷={len(trends)}개")
    return trends


async def get_skill_gaps(session: AsyncSession, organization_id: str | None = None) -> list[SkillGap]:
    """수강 신청이 적은 강좌를 카테고리별 스킬 격차로 보고"""
    rows = await analytics_crud.get_course_enrollment_counts(session, organization_id)
    return [
        SkillGap(
            skill=row["category"] or "Uncategorized",
            course_id=row["id"],
            course=row["title"],
            enrollments=row["enrollments"],
            gap="Low enrollment",
            recommendation="Consider promoting this course or updating content",
        )
        for row in rows
        if row["enrollments"] < LOW_ENROLLMENT_THRESHOLD
    ]
