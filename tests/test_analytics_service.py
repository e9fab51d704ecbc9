"""Analytics Service 테스트"""
from datetime import datetime, timezone

import pytest
import pytest_asyncio
from sqlalchemy import event

from app.exceptions import TrendRangeTooLargeError
from app.models.course import Assignment, AssignmentSubmission, Certification, Course, Enrollment
from app.models.user import User
from app.schemas.analytics import AnalyticsFilter
from app.services import analytics_service
from tests.helpers import utc


@pytest_asyncio.fixture
async def seed_learning_data(test_db_session, seed_users_and_course):
    """강좌 2개, 수강 3건, 과제 제출 2건, 수료증 1건"""
    session = test_db_session
    session.add(Course(id=2, title="Python Basics", mentor_id=1, organization_id="org-2"))
    await session.flush()

    session.add_all(
        [
            Enrollment(
                user_id=2, course_id=1, status="completed", progress=100, time_spent=120,
                enrolled_at=utc(2024, 1, 10), completed_at=utc(2024, 1, 20), last_accessed_at=utc(2024, 1, 20),
            ),
            Enrollment(user_id=3, course_id=1, status="active", progress=50, time_spent=60, enrolled_at=utc(2024, 2, 5)),
            Enrollment(
                user_id=2, course_id=2, status="active", progress=20,
                enrolled_at=utc(2024, 2, 20), last_accessed_at=utc(2024, 3, 2),
            ),
            Assignment(id=1, course_id=1, title="Build a counter"),
        ]
    )
    await session.flush()
    session.add_all(
        [
            AssignmentSubmission(assignment_id=1, user_id=2, points=80, submitted_at=utc(2024, 1, 15)),
            AssignmentSubmission(assignment_id=1, user_id=3, points=None, submitted_at=utc(2024, 2, 10)),
            Certification(user_id=2, course_id=1, title="React Fundamentals", issued_at=utc(2024, 1, 21)),
        ]
    )
    await session.commit()
    return session


def test_to_utc():
    assert analytics_service.to_utc(datetime(2024, 1, 1)) == datetime(2024, 1, 1, tzinfo=timezone.utc)


def test_default_trend_start():
    end = datetime(2024, 3, 15, 10)
    assert analytics_service.default_trend_start(end, "daily") == datetime(2024, 2, 15)
    assert analytics_service.default_trend_start(end, "weekly") == datetime(2023, 12, 25)
    assert analytics_service.default_trend_start(end, "monthly") == datetime(2023, 10, 1)


def test_generate_daily_periods():
    end = datetime(2024, 3, 15, 10)
    periods = analytics_service.generate_periods(datetime(2024, 2, 15), end, "daily")

    assert len(periods) == 30
    assert periods[0][0] == "2024-02-15"
    assert periods[14][0] == "2024-02-29"
    # 마지막 구간은 end에서 잘림
    assert periods[-1] == ("2024-03-15", datetime(2024, 3, 15), end)


def test_generate_weekly_periods():
    end = datetime(2024, 3, 15, 10)
    periods = analytics_service.generate_periods(datetime(2023, 12, 25), end, "weekly")

    assert len(periods) == 12
    assert periods[0][0] == "2023-W52"
    assert periods[1][0] == "2024-W01"
    assert periods[-1][0] == "2024-W11"
    assert periods[-1][2] == end


def test_generate_monthly_periods_follow_calendar_months():
    periods = analytics_service.generate_periods(datetime(2024, 1, 20), datetime(2024, 3, 5), "monthly")

    assert periods == [
        ("Jan 2024", datetime(2024, 1, 20), datetime(2024, 2, 1)),
        ("Feb 2024", datetime(2024, 2, 1), datetime(2024, 3, 1)),
        ("Mar 2024", datetime(2024, 3, 1), datetime(2024, 3, 5)),
    ]


def test_generate_periods_across_year_end():
    periods = analytics_service.generate_periods(datetime(2023, 11, 1), datetime(2024, 2, 1), "monthly")
    assert [label for label, _, _ in periods] == ["Nov 2023", "Dec 2023", "Jan 2024"]


def test_generate_periods_empty_range():
    moment = datetime(2024, 1, 1)
    assert analytics_service.generate_periods(moment, moment, "daily") == []


@pytest.mark.asyncio
async def test_learning_metrics(seed_learning_data):
    metrics = await analytics_service.get_learning_metrics(seed_learning_data, AnalyticsFilter())

    assert metrics.total_users == 3
    assert metrics.total_courses == 2
    assert metrics.total_enrollments == 3
    assert metrics.completed_enrollments == 1
    assert metrics.active_enrollments == 2
    assert metrics.completion_rate == 33.33
    assert metrics.average_progress == 56.67
    # 채점되지 않은 과제 제출은 평균에서 제외
    assert metrics.average_score == 80.0
    assert metrics.average_quiz_score == 0.0
    assert metrics.active_users == 0


@pytest.mark.asyncio
async def test_learning_metrics_for_course(seed_learning_data):
    metrics = await analytics_service.get_learning_metrics(seed_learning_data, AnalyticsFilter(course_id=1))

    assert metrics.total_courses == 1
    assert metrics.total_enrollments == 2
    assert metrics.completion_rate == 50.0
    assert metrics.average_progress == 75.0


@pytest.mark.asyncio
async def test_learning_metrics_date_range_excludes_end(seed_learning_data):
    filters = AnalyticsFilter(start_date=utc(2024, 2, 1, 0), end_date=utc(2024, 2, 20))

    metrics = await analytics_service.get_learning_metrics(seed_learning_data, filters)

    assert metrics.total_enrollments == 1


@pytest.mark.asyncio
async def test_learning_metrics_by_organization(seed_learning_data):
    metrics = await analytics_service.get_learning_metrics(
        seed_learning_data, AnalyticsFilter(organization_id="org-2")
    )

    assert metrics.total_users == 1
    assert metrics.total_courses == 1
    assert metrics.total_enrollments == 1


@pytest.mark.asyncio
async def test_course_analytics(seed_learning_data):
    results = await analytics_service.get_course_analytics(seed_learning_data, AnalyticsFilter())

    assert [r.course_id for r in results] == [1, 2]
    react = results[0]
    assert react.enrollments == 2
    assert react.completions == 1
    assert react.average_progress == 75.0
    assert react.average_score == 80.0
    assert react.time_to_complete == 10.0

    python = results[1]
    assert (python.enrollments, python.completions, python.time_to_complete) == (1, 0, 0.0)


@pytest.mark.asyncio
async def test_user_analytics(seed_learning_data):
    results = await analytics_service.get_user_analytics(seed_learning_data, AnalyticsFilter())

    assert [r.user_id for r in results] == [2, 3, 1]
    jun = results[0]
    assert jun.total_courses == 2
    assert jun.completed_courses == 1
    assert jun.average_progress == 60.0
    assert jun.time_spent == 2.0
    assert jun.certifications == 1
    assert results[1].average_score == 0.0
    assert results[2].total_courses == 0


@pytest.mark.asyncio
async def test_learning_trends_monthly(seed_learning_data):
    filters = AnalyticsFilter(start_date=utc(2024, 1, 1, 0), end_date=utc(2024, 3, 1, 0))

    trends = await analytics_service.get_learning_trends(seed_learning_data, filters, period="monthly")

    assert [t.period for t in trends] == ["Jan 2024", "Feb 2024"]
    january, february = trends
    assert (january.enrollments, january.completions, january.active_users) == (1, 1, 1)
    assert (february.enrollments, february.completions, february.active_users) == (2, 0, 1)
    assert january.new_users == february.new_users == 0


@pytest.mark.asyncio
async def test_learning_trends_default_window(seed_learning_data):
    trends = await analytics_service.get_learning_trends(seed_learning_data, AnalyticsFilter(), period="weekly")

    assert len(trends) == 12
    assert all(t.enrollments == 0 for t in trends)
    assert trends[-1].start.weekday() == 0


@pytest.mark.asyncio
async def test_skill_gaps(seed_learning_data):
    gaps = await analytics_service.get_skill_gaps(seed_learning_data)

    assert [(g.course_id, g.skill, g.enrollments) for g in gaps] == [(1, "Web", 2), (2, "Uncategorized", 1)]
    assert gaps[0].gap == "Low enrollment"
    assert gaps[0].recommendation == "Consider promoting this course or updating content"

    org_gaps = await analytics_service.get_skill_gaps(seed_learning_data, organization_id="org-1")
    assert [g.course_id for g in org_gaps] == [1]


@pytest.mark.asyncio
async def test_skill_gaps_skip_popular_courses(seed_learning_data):
    session = seed_learning_data
    for offset in range(10):
        session.add(User(id=100 + offset, email=f"extra{offset}@example.com"))
    await session.flush()
    session.add_all([Enrollment(user_id=100 + offset, course_id=2) for offset in range(10)])
    await session.commit()

    gaps = await analytics_service.get_skill_gaps(session)
    assert [g.course_id for g in gaps] == [1]


@pytest.mark.asyncio
async def test_analytics_api(client, seed_learning_data):
    metrics = await client.get("/api/v1/analytics/metrics", params={"course_id": 1})
    assert metrics.status_code == 200
    assert metrics.json()["total_enrollments"] == 2

    trends = await client.get(
        "/api/v1/analytics/trends",
        params={"period": "daily", "start_date": "2024-01-10T00:00:00", "end_date": "2024-01-12T00:00:00"},
    )
    assert trends.status_code == 200
    assert [t["period"] for t in trends.json()] == ["2024-01-10", "2024-01-11"]
    assert trends.json()[0]["enrollments"] == 1

    assert (await client.get("/api/v1/analytics/trends", params={"period": "yearly"})).status_code == 422
    assert (await client.get("/api/v1/analytics/skill-gaps")).status_code == 200
    assert len((await client.get("/api/v1/analytics/users")).json()) == 3


@pytest.mark.asyncio
async def test_analytics_api_rejects_reversed_range(client, seed_learning_data):
    response = await client.get(
        "/api/v1/analytics/metrics",
        params={"start_date": "2024-03-01T00:00:00", "end_date": "2024-01-01T00:00:00"},
    )
    assert response.status_code == 400


@pytest.mark.parametrize(
    ("start", "end", "period"),
    [
        (utc(2024, 1, 1, 0), utc(2024, 1, 4, 0), "daily"),
        (utc(2024, 1, 1, 0), utc(2024, 1, 4, 6), "daily"),
        (utc(2024, 1, 1, 0), utc(2024, 1, 22, 0), "weekly"),
        (utc(2024, 1, 1, 0), utc(2024, 1, 23, 0), "weekly"),
        (utc(2024, 1, 20, 0), utc(2024, 3, 5, 0), "monthly"),
        (utc(2023, 11, 1, 0), utc(2024, 2, 1, 0), "monthly"),
        (utc(2024, 1, 20, 0), utc(2024, 1, 25, 0), "monthly"),
        (utc(2024, 3, 1, 0), utc(2024, 1, 1, 0), "daily"),
    ],
)
def test_count_periods_matches_generated_buckets(start, end, period):
    start, end = analytics_service.to_utc(start), analytics_service.to_utc(end)
    assert analytics_service.count_periods(start, end, period) == len(
        analytics_service.generate_periods(start, end, period)
    )


@pytest.mark.asyncio
async def test_learning_trends_reject_too_many_buckets(seed_learning_data):
    filters = AnalyticsFilter(start_date=utc(1990, 1, 1, 0), end_date=utc(2026, 1, 1, 0))

    with pytest.raises(TrendRangeTooLargeError):
        await analytics_service.get_learning_trends(seed_learning_data, filters, period="daily")
    with pytest.raises(TrendRangeTooLargeError):
        await analytics_service.get_learning_trends(seed_learning_data, filters, period="monthly")


@pytest.mark.asyncio
async def test_learning_trends_allow_full_leap_year_daily(seed_learning_data):
    filters = AnalyticsFilter(start_date=utc(2024, 1, 1, 0), end_date=utc(2025, 1, 1, 0))

    trends = await analytics_service.get_learning_trends(seed_learning_data, filters, period="daily")

    assert len(trends) == analytics_service.MAX_TREND_BUCKETS["daily"]
    assert sum(t.enrollments for t in trends) == 3


@pytest.mark.asyncio
async def test_trends_api_rejects_too_long_range(client, seed_learning_data):
    response = await client.get(
        "/api/v1/analytics/trends",
        params={"period": "daily", "start_date": "1990-01-01T00:00:00", "end_date": "2026-01-01T00:00:00"},
    )

    assert response.status_code == 400
    assert "366" in response.json()["detail"]


@pytest.fixture
def statement_counter(test_engine):
    """실행된 SQL 문 수 집계"""
    statements = []

    def before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        statements.append(statement)

    event.listen(test_engine.sync_engine, "before_cursor_execute", before_cursor_execute)
    yield statements
    event.remove(test_engine.sync_engine, "before_cursor_execute", before_cursor_execute)


async def add_extra_courses_and_users(session, count: int) -> None:
    for offset in range(count):
        session.add(User(id=100 + offset, email=f"learner{offset}@example.com", first_name="Extra"))
        session.add(Course(id=100 + offset, title=f"Extra course {offset}", mentor_id=1))
    await session.flush()
    for offset in range(count):
        session.add(Enrollment(user_id=100 + offset, course_id=100 + offset, progress=10, enrolled_at=utc(2024, 2, 1)))
    await session.commit()


@pytest.mark.asyncio
async def test_course_analytics_query_count_is_constant(seed_learning_data, statement_counter):
    await analytics_service.get_course_analytics(seed_learning_data, AnalyticsFilter())
    baseline = len(statement_counter)

    await add_extra_courses_and_users(seed_learning_data, 10)
    statement_counter.clear()
    results = await analytics_service.get_course_analytics(seed_learning_data, AnalyticsFilter())

    assert len(results) == 12
    assert len(statement_counter) == baseline
    assert results[-1].enrollments == 1


@pytest.mark.asyncio
async def test_user_analytics_query_count_is_constant(seed_learning_data, statement_counter):
    await analytics_service.get_user_analytics(seed_learning_data, AnalyticsFilter())
    baseline = len(statement_counter)

    await add_extra_courses_and_users(seed_learning_data, 10)
    statement_counter.clear()
    results = await analytics_service.get_user_analytics(seed_learning_data, AnalyticsFilter())

    assert len(results) == 13
    assert len(statement_counter) == baseline
