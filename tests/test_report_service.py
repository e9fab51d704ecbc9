"""Report Service 테스트"""
import pytest
from unittest.mock import AsyncMock, patch

from app.exceptions import AIServiceError, CourseNotFoundError, UserNotFoundError
from app.models.course import Enrollment
from app.services import ai_service, report_service

AI_REPORT = """Learner overview

**Strong start** in frontend courses and **steady pace** overall.
The learner completed 2. modules ahead of schedule.

1. Practice with small projects
  2. Review hooks weekly
3.   Join a study group
"""


def test_extract_insights():
    assert report_service.extract_insights(AI_REPORT) == ["Strong start", "steady pace"]
    assert report_service.extract_insights("**  ** no bold") == []


def test_extract_recommendations_only_numbered_lines():
    """문장 중간의 숫자는 추천으로 보지 않음"""
    assert report_service.extract_recommendations(AI_REPORT) == [
        "Practice with small projects",
        "Review hooks weekly",
        "Join a study group",
    ]


def test_fallback_reports_have_insights_and_recommendations():
    learner = report_service.FALLBACK_REPORTS["learner"]
    assert report_service.extract_insights(learner) == [
        "Strengths:",
        "Areas for Improvement:",
        "Recommendations:",
    ]
    assert report_service.extract_recommendations(learner) == [
        "Focus on hands-on practice sessions",
        "Set weekly learning goals",
        "Review completed courses for reinforcement",
    ]


@pytest.mark.asyncio
async def test_generate_report_text_fallback_by_type():
    assert await report_service.generate_report_text("prompt", "course") == report_service.FALLBACK_REPORTS["course"]
    assert await report_service.generate_report_text("prompt", "system") == report_service.DEFAULT_FALLBACK_REPORT


@pytest.mark.asyncio
async def test_generate_report_text_ai_error_uses_fallback():
    with patch.object(ai_service, "is_ai_enabled", return_value=True):
        with patch.object(ai_service, "generate_text", new_callable=AsyncMock, side_effect=AIServiceError()):
            text = await report_service.generate_report_text("prompt", "learner")

    assert text == report_service.FALLBACK_REPORTS["learner"]


@pytest.mark.asyncio
async def test_learner_report_with_fallback(test_db_session, seed_users_and_course):
    test_db_session.add(Enrollment(user_id=2, course_id=1, status="completed", progress=100))
    await test_db_session.commit()

    report = await report_service.generate_learner_report(test_db_session, 2)

    assert report.type == "learner"
    assert report.target_id == 2
    assert report.confidence == 0.85
    assert report.content == report_service.FALLBACK_REPORTS["learner"]
    assert len(report.recommendations) == 3
    assert report.metadata["metrics"] == {
        "total_courses": 1,
        "completed_courses": 1,
        "average_progress": 100.0,
        "average_score": 0.0,
        "total_assignments": 0,
        "total_quizzes": 0,
    }


@pytest.mark.asyncio
async def test_learner_report_with_ai(test_db_session, seed_users_and_course):
    with patch.object(ai_service, "is_ai_enabled", return_value=True):
        with patch.object(ai_service, "generate_text", new_callable=AsyncMock, return_value=AI_REPORT) as mock_generate:
            report = await report_service.generate_learner_report(test_db_session, 2)

    prompt = mock_generate.call_args.args[0].prompt
    assert "User: Jun Lee" in prompt
    assert "Role: learner" in prompt
    assert report.insights == ["Strong start", "steady pace"]
    assert report.recommendations[0] == "Practice with small projects"


@pytest.mark.asyncio
async def test_learner_report_unknown_user(test_db_session, seed_users_and_course):
    with pytest.raises(UserNotFoundError):
        await report_service.generate_learner_report(test_db_session, 999)


@pytest.mark.asyncio
async def test_course_report(test_db_session, seed_users_and_course):
    test_db_session.add_all(
        [
            Enrollment(user_id=2, course_id=1, status="completed", progress=100),
            Enrollment(user_id=3, course_id=1, status="active", progress=40),
        ]
    )
    await test_db_session.commit()

    report = await report_service.generate_course_report(test_db_session, 1)

    assert report.confidence == 0.80
    assert report.content == report_service.FALLBACK_REPORTS["course"]
    metrics = report.metadata["metrics"]
    assert metrics["total_enrollments"] == 2
    assert metrics["active_enrollments"] == 1
    assert metrics["completed_enrollments"] == 1
    assert metrics["average_progress"] == 70.0


@pytest.mark.asyncio
async def test_course_report_unknown_course(test_db_session, seed_users_and_course):
    with pytest.raises(CourseNotFoundError):
        await report_service.generate_course_report(test_db_session, 999)


@pytest.mark.asyncio
async def test_system_report(test_db_session, seed_users_and_course):
    report = await report_service.generate_system_report(test_db_session)

    assert report.target_id is None
    assert report.confidence == 0.75
    assert report.content == report_service.DEFAULT_FALLBACK_REPORT
    assert report.insights == []
    assert report.metadata["metrics"] == {"total_users": 3, "total_courses": 1, "total_enrollments": 0}


@pytest.mark.asyncio
async def test_reports_api(client, seed_users_and_course):
    assert (await client.post("/api/v1/reports/learner/2")).status_code == 201
    assert (await client.post("/api/v1/reports/learner/3")).status_code == 201
    assert (await client.post("/api/v1/reports/course/1")).status_code == 201
    assert (await client.post("/api/v1/reports/learner/999")).status_code == 404

    learner_reports = (await client.get("/api/v1/reports", params={"type": "learner"})).json()
    assert learner_reports["total"] == 2
    assert [r["target_id"] for r in learner_reports["reports"]] == [3, 2]

    filtered = (await client.get("/api/v1/reports", params={"type": "learner", "target_id": 2})).json()
    assert filtered["total"] == 1
    assert filtered["reports"][0]["metadata"]["metrics"]["total_courses"] == 0

    limited = (await client.get("/api/v1/reports", params={"limit": 1})).json()
    assert limited["reports"][0]["type"] == "course"
