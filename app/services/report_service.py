"""학습자/강좌/시스템 AI 리포트

지표를 DB에서 계산해 프롬프트를 만들고, AI 응답에서 인사이트(**굵은 글씨**)와
추천(번호 목록)을 추출해 저장한다. AI를 쓸 수 없으면 고정 리포트 문구를 사용한다.
"""
import logging
import re

from sqlalchemy.ext.asyncio import AsyncSession

from app.crud import analytics as analytics_crud, course as course_crud, report as report_crud, user as user_crud
from app.exceptions import AIServiceError, CourseNotFoundError, UserNotFoundError
from app.schemas.ai import AITextGenerationRequest
from app.schemas.analytics import AnalyticsFilter
from app.schemas.report import ReportListResponse, ReportResponse
from app.services import ai_service

logger = logging.getLogger(__name__)

LEARNER_REPORT_CONFIDENCE = 0.85
COURSE_REPORT_CONFIDENCE = 0.80
SYSTEM_REPORT_CONFIDENCE = 0.75

INSIGHT_PATTERN = re.compile(r"\*\*(.*?)\*\*")
RECOMMENDATION_PATTERN = re.compile(r"^\s*\d+\.\s*(.+?)\s*$", re.MULTILINE)

FALLBACK_REPORTS = {
    "learner": """Based on the learner's performance data, here are the key insights:

**Strengths:**
- Consistent course completion rate
- Good engagement with assignments
- Strong progress in technical courses

**Areas for Improvement:**
- Could benefit from more practice in practical exercises
- Consider joining study groups for collaborative learning

**Recommendations:**
1. Focus on hands-on practice sessions
2. Set weekly learning goals
3. Review completed courses for reinforcement""",
    "course": """Course Analysis Report:

**Performance Metrics:**
- High enrollment retention rate
- Good completion rates
- Strong student engagement

**Recommendations:**
1. Consider adding more interactive elements
2. Implement peer review system
3. Add progress checkpoints""",
}
DEFAULT_FALLBACK_REPORT = "AI-generated insights and recommendations based on the provided data."


def extract_insights(text: str) -> list[str]:
    return [match.strip() for match in INSIGHT_PATTERN.findall(text) if match.strip()]


def extract_recommendations(text: str) -> list[str]:
    """줄 맨 앞의 번호 목록 항목"""
    return RECOMMENDATION_PATTERN.findall(text)


async def generate_report_text(prompt: str, report_type: str) -> str:
    """리포트 본문 생성 (AI 실패 시 고정 문구)"""
    fallback = FALLBACK_REPORTS.get(report_type, DEFAULT_FALLBACK_REPORT)
    if not ai_service.is_ai_enabled():
        return fallback

    try:
        return await ai_service.generate_text(AITextGenerationRequest(prompt=prompt))
    except AIServiceError as e:
        logger.warning(f"AI 리포트 생성 실패, 고정 문구 사용: type={report_type}, {e.message}")
        return fallback


async def _save_report(
    session: AsyncSession,
    report_type: str,
    content: str,
    confidence: float,
    metrics: dict,
    target_id: int | None = None,
) -> ReportResponse:
    report = await report_crud.create_report(
        session,
        report_type=report_type,
        target_id=target_id,
        content=content,
        insights=extract_insights(content),
        recommendations=extract_recommendations(content),
        confidence=confidence,
        metadata={"metrics": metrics},
    )
    logger.info(f"AI 리포트 저장: report_id={report.id}, type={report_type}, target_id={target_id}")
    return ReportResponse.model_validate(report)


async def generate_learner_report(session: AsyncSession, user_id: int) -> ReportResponse:
    user = await user_crud.get_user_by_id(session, user_id)
    if not user:
        raise UserNotFoundError(user_id)

    filters = AnalyticsFilter(user_id=user_id)
    metrics = {
        "total_courses": await analytics_crud.count_enrollments(session, filters),
        "completed_courses": await analytics_crud.count_enrollments(session, filters, status="completed"),
        "average_progress": await analytics_crud.average_progress(session, filters),
        "average_score": await analytics_crud.average_assignment_score(session, filters),
        "total_assignments": await analytics_crud.count_assignment_submissions(session, filters),
        "total_quizzes": await analytics_crud.count_quiz_submissions(session, filters),
    }

    prompt = f"""Analyze the following learner data and provide insights and recommendations:

User: {user.first_name or ''} {user.last_name or ''}
Role: {user.role}

Performance Metrics:
- Total Courses: {metrics['total_courses']}
- Completed Courses: {metrics['completed_courses']}
- Average Progress: {metrics['average_progress']}%
- Average Score: {metrics['average_score']}/100
- Assignments Submitted: {metrics['total_assignments']}
- Quizzes Taken: {metrics['total_quizzes']}

Please provide:
1. Key insights about learning patterns
2. Specific recommendations for improvement
3. Suggested learning strategies
4. Progress tracking suggestions"""

    content = await generate_report_text(prompt, "learner")
    return await _save_report(session, "learner", content, LEARNER_REPORT_CONFIDENCE, metrics, target_id=user_id)


async def generate_course_report(session: AsyncSession, course_id: int) -> ReportResponse:
    course = await course_crud.get_course_by_id(session, course_id)
    if not course:
        raise CourseNotFoundError(course_id)

    filters = AnalyticsFilter(course_id=course_id)
    metrics = {
        "total_enrollments": await analytics_crud.count_enrollments(session, filters),
        "active_enrollments": await analytics_crud.count_enrollments(session, filters, status="active"),
        "completed_enrollments": await analytics_crud.count_enrollments(session, filters, status="completed"),
        "average_progress": await analytics_crud.average_progress(session, filters),
        "total_assignments": await analytics_crud.count_assignment_submissions(session, filters),
    }

    prompt = f"""Analyze the following course data and provide insights:

Course: {course.title}
Category: {course.category or 'Uncategorized'}

Metrics:
- Total Enrollments: {metrics['total_enrollments']}
- Active Enrollments: {metrics['active_enrollments']}
- Completion Rate: {metrics['completed_enrollments']}/{metrics['total_enrollments']}
- Average Progress: {metrics['average_progress']}%

Please provide:
1. Course effectiveness analysis
2. Student engagement insights
3. Recommendations for improvement
4. Success factors identification"""

    content = await generate_report_text(prompt, "course")
    return await _save_report(session, "course", content, COURSE_REPORT_CONFIDENCE, metrics, target_id=course_id)


async def generate_system_report(session: AsyncSession) -> ReportResponse:
    filters = AnalyticsFilter()
    metrics = {
        "total_users": await analytics_crud.count_users(session, filters),
        "total_courses": await analytics_crud.count_courses(session, filters),
        "total_enrollments": await analytics_crud.count_enrollments(session, filters),
    }

    prompt = f"""Analyze the following system-wide metrics:

Total Users: {metrics['total_users']}
Total Courses: {metrics['total_courses']}
Total Enrollments: {metrics['total_enrollments']}

Please provide:
1. System health assessment
2. Growth opportunities
3. Operational recommendations
4. User engagement insights"""

    content = await generate_report_text(prompt, "system")
    return await _save_report(session, "system", content, SYSTEM_REPORT_CONFIDENCE, metrics)


async def list_reports(
    session: AsyncSession,
    report_type: str | None = None,
    target_id: int | None = None,
    limit: int = 20,
) -> ReportListResponse:
    reports = await report_crud.get_reports(session, report_type=report_type, target_id=target_id, limit=limit)
    items = [ReportResponse.model_validate(r) for r in reports]
    return ReportListResponse(reports=items, total=len(items))
