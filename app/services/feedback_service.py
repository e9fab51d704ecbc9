"""오답 AI 피드백 생성

제출 응답과 분리된 백그라운드 작업으로 실행된다. AI 호출이 불가능하거나 실패하면
문항 유형별 fallback 템플릿을 저장하고, 개별 답안 실패는 로그만 남긴다.
"""
import logging
from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.crud import quiz_submission as submission_crud
from app.exceptions import AIServiceError
from app.models.base import get_session_factory
from app.schemas.ai import AITextGenerationRequest, QuizFeedbackRequest
from app.services import ai_service

logger = logging.getLogger(__name__)

FEEDBACK_MAX_OUTPUT_TOKENS = 500
FEEDBACK_TEMPERATURE = 0.7

FALLBACK_TEMPLATES = {
    "multiple_choice": (
        'You chose "{user_answer}", but the correct option is "{correct_answer}". '
        "{explanation}Compare the options again and note what makes the correct one fit the question."
    ),
    "true_false": (
        'The statement is {correct_answer}, not {user_answer}. '
        "{explanation}Re-read the statement and check which part decides whether it holds."
    ),
    "short_answer": (
        'Your answer "{user_answer}" does not match the expected answer "{correct_answer}". '
        "{explanation}Review the key terms from this lesson and try to state the answer precisely."
    ),
    "essay": (
        "Your essay needs more depth to address the question. "
        "{explanation}Expand your answer with specific points and examples from the course material."
    ),
}
DEFAULT_FALLBACK = (
    'The correct answer is "{correct_answer}". {explanation}Review the related course material and try again.'
)


def build_fallback_feedback(request: QuizFeedbackRequest) -> str:
    """AI를 쓸 수 없을 때 저장할 유형별 템플릿 피드백"""
    template = FALLBACK_TEMPLATES.get(request.question_type, DEFAULT_FALLBACK)
    explanation = f"{request.explanation.strip()} " if request.explanation else ""
    user_answer = request.user_answer.strip() or "(no answer)"
    return template.format(
        user_answer=user_answer,
        correct_answer=request.correct_answer,
        explanation=explanation,
    )


def build_feedback_prompt(request: QuizFeedbackRequest) -> str:
    return f"""Provide constructive feedback for this quiz answer:

Question: "{request.question}"
Student Answer: "{request.user_answer}"
Correct Answer: "{request.correct_answer}"
Explanation: "{request.explanation or 'Not provided'}"

Please provide:
1. What was done well
2. What could be improved
3. Specific suggestions for learning
4. Encouraging feedback"""


async def generate_quiz_feedback(request: QuizFeedbackRequest) -> str:
    """오답 피드백 생성 (AI 실패 시 fallback 템플릿)"""
    if not ai_service.is_ai_enabled():
        return build_fallback_feedback(request)

    try:
        return await ai_service.generate_text(
            AITextGenerationRequest(
                prompt=build_feedback_prompt(request),
                max_output_tokens=FEEDBACK_MAX_OUTPUT_TOKENS,
                temperature=FEEDBACK_TEMPERATURE,
            )
        )
    except AIServiceError as e:
        logger.warning(f"AI 피드백 생성 실패, fallback 사용: {e.message}")
        return build_fallback_feedback(request)


@dataclass
class EnrichmentResult:
    enriched: list[int] = field(default_factory=list)
    failed: list[int] = field(default_factory=list)


async def enrich_answers(session: AsyncSession, answer_ids: list[int]) -> EnrichmentResult:
    """오답마다 피드백을 생성해 ai_feedback에 저장 (답안별 1회 호출)"""
    result = EnrichmentResult()
    answers = await submission_crud.get_answers_with_questions(session, answer_ids)

    # rollback 시 ORM 객체가 만료되므로 필요한 값은 먼저 꺼내 둔다
    requests = [
        (
            answer.id,
            QuizFeedbackRequest(
                question=answer.question.question,
                question_type=answer.question.type,
                user_answer=answer.answer,
                correct_answer=answer.question.correct_answer,
                explanation=answer.question.explanation,
            ),
        )
        for answer in answers
        if not answer.is_correct
    ]

    for answer_id, feedback_request in requests:
        try:
            feedback = await generate_quiz_feedback(feedback_request)
            await submission_crud.update_answer_ai_feedback(session, answer_id, feedback)
            result.enriched.append(answer_id)
        except Exception:
            logger.warning(f"AI 피드백 저장 실패: answer_id={answer_id}", exc_info=True)
            await session.rollback()
            result.failed.append(answer_id)

    return result


async def enrich_wrong_answers(
    answer_ids: list[int],
    session_factory: async_sessionmaker[AsyncSession] | None = None,
) -> EnrichmentResult:
    """제출 이후 백그라운드에서 실행되는 피드백 작업 (자체 DB 세션 사용)"""
    factory = session_factory or get_session_factory()
    try:
        async with factory() as session:
            result = await enrich_answers(session, answer_ids)
    except Exception:
        logger.error(f"AI 피드백 작업 실패: answer_ids={answer_ids}", exc_info=True)
        return EnrichmentResult(failed=list(answer_ids))

    logger.info(f"AI 피드백 작업 완료: 성공={len(result.enriched)}개, 실패={len(result.failed)}개")
    if result.failed:
        logger.warning(f"AI 피드백 재시도 필요: answer_ids={result.failed}")
    return result
