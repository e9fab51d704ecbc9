from typing import Sequence

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.quiz import Quiz, QuizAnswer, QuizSubmission


async def count_submissions(session: AsyncSession, quiz_id: int, user_id: int) -> int:
    """사용자의 퀴즈 제출 횟수"""
    stmt = select(func.count(QuizSubmission.id)).where(
        QuizSubmission.quiz_id == quiz_id,
        QuizSubmission.user_id == user_id,
    )
    return await session.scalar(stmt) or 0


async def add_submission(
    session: AsyncSession,
    quiz_id: int,
    user_id: int,
    attempt_number: int,
    answers: list[dict],
    score: int,
    max_score: int,
    is_passed: bool,
    time_spent: int | None = None,
) -> QuizSubmission:
    """제출 기록 추가 (commit은 호출한 쪽에서)"""
    submission = QuizSubmission(
        quiz_id=quiz_id,
        user_id=user_id,
        attempt_number=attempt_number,
        answers=answers,
        score=score,
        max_score=max_score,
        is_passed=is_passed,
        time_spent=time_spent,
    )
    session.add(submission)
    await session.flush()
    return submission


async def add_answer(
    session: AsyncSession,
    submission_id: int,
    question_id: int,
    answer: str,
    is_correct: bool,
    points: int,
    feedback: str,
) -> QuizAnswer:
    """채점된 답안 추가 (commit은 호출한 쪽에서)"""
    record = QuizAnswer(
        submission_id=submission_id,
        question_id=question_id,
        answer=answer,
        is_correct=is_correct,
        points=points,
        feedback=feedback,
    )
    session.add(record)
    await session.flush()
    return record


async def get_submissions_by_quiz_and_user(
    session: AsyncSession,
    quiz_id: int,
    user_id: int,
) -> Sequence[QuizSubmission]:
    """사용자의 퀴즈 제출 기록 (최신순, 답안 포함)"""
    stmt = (
        select(QuizSubmission)
        .where(QuizSubmission.quiz_id == quiz_id, QuizSubmission.user_id == user_id)
        .options(selectinload(QuizSubmission.answer_records))
        .order_by(QuizSubmission.submitted_at.desc(), QuizSubmission.id.desc())
    )
    result = await session.execute(stmt)
    return result.scalars().all()


async def get_submissions_by_quiz_id(session: AsyncSession, quiz_id: int) -> Sequence[QuizSubmission]:
    """퀴즈의 전체 제출 기록"""
    result = await session.execute(select(QuizSubmission).where(QuizSubmission.quiz_id == quiz_id))
    return result.scalars().all()


async def get_user_quiz_history(session: AsyncSession, user_id: int) -> list[dict]:
    """사용자 응시 이력 (퀴즈 제목/강좌 포함, 최신순)"""
    stmt = (
        select(
            QuizSubmission.id.label("submission_id"),
            QuizSubmission.quiz_id,
            Quiz.title.label("quiz_title"),
            Quiz.course_id,
            QuizSubmission.score,
            QuizSubmission.max_score,
            QuizSubmission.is_passed,
            QuizSubmission.submitted_at,
        )
        .join(Quiz, QuizSubmission.quiz_id == Quiz.id)
        .where(QuizSubmission.user_id == user_id)
        .order_by(QuizSubmission.submitted_at.desc(), QuizSubmission.id.desc())
    )
    result = await session.execute(stmt)
    return [dict(row._mapping) for row in result.all()]


async def get_answers_with_questions(
    session: AsyncSession,
    answer_ids: list[int],
) -> Sequence[QuizAnswer]:
    """답안과 문항을 함께 조회 (피드백 생성용)"""
    if not answer_ids:
        return []
    stmt = (
        select(QuizAnswer)
        .where(QuizAnswer.id.in_(answer_ids))
        .options(selectinload(QuizAnswer.question))
        .order_by(QuizAnswer.id)
    )
    result = await session.execute(stmt)
    return result.scalars().all()


async def update_answer_ai_feedback(session: AsyncSession, answer_id: int, ai_feedback: str) -> None:
    """답안 AI 피드백 저장"""
    await session.execute(
        update(QuizAnswer).where(QuizAnswer.id == answer_id).values(ai_feedback=ai_feedback)
    )
    await session.commit()
