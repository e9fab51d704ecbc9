from typing import Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.quiz import Quiz, QuizAnswer, QuizQuestion, QuizSubmission
from app.schemas.quiz import QuizQuestionCreate


async def get_quiz_by_id(
    session: AsyncSession,
    quiz_id: int,
    load_questions: bool = False,
    for_update: bool = False,
) -> Quiz | None:
    """ID로 퀴즈 조회

    Args:
        session: 데이터베이스 세션
        quiz_id: 퀴즈 ID
        load_questions: 문항을 eager load할지 여부
        for_update: 행 잠금 (PostgreSQL에서 같은 퀴즈의 동시 제출을 직렬화)
    """
    stmt = select(Quiz).where(Quiz.id == quiz_id)

    if load_questions:
        stmt = stmt.options(selectinload(Quiz.questions))
    if for_update:
        stmt = stmt.with_for_update()

    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def create_quiz(
    session: AsyncSession,
    course_id: int,
    title: str,
    questions: list[QuizQuestionCreate],
    description: str | None = None,
    time_limit: int | None = None,
    passing_score: int = 70,
    is_randomized: bool = False,
    max_attempts: int = 1,
) -> Quiz:
    """퀴즈와 문항을 한 트랜잭션으로 생성 (order_index는 요청 순서대로 1부터)"""
    quiz = Quiz(
        course_id=course_id,
        title=title,
        description=description,
        time_limit=time_limit,
        passing_score=passing_score,
        is_randomized=is_randomized,
        max_attempts=max_attempts,
    )
    session.add(quiz)
    await session.flush()

    for index, item in enumerate(questions, start=1):
        session.add(
            QuizQuestion(
                quiz_id=quiz.id,
                question=item.question,
                type=item.type,
                options=item.options,
                correct_answer=item.correct_answer,
                points=item.points,
                explanation=item.explanation,
                order_index=index,
            )
        )

    await session.commit()
    return await get_quiz_by_id(session, quiz.id, load_questions=True)


async def get_questions_by_quiz_id(session: AsyncSession, quiz_id: int) -> Sequence[QuizQuestion]:
    """퀴즈 문항 조회 (order_index 순)"""
    stmt = (
        select(QuizQuestion)
        .where(QuizQuestion.quiz_id == quiz_id)
        .order_by(QuizQuestion.order_index)
    )
    result = await session.execute(stmt)
    return result.scalars().all()


async def get_quizzes_by_course_id(session: AsyncSession, course_id: int) -> Sequence[Quiz]:
    """강좌별 퀴즈 목록 (생성 순)"""
    stmt = select(Quiz).where(Quiz.course_id == course_id).order_by(Quiz.created_at, Quiz.id)
    result = await session.execute(stmt)
    return result.scalars().all()


async def update_quiz(session: AsyncSession, quiz: Quiz, **fields) -> Quiz:
    """퀴즈 메타데이터 수정 (None은 NULL 허용 컬럼만 비움)"""
    quiz.apply_fields(fields)
    await session.commit()
    return await get_quiz_by_id(session, quiz.id, load_questions=True)


async def delete_quiz(session: AsyncSession, quiz_id: int) -> None:
    """퀴즈 삭제 (답안 → 제출 → 문항 → 퀴즈 순서)"""
    submission_ids = select(QuizSubmission.id).where(QuizSubmission.quiz_id == quiz_id)
    await session.execute(delete(QuizAnswer).where(QuizAnswer.submission_id.in_(submission_ids)))
    await session.execute(delete(QuizSubmission).where(QuizSubmission.quiz_id == quiz_id))
    await session.execute(delete(QuizQuestion).where(QuizQuestion.quiz_id == quiz_id))
    await session.execute(delete(Quiz).where(Quiz.id == quiz_id))
    await session.commit()
