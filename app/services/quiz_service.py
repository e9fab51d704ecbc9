import logging
import random
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.crud import course as course_crud, quiz as quiz_crud, quiz_submission as submission_crud, user as user_crud
from app.exceptions import (
    AttemptsExceededError,
    CourseNotFoundError,
    InvalidQuizRequestError,
    QuizNotFoundError,
    UserNotFoundError,
)
from app.schemas import quiz as quiz_schema, quiz_submission as submission_schema
from app.services import grading

logger = logging.getLogger(__name__)

# 같은 응시 번호로 동시에 insert되면 재시도 (unique 제약 충돌)
MAX_SUBMIT_RETRIES = 3

SCORE_BUCKETS = ("0-20%", "21-40%", "41-60%", "61-80%", "81-100%")


@dataclass
class QuizSubmissionOutcome:
    """제출 결과와 백그라운드 피드백 대상 오답 ID"""
    result: submission_schema.QuizResultResponse
    wrong_answer_ids: list[int]


def _to_quiz_response(quiz, include_answers: bool) -> quiz_schema.QuizResponse:
    """Quiz 모델을 QuizResponse로 변환 (학습자용이면 정답/해설 제거, 랜덤 퀴즈는 섞음)"""
    questions = []
    for question in quiz.questions:
        item = quiz_schema.QuizQuestionResponse.model_validate(question)
        if not include_answers:
            item.correct_answer = None
            item.explanation = None
        questions.append(item)

    if quiz.is_randomized and not include_answers:
        random.shuffle(questions)

    summary = quiz_schema.QuizSummaryResponse.model_validate(quiz)
    return quiz_schema.QuizResponse(**summary.model_dump(), questions=questions)


async def create_quiz(
    session: AsyncSession,
    request: quiz_schema.QuizCreateRequest,
) -> quiz_schema.QuizCreateResponse:
    """퀴즈 생성 (문항 포함)"""
    course = await course_crud.get_course_by_id(session, request.course_id)
    if not course:
        raise CourseNotFoundError(request.course_id)

    quiz = await quiz_crud.create_quiz(
        session,
        course_id=request.course_id,
        title=request.title,
        questions=request.questions,
        description=request.description,
        time_limit=request.time_limit,
        passing_score=request.passing_score if request.passing_score is not None else settings.default_passing_score,
        is_randomized=request.is_randomized,
        max_attempts=request.max_attempts or settings.default_max_attempts,
    )
    logger.info(f"퀴즈 생성: quiz_id={quiz.id}, course_id={quiz.course_id}, 문항={len(quiz.questions)}개")

    return quiz_schema.QuizCreateResponse(
        quiz=_to_quiz_response(quiz, include_answers=True),
        total_questions=len(quiz.questions),
    )


async def get_quiz(
    session: AsyncSession,
    quiz_id: int,
    include_answers: bool = False,
) -> quiz_schema.QuizResponse:
    """퀴즈 조회"""
    quiz = await quiz_crud.get_quiz_by_id(session, quiz_id, load_questions=True)
    if not quiz:
        raise QuizNotFoundError(quiz_id)
    return _to_quiz_response(quiz, include_answers=include_answers)


async def update_quiz(
    session: AsyncSession,
    quiz_id: int,
    request: quiz_schema.QuizUpdateRequest,
) -> quiz_schema.QuizResponse:
    """퀴즈 메타데이터 수정"""
    quiz = await quiz_crud.get_quiz_by_id(session, quiz_id)
    if not quiz:
        raise QuizNotFoundError(quiz_id)

    quiz = await quiz_crud.update_quiz(session, quiz, **request.model_dump(exclude_unset=True))
    return _to_quiz_response(quiz, include_answers=True)


async def delete_quiz(session: AsyncSession, quiz_id: int) -> None:
    """퀴즈 삭제 (문항/제출/답안 포함)"""
    quiz = await quiz_crud.get_quiz_by_id(session, quiz_id)
    if not quiz:
        raise QuizNotFoundError(quiz_id)
    await quiz_crud.delete_quiz(session, quiz_id)
    logger.info(f"퀴즈 삭제: quiz_id={quiz_id}")


async def get_course_quizzes(session: AsyncSession, course_id: int) -> quiz_schema.QuizListResponse:
    course = await course_crud.get_course_by_id(session, course_id)
    if not course:
        raise CourseNotFoundError(course_id)

    quizzes = await quiz_crud.get_quizzes_by_course_id(session, course_id)
    items = [quiz_schema.QuizSummaryResponse.model_validate(q) for q in quizzes]
    return quiz_schema.QuizListResponse(quizzes=items, total=len(items))


async def submit_quiz(
    session: AsyncSession,
    quiz_id: int,
    request: submission_schema.QuizSubmitRequest,
) -> QuizSubmissionOutcome:
    """퀴즈 제출 및 채점

    응시 횟수 확인과 제출 저장은 한 트랜잭션에서 처리한다. 퀴즈 행을 잠그고
    (PostgreSQL), (user_id, quiz_id, attempt_number) unique 제약으로 동시 제출이
    max_attempts를 넘지 못하게 한다. 충돌하면 횟수를 다시 세서 재시도한다.
    """
    for attempt in range(MAX_SUBMIT_RETRIES):
        try:
            return await _grade_and_save(session, quiz_id, request)
        except IntegrityError:
            await session.rollback()
            logger.warning(
                f"동시 제출 충돌, 재시도: quiz_id={quiz_id}, user_id={request.user_id}, "
                f"시도 {attempt + 1}/{MAX_SUBMIT_RETRIES}"
            )

    raise InvalidQuizRequestError("동시 제출이 많아 처리하지 못했습니다. 잠시 후 다시 시도해주세요.")


async def _grade_and_save(
    session: AsyncSession,
    quiz_id: int,
    request: submission_schema.QuizSubmitRequest,
) -> QuizSubmissionOutcome:
    quiz = await quiz_crud.get_quiz_by_id(session, quiz_id, for_update=True)
    if not quiz:
        raise QuizNotFoundError(quiz_id)

    user = await user_crud.get_user_by_id(session, request.user_id)
    if not user:
        await session.rollback()
        raise UserNotFoundError(request.user_id)

    previous_count = await submission_crud.count_submissions(session, quiz_id, request.user_id)
    if previous_count >= quiz.max_attempts:
        await session.rollback()
        logger.info(
            f"최대 응시 횟수 초과: quiz_id={quiz_id}, user_id={request.user_id}, "
            f"횟수={previous_count}/{quiz.max_attempts}"
        )
        raise AttemptsExceededError(quiz.max_attempts)

    questions = await quiz_crud.get_questions_by_quiz_id(session, quiz_id)

    # 같은 문항에 답이 여러 개면 첫 번째 답을 사용
    submitted: dict[int, str] = {}
    for item in request.answers:
        submitted.setdefault(item.question_id, item.answer)

    score = 0
    max_score = 0
    graded = []
    for question in questions:
        max_score += question.points
        user_answer = submitted.get(question.id)
        result = grading.grade(question, user_answer)
        score += result.points
        graded.append((question, user_answer, result))

    # 점수는 득점 합계(절대값)이고 passing_score와 그대로 비교한다
    is_passed = score >= quiz.passing_score

    submission = await submission_crud.add_submission(
        session,
        quiz_id=quiz_id,
        user_id=request.user_id,
        attempt_number=previous_count + 1,
        answers=[item.model_dump() for item in request.answers],
        score=score,
        max_score=max_score,
        is_passed=is_passed,
        time_spent=request.time_spent,
    )

    records = []
    incorrect = []
    for question, user_answer, result in graded:
        record = await submission_crud.add_answer(
            session,
            submission_id=submission.id,
            question_id=question.id,
            answer=user_answer or "",
            is_correct=result.is_correct,
            points=result.points,
            feedback=result.feedback,
        )
        records.append(record)
        if not result.is_correct:
            incorrect.append(
                submission_schema.IncorrectAnswerFeedback(
                    question_id=question.id,
                    question=question.question,
                    user_answer=user_answer or "",
                    correct_answer=question.correct_answer,
                    explanation=question.explanation,
                )
            )

    await session.commit()
    await session.refresh(submission)

    logger.info(
        f"퀴즈 제출: quiz_id={quiz_id}, user_id={request.user_id}, "
        f"attempt={submission.attempt_number}, score={score}/{max_score}, passed={is_passed}"
    )

    result = submission_schema.QuizResultResponse(
        submission=submission_schema.QuizSubmissionResponse.model_validate(submission),
        answers=[submission_schema.QuizAnswerResponse.model_validate(r) for r in records],
        score=score,
        max_score=max_score,
        percentage=round(score / max_score * 100, 2) if max_score else 0.0,
        is_passed=is_passed,
        incorrect=incorrect,
    )
    return QuizSubmissionOutcome(
        result=result,
        wrong_answer_ids=[r.id for r in records if not r.is_correct],
    )


async def get_quiz_results(
    session: AsyncSession,
    quiz_id: int,
    user_id: int,
) -> submission_schema.QuizResultListResponse:
    """사용자의 퀴즈 제출 기록 (최신순)"""
    quiz = await quiz_crud.get_quiz_by_id(session, quiz_id)
    if not quiz:
        raise QuizNotFoundError(quiz_id)

    submissions = await submission_crud.get_submissions_by_quiz_and_user(session, quiz_id, user_id)
    results = [submission_schema.QuizSubmissionDetailResponse.model_validate(s) for s in submissions]
    return submission_schema.QuizResultListResponse(results=results, total=len(results))


def _score_bucket(score: int, max_score: int) -> str:
    percentage = (score / max_score * 100) if max_score else 0
    if percentage <= 20:
        return SCORE_BUCKETS[0]
    if percentage <= 40:
        return SCORE_BUCKETS[1]
    if percentage <= 60:
        return SCORE_BUCKETS[2]
    if percentage <= 80:
        return SCORE_BUCKETS[3]
    return SCORE_BUCKETS[4]


async def get_quiz_stats(session: AsyncSession, quiz_id: int) -> submission_schema.QuizStatsResponse:
    """퀴즈 통계 (평균 점수, 합격률, 득점률 분포)"""
    quiz = await quiz_crud.get_quiz_by_id(session, quiz_id)
    if not quiz:
        raise QuizNotFoundError(quiz_id)

    submissions = await submission_crud.get_submissions_by_quiz_id(session, quiz_id)
    distribution = {bucket: 0 for bucket in SCORE_BUCKETS}

    if not submissions:
        return submission_schema.QuizStatsResponse(
            total_submissions=0,
            average_score=0.0,
            pass_rate=0.0,
            score_distribution=distribution,
        )

    total = len(submissions)
    passed = sum(1 for s in submissions if s.is_passed)
    scores = [s.score for s in submissions]
    for s in submissions:
        distribution[_score_bucket(s.score, s.max_score)] += 1

    return submission_schema.QuizStatsResponse(
        total_submissions=total,
        average_score=round(sum(scores) / total, 2),
        pass_rate=round(passed / total * 100, 2),
        score_distribution=distribution,
        highest_score=max(scores),
        lowest_score=min(scores),
    )


async def get_user_quiz_history(session: AsyncSession, user_id: int) -> submission_schema.QuizHistoryResponse:
    """사용자 응시 이력"""
    user = await user_crud.get_user_by_id(session, user_id)
    if not user:
        raise UserNotFoundError(user_id)

    rows = await submission_crud.get_user_quiz_history(session, user_id)
    history = [submission_schema.QuizHistoryItem(**row) for row in rows]
    return submission_schema.QuizHistoryResponse(history=history, total=len(history))
