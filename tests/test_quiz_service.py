"""Quiz Service 테스트"""
import pytest
from datetime import datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.crud import course as course_crud, quiz as quiz_crud, quiz_submission as submission_crud, user as user_crud
from app.exceptions import (
    AttemptsExceededError,
    CourseNotFoundError,
    QuizNotFoundError,
    UserNotFoundError,
)
from app.schemas import quiz as quiz_schema, quiz_submission as submission_schema
from app.services import quiz_service


@pytest.fixture
def mock_db_session():
    """모킹된 DB 세션"""
    return AsyncMock(spec=AsyncSession)


@pytest.fixture
def mock_quiz():
    quiz = MagicMock()
    quiz.id = 1
    quiz.max_attempts = 2
    quiz.passing_score = 3
    return quiz


@pytest.fixture
def mock_questions():
    return [
        SimpleNamespace(id=11, question="Q1", type="multiple_choice", correct_answer="a", points=2, explanation="because"),
        SimpleNamespace(id=12, question="Q2", type="true_false", correct_answer="true", points=1, explanation=None),
    ]


def make_record(record_id: int, **fields):
    return SimpleNamespace(id=record_id, ai_feedback=None, **fields)


def submit_request(*answers) -> submission_schema.QuizSubmitRequest:
    return submission_schema.QuizSubmitRequest(
        user_id=2,
        answers=[{"question_id": qid, "answer": answer} for qid, answer in answers],
    )


@pytest.mark.asyncio
async def test_create_quiz_course_not_found(mock_db_session):
    """강좌가 없으면 예외 발생"""
    request = quiz_schema.QuizCreateRequest(
        course_id=999,
        title="Quiz",
        questions=[{"question": "Q", "type": "true_false", "correct_answer": "true"}],
    )

    with patch.object(course_crud, "get_course_by_id", return_value=None):
        with pytest.raises(CourseNotFoundError):
            await quiz_service.create_quiz(mock_db_session, request)


@pytest.mark.asyncio
async def test_submit_quiz_not_found(mock_db_session):
    """퀴즈가 없으면 예외 발생"""
    with patch.object(quiz_crud, "get_quiz_by_id", return_value=None):
        with pytest.raises(QuizNotFoundError):
            await quiz_service.submit_quiz(mock_db_session, 999, submit_request())


@pytest.mark.asyncio
async def test_submit_quiz_user_not_found(mock_db_session, mock_quiz):
    with patch.object(quiz_crud, "get_quiz_by_id", return_value=mock_quiz):
        with patch.object(user_crud, "get_user_by_id", return_value=None):
            with pytest.raises(UserNotFoundError):
                await quiz_service.submit_quiz(mock_db_session, 1, submit_request())


@pytest.mark.asyncio
async def test_submit_quiz_attempts_exceeded(mock_db_session, mock_quiz):
    """최대 응시 횟수에 도달하면 채점하지 않고 예외 발생"""
    with patch.object(quiz_crud, "get_quiz_by_id", return_value=mock_quiz):
        with patch.object(user_crud, "get_user_by_id", return_value=MagicMock()):
            with patch.object(submission_crud, "count_submissions", return_value=2):
                with patch.object(quiz_crud, "get_questions_by_quiz_id") as mock_questions:
                    with pytest.raises(AttemptsExceededError) as exc_info:
                        await quiz_service.submit_quiz(mock_db_session, 1, submit_request())

    assert exc_info.value.max_attempts == 2
    mock_questions.assert_not_called()


@pytest.mark.asyncio
async def test_submit_quiz_grades_and_persists(mock_db_session, mock_quiz, mock_questions):
    """채점 결과 저장 및 오답 ID 반환"""
    submission = SimpleNamespace(
        id=100,
        quiz_id=1,
        user_id=2,
        attempt_number=2,
        score=2,
        max_score=3,
        is_passed=False,
        time_spent=None,
        submitted_at=datetime(2026, 10, 1, 9, 0),
    )
    records = [
        make_record(501, question_id=11, answer="A", is_correct=True, points=2, feedback="Correct! Well done."),
        make_record(502, question_id=12, answer="false", is_correct=False, points=0, feedback="Incorrect."),
    ]

    with patch.object(quiz_crud, "get_quiz_by_id", return_value=mock_quiz), \
            patch.object(user_crud, "get_user_by_id", return_value=MagicMock()), \
            patch.object(submission_crud, "count_submissions", return_value=1), \
            patch.object(quiz_crud, "get_questions_by_quiz_id", return_value=mock_questions), \
            patch.object(submission_crud, "add_submission", return_value=submission) as mock_add_submission, \
            patch.object(submission_crud, "add_answer", side_effect=records) as mock_add_answer:
        outcome = await quiz_service.submit_quiz(
            mock_db_session, 1, submit_request((11, "A"), (12, "false"), (11, "b"))
        )

    kwargs = mock_add_submission.call_args.kwargs
    assert kwargs["attempt_number"] == 2
    assert kwargs["score"] == 2
    assert kwargs["max_score"] == 3
    # 득점 합계 2 < passing_score 3
    assert kwargs["is_passed"] is False
    assert mock_add_answer.call_count == 2
    # 같은 문항의 중복 답안은 첫 번째만 채점
    assert mock_add_answer.call_args_list[0].kwargs["answer"] == "A"

    mock_db_session.commit.assert_awaited_once()
    assert outcome.wrong_answer_ids == [502]
    assert outcome.result.percentage == 66.67
    assert [item.question_id for item in outcome.result.incorrect] == [12]


@pytest.mark.asyncio
async def test_submit_quiz_retries_after_attempt_conflict(mock_db_session, mock_quiz, mock_questions):
    """동시 제출로 응시 번호가 충돌하면 다시 세고, 한도를 넘으면 예외 발생"""
    conflict = IntegrityError("INSERT", {}, Exception("unique constraint"))

    with patch.object(quiz_crud, "get_quiz_by_id", return_value=mock_quiz), \
            patch.object(user_crud, "get_user_by_id", return_value=MagicMock()), \
            patch.object(submission_crud, "count_submissions", side_effect=[1, 2]), \
            patch.object(quiz_crud, "get_questions_by_quiz_id", return_value=mock_questions), \
            patch.object(submission_crud, "add_submission", side_effect=conflict):
        with pytest.raises(AttemptsExceededError):
            await quiz_service.submit_quiz(mock_db_session, 1, submit_request((11, "a")))

    assert mock_db_session.rollback.await_count == 2


@pytest.mark.asyncio
async def test_get_quiz_stats_without_submissions(mock_db_session, mock_quiz):
    with patch.object(quiz_crud, "get_quiz_by_id", return_value=mock_quiz):
        with patch.object(submission_crud, "get_submissions_by_quiz_id", return_value=[]):
            stats = await quiz_service.get_quiz_stats(mock_db_session, 1)

    assert stats.total_submissions == 0
    assert stats.average_score == 0
    assert stats.pass_rate == 0
    assert stats.score_distribution == {bucket: 0 for bucket in quiz_service.SCORE_BUCKETS}
    assert stats.highest_score is None


@pytest.mark.asyncio
async def test_get_quiz_stats_distribution(mock_db_session, mock_quiz):
    submissions = [
        SimpleNamespace(score=0, max_score=5, is_passed=False),
        SimpleNamespace(score=1, max_score=5, is_passed=False),
        SimpleNamespace(score=3, max_score=5, is_passed=True),
        SimpleNamespace(score=4, max_score=5, is_passed=True),
        SimpleNamespace(score=5, max_score=5, is_passed=True),
    ]
    with patch.object(quiz_crud, "get_quiz_by_id", return_value=mock_quiz):
        with patch.object(submission_crud, "get_submissions_by_quiz_id", return_value=submissions):
            stats = await quiz_service.get_quiz_stats(mock_db_session, 1)

    assert stats.total_submissions == 5
    assert stats.average_score == 2.6
    assert stats.pass_rate == 60.0
    assert stats.score_distribution == {
        "0-20%": 2,
        "21-40%": 0,
        "41-60%": 1,
        "61-80%": 1,
        "81-100%": 1,
    }
    assert stats.highest_score == 5
    assert stats.lowest_score == 0
