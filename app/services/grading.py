"""문항 유형별 채점

- multiple_choice / true_false: 공백 제거, 대소문자 무시 후 완전 일치
- short_answer: 정규화한 답과 정답이 서로를 포함하면 정답.
  짧은 정답(예: "a")이나 빈 문자열 답안에서 오탐이 생기는 느슨한 규칙이다.
- essay: 실제 채점이 아니라 참여 확인용으로, 공백 제거 후 10자를 넘으면 정답.
"""
from dataclasses import dataclass
from typing import Protocol

NO_ANSWER_FEEDBACK = "No answer provided"
CORRECT_FEEDBACK = "Correct! Well done."
ESSAY_MIN_LENGTH = 10


class GradableQuestion(Protocol):
    type: str
    correct_answer: str
    points: int


@dataclass(frozen=True)
class GradeResult:
    is_correct: bool
    feedback: str
    points: int


def normalize(text: str) -> str:
    return text.strip().lower()


def check_answer(question: GradableQuestion, user_answer: str) -> bool:
    """정답 여부 판정"""
    answer = normalize(user_answer)
    correct = normalize(question.correct_answer)

    if question.type in ("multiple_choice", "true_false"):
        return answer == correct
    if question.type == "short_answer":
        return correct in answer or answer in correct
    if question.type == "essay":
        return len(user_answer.strip()) > ESSAY_MIN_LENGTH
    return False


def build_feedback(question: GradableQuestion, user_answer: str, is_correct: bool) -> str:
    """규칙 기반 피드백 문구"""
    if is_correct:
        return CORRECT_FEEDBACK

    if question.type in ("multiple_choice", "true_false"):
        return f"Incorrect. The correct answer is: {question.correct_answer}"
    if question.type == "short_answer":
        return f'Your answer: "{user_answer}". The correct answer is: "{question.correct_answer}"'
    if question.type == "essay":
        return "Your essay answer could be improved. Consider reviewing the course material."
    return "Incorrect answer."


def grade(question: GradableQuestion, user_answer: str | None) -> GradeResult:
    """단일 문항 채점 (답안이 없으면 오답, 배점은 만점 계산에 그대로 포함)"""
    if user_answer is None:
        return GradeResult(is_correct=False, feedback=NO_ANSWER_FEEDBACK, points=0)

    is_correct = check_answer(question, user_answer)
    return GradeResult(
        is_correct=is_correct,
        feedback=build_feedback(question, user_answer, is_correct),
        points=question.points if is_correct else 0,
    )
