from datetime import datetime

from pydantic import BaseModel, Field


class QuizAnswerRequest(BaseModel):
    """문항별 답안"""
    question_id: int
    answer: str


class QuizSubmitRequest(BaseModel):
    """퀴즈 제출 요청 스키마"""
    user_id: int = Field(..., description="응시자 ID")
    answers: list[QuizAnswerRequest] = Field(default_factory=list)
    time_spent: int | None = Field(None, ge=0, description="풀이 시간 (초)")


class QuizAnswerResponse(BaseModel):
    """채점된 답안 응답 스키마"""
    id: int
    question_id: int
    answer: str
    is_correct: bool
    points: int
    feedback: str | None
    ai_feedback: str | None

    model_config = {"from_attributes": True}


class IncorrectAnswerFeedback(BaseModel):
    """오답 즉시 표시용 스키마"""
    question_id: int
    question: str
    user_answer: str
    correct_answer: str
    explanation: str | None


class QuizSubmissionResponse(BaseModel):
    """제출 기록 응답 스키마"""
    id: int
    quiz_id: int
    user_id: int
    attempt_number: int
    score: int
    max_score: int
    is_passed: bool
    time_spent: int | None
    submitted_at: datetime

    model_config = {"from_attributes": True}


class QuizSubmissionDetailResponse(QuizSubmissionResponse):
    """답안 포함 제출 기록 응답 스키마"""
    answer_records: list[QuizAnswerResponse] = []


class QuizResultResponse(BaseModel):
    """퀴즈 제출 결과 응답 스키마"""
    submission: QuizSubmissionResponse
    answers: list[QuizAnswerResponse]
    score: int
    max_score: int
    percentage: float
    is_passed: bool
    incorrect: list[IncorrectAnswerFeedback]


class QuizResultListResponse(BaseModel):
    results: list[QuizSubmissionDetailResponse]
    total: int


class QuizStatsResponse(BaseModel):
    """퀴즈 통계 응답 스키마"""
    total_submissions: int
    average_score: float
    pass_rate: float
    score_distribution: dict[str, int]
    highest_score: int | None = None
    lowest_score: int | None = None


class QuizHistoryItem(BaseModel):
    submission_id: int
    quiz_id: int
    quiz_title: str
    course_id: int
    score: int
    max_score: int
    is_passed: bool
    submitted_at: datetime


class QuizHistoryResponse(BaseModel):
    history: list[QuizHistoryItem]
    total: int
