from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, model_validator

QuestionType = Literal["multiple_choice", "true_false", "short_answer", "essay"]


class QuizQuestionCreate(BaseModel):
    """문항 생성 스키마"""
    question: str = Field(..., min_length=1, description="문항 내용")
    type: QuestionType = Field(..., description="문항 유형")
    options: list[str] | None = Field(None, description="선택지 (객관식 전용)")
    correct_answer: str = Field(..., min_length=1, description="정답")
    points: int = Field(1, ge=1, description="배점")
    explanation: str | None = Field(None, description="해설")

    @model_validator(mode="after")
    def validate_answer_shape(self) -> "QuizQuestionCreate":
        """문항 유형별 선택지/정답 형식 검증"""
        if self.type == "multiple_choice":
            if not self.options or len(self.options) < 2:
                raise ValueError("객관식 문항은 선택지가 2개 이상 필요합니다")
            normalized = {opt.strip().lower() for opt in self.options}
            if self.correct_answer.strip().lower() not in normalized:
                raise ValueError("객관식 정답은 선택지 중 하나여야 합니다")
        elif self.type == "true_false":
            if self.correct_answer.strip().lower() not in ("true", "false"):
                raise ValueError("참/거짓 문항의 정답은 'true' 또는 'false'여야 합니다")
        return self


class QuizCreateRequest(BaseModel):
    """퀴즈 생성 요청 스키마"""
    course_id: int = Field(..., description="강좌 ID")
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    time_limit: int | None = Field(None, ge=1, description="제한 시간 (분)")
    passing_score: int | None = Field(None, ge=0, le=100, description="합격 기준 (기본값: 70)")
    is_randomized: bool = False
    max_attempts: int | None = Field(None, ge=1, description="최대 응시 횟수 (기본값: 1)")
    questions: list[QuizQuestionCreate] = Field(..., min_length=1)


class QuizUpdateRequest(BaseModel):
    """퀴즈 메타데이터 수정 요청 스키마 (문항은 수정 불가)"""
    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    time_limit: int | None = Field(None, ge=1)
    passing_score: int | None = Field(None, ge=0, le=100)
    is_randomized: bool | None = None
    max_attempts: int | None = Field(None, ge=1)


class QuizQuestionResponse(BaseModel):
    """문항 응답 스키마 (학습자 조회 시 정답/해설은 None)"""
    id: int
    question: str
    type: QuestionType
    options: list[str] | None
    points: int
    order_index: int
    correct_answer: str | None = None
    explanation: str | None = None

    model_config = {"from_attributes": True}


class QuizSummaryResponse(BaseModel):
    """퀴즈 요약 응답 스키마"""
    id: int
    course_id: int
    title: str
    description: str | None
    time_limit: int | None
    passing_score: int
    is_randomized: bool
    max_attempts: int
    created_at: datetime

    model_config = {"from_attributes": True}


class QuizResponse(QuizSummaryResponse):
    """문항을 포함한 퀴즈 응답 스키마"""
    questions: list[QuizQuestionResponse] = []


class QuizCreateResponse(BaseModel):
    quiz: QuizResponse
    total_questions: int


class QuizListResponse(BaseModel):
    quizzes: list[QuizSummaryResponse]
    total: int
