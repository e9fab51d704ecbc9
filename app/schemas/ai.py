from pydantic import BaseModel, Field


class AITextGenerationRequest(BaseModel):
    """텍스트 생성 요청 스키마 (내부 사용)"""
    prompt: str = Field(..., min_length=1, description="프롬프트")
    max_output_tokens: int = Field(1000, ge=1, description="최대 출력 토큰 수")
    temperature: float = Field(0.7, ge=0.0, le=2.0, description="샘플링 온도")


class QuizFeedbackRequest(BaseModel):
    """오답 피드백 생성 입력 (내부 사용)"""
    question: str
    question_type: str
    user_answer: str
    correct_answer: str
    explanation: str | None = None
