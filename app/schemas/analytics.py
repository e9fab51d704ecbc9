from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, model_validator

TrendPeriod = Literal["daily", "weekly", "monthly"]


class AnalyticsFilter(BaseModel):
    """분석 조회 필터 (기간/조직/강좌/사용자)"""
    start_date: datetime | None = None
    end_date: datetime | None = None
    organization_id: str | None = None
    course_id: int | None = None
    user_id: int | None = None

    @model_validator(mode="after")
    def validate_date_range(self) -> "AnalyticsFilter":
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("start_date는 end_date보다 이전이어야 합니다")
        return self


class LearningMetrics(BaseModel):
    total_users: int
    total_courses: int
    total_enrollments: int
    completed_enrollments: int
    active_enrollments: int
    completion_rate: float
    average_progress: float
    average_score: float
    average_quiz_score: float
    active_users: int


class CourseAnalytics(BaseModel):
    course_id: int
    title: str
    enrollments: int
    completions: int
    average_progress: float
    average_score: float
    time_to_complete: float = Field(..., description="평균 수료 소요 일수")


class UserAnalytics(BaseModel):
    user_id: int
    first_name: str
    last_name: str
    total_courses: int
    completed_courses: int
    average_progress: float
    average_score: float
    time_spent: float = Field(..., description="학습 시간 (시간)")
    certifications: int


class TrendData(BaseModel):
    period: str
    start: datetime
    end: datetime
    enrollments: int
    completions: int
    new_users: int
    active_users: int


class SkillGap(BaseModel):
    skill: str
    course_id: int
    course: str
    enrollments: int
    gap: str
    recommendation: str
