from datetime import datetime

from pydantic import BaseModel, Field

from app.schemas.tag import CourseTagResponse


class CourseCreateRequest(BaseModel):
    """강좌 생성 요청 스키마 (생성 시 자동 태깅)"""
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    content: str | None = Field(None, description="태깅에만 사용하는 강좌 본문")
    mentor_id: int
    organization_id: str | None = None
    category: str | None = None
    difficulty: str | None = None
    is_public: bool = True
    manual_tags: list[str] | None = None


class CourseUpdateRequest(BaseModel):
    """강좌 수정 요청 스키마 (수정 시 재태깅)"""
    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    content: str | None = None
    category: str | None = None
    difficulty: str | None = None
    is_public: bool | None = None
    manual_tags: list[str] | None = None


class CourseResponse(BaseModel):
    id: int
    title: str
    description: str | None
    mentor_id: int
    organization_id: str | None
    category: str | None
    difficulty: str | None
    is_public: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class CourseWithTagsResponse(BaseModel):
    course: CourseResponse
    tags: list[CourseTagResponse]
