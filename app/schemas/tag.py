from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

TagCategory = Literal["technology", "domain", "skill", "manual"]


class TagSuggestion(BaseModel):
    """태그 제안 (키워드 매칭 또는 AI)"""
    name: str
    category: str
    confidence: float = Field(..., ge=0.0, le=1.0)
    description: str | None = None
    color: str | None = None


class TagSuggestRequest(BaseModel):
    title: str = Field(..., min_length=1)
    description: str | None = None
    content: str | None = None


class TagSuggestResponse(BaseModel):
    suggestions: list[TagSuggestion]
    total: int


class TagCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    category: TagCategory = "manual"
    description: str | None = None
    color: str | None = Field(None, pattern=r"^#[0-9A-Fa-f]{6}$")


class TagUpdateRequest(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    category: TagCategory | None = None
    description: str | None = None
    color: str | None = Field(None, pattern=r"^#[0-9A-Fa-f]{6}$")


class TagResponse(BaseModel):
    id: int
    name: str
    category: str | None
    description: str | None
    color: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class TagListResponse(BaseModel):
    tags: list[TagResponse]
    total: int


class PopularTagResponse(BaseModel):
    id: int
    name: str
    category: str | None
    color: str | None
    usage_count: int


class CourseTagResponse(BaseModel):
    """강좌에 연결된 태그 (신뢰도 포함)"""
    tag_id: int
    name: str
    category: str | None
    description: str | None
    color: str | None
    confidence: float


class CourseTagListResponse(BaseModel):
    course_id: int
    tags: list[CourseTagResponse]
    total: int


class AutoTagRequest(BaseModel):
    """강좌 자동 태깅 요청 (강좌 본문/수동 태그)"""
    content: str | None = None
    manual_tags: list[str] | None = None
