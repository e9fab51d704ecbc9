from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.base import get_db
from app.schemas import tag as tag_schema
from app.services import tag_service

router = APIRouter(prefix="/tags", tags=["tags"])


@router.get("", response_model=tag_schema.TagListResponse)
async def get_tags(
    category: str | None = Query(None, description="카테고리 필터"),
    search: str | None = Query(None, description="이름 부분 검색"),
    db: AsyncSession = Depends(get_db),
):
    """태그 목록 조회 API"""
    return await tag_service.get_tags(db, category=category, search=search)


@router.get("/popular", response_model=list[tag_schema.PopularTagResponse])
async def get_popular_tags(
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    """인기 태그 조회 API"""
    return await tag_service.get_popular_tags(db, limit=limit)


@router.post("/suggest", response_model=tag_schema.TagSuggestResponse)
async def suggest_tags(request: tag_schema.TagSuggestRequest):
    """태그 제안 API (저장하지 않음)"""
    suggestions = await tag_service.suggest_tags_for_course(request.title, request.description, request.content)
    return tag_schema.TagSuggestResponse(suggestions=suggestions, total=len(suggestions))


@router.post("", response_model=tag_schema.TagResponse, status_code=status.HTTP_201_CREATED)
async def create_tag(
    request: tag_schema.TagCreateRequest,
    db: AsyncSession = Depends(get_db),
):
    """태그 생성 API"""
    return await tag_service.create_tag(db, request)


@router.put("/{tag_id}", response_model=tag_schema.TagResponse)
async def update_tag(
    tag_id: int,
    request: tag_schema.TagUpdateRequest,
    db: AsyncSession = Depends(get_db),
):
    """태그 수정 API"""
    return await tag_service.update_tag(db, tag_id, request)


@router.delete("/{tag_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tag(
    tag_id: int,
    db: AsyncSession = Depends(get_db),
):
    """태그 삭제 API"""
    await tag_service.delete_tag(db, tag_id)
