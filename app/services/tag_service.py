"""강좌 태그 제안 및 자동 태깅

키워드 매칭(고정 어휘)과 AI 제안(선택)을 합쳐 신뢰도 순으로 정렬한다.
AI 호출이 실패하면 키워드 매칭 결과만 사용한다.
"""
import logging
import random

from sqlalchemy.ext.asyncio import AsyncSession

from app.crud import course as course_crud, tag as tag_crud
from app.exceptions import AIServiceError, CourseNotFoundError, DuplicateTagError, TagNotFoundError
from app.schemas.ai import AITextGenerationRequest
from app.schemas.tag import (
    CourseTagListResponse,
    CourseTagResponse,
    PopularTagResponse,
    TagCreateRequest,
    TagListResponse,
    TagResponse,
    TagSuggestion,
    TagUpdateRequest,
)
from app.services import ai_service

logger = logging.getLogger(__name__)

WHOLE_MATCH_CONFIDENCE = 0.8
PARTIAL_MATCH_CONFIDENCE = 0.6
PARTIAL_MATCH_MIN_WORD_LENGTH = 3
AUTO_TAG_THRESHOLD = 0.6
MANUAL_TAG_CONFIDENCE = 1.0
DEFAULT_AI_CONFIDENCE = 0.7
MAX_AI_SUGGESTIONS = 8
MAX_COURSE_SUGGESTIONS = 8

AI_TAG_MAX_OUTPUT_TOKENS = 500
AI_TAG_TEMPERATURE = 0.3

PREDEFINED_TAGS = [
    {"name": "JavaScript", "category": "technology", "color": "#F7DF1E", "description": "JavaScript programming language"},
    {"name": "Python", "category": "technology", "color": "#3776AB", "description": "Python programming language"},
    {"name": "React", "category": "technology", "color": "#61DAFB", "description": "React JavaScript library"},
    {"name": "Node.js", "category": "technology", "color": "#339933", "description": "Node.js runtime environment"},
    {"name": "Data Science", "category": "domain", "color": "#FF6B6B", "description": "Data science and analytics"},
    {"name": "Machine Learning", "category": "domain", "color": "#4ECDC4", "description": "Machine learning and AI"},
    {"name": "Web Development", "category": "domain", "color": "#45B7D1", "description": "Web development and design"},
    {"name": "Mobile Development", "category": "domain", "color": "#96CEB4", "description": "Mobile app development"},
    {"name": "Database", "category": "technology", "color": "#FFEAA7", "description": "Database systems and SQL"},
    {"name": "DevOps", "category": "domain", "color": "#DDA0DD", "description": "DevOps and deployment"},
    {"name": "Cybersecurity", "category": "domain", "color": "#FF8A80", "description": "Cybersecurity and security"},
    {"name": "Cloud Computing", "category": "domain", "color": "#81C784", "description": "Cloud platforms and services"},
    {"name": "UI/UX", "category": "skill", "color": "#FFB74D", "description": "User interface and experience design"},
    {"name": "Project Management", "category": "skill", "color": "#BA68C8", "description": "Project management methodologies"},
    {"name": "Leadership", "category": "skill", "color": "#4DB6AC", "description": "Leadership and management skills"},
    {"name": "Communication", "category": "skill", "color": "#FFD54F", "description": "Communication and presentation skills"},
]

TAG_COLOR_PALETTE = (
    "#FF6B6B", "#4ECDC4", "#45B7D1", "#96CEB4", "#FFEAA7",
    "#DDA0DD", "#FF8A80", "#81C784", "#FFB74D", "#BA68C8",
    "#4DB6AC", "#FFD54F", "#A1887F", "#90A4AE", "#FFAB91",
)


def _suggestion_from_vocabulary(tag: dict, confidence: float) -> TagSuggestion:
    return TagSuggestion(
        name=tag["name"],
        category=tag["category"],
        confidence=confidence,
        description=tag["description"],
        color=tag["color"],
    )


def find_keyword_matches(text: str) -> list[TagSuggestion]:
    """고정 어휘와 키워드 매칭

    태그 이름이 본문에 그대로 포함되면 0.8, 3자를 넘는 단어가 태그 이름과
    서로 포함 관계이면 0.6. 중복은 이후 단계에서 제거된다.
    """
    text = text.lower()
    matches = [
        _suggestion_from_vocabulary(tag, WHOLE_MATCH_CONFIDENCE)
        for tag in PREDEFINED_TAGS
        if tag["name"].lower() in text
    ]

    for word in text.split():
        if len(word) <= PARTIAL_MATCH_MIN_WORD_LENGTH:
            continue
        for tag in PREDEFINED_TAGS:
            key = tag["name"].lower()
            if word in key or key in word:
                matches.append(_suggestion_from_vocabulary(tag, PARTIAL_MATCH_CONFIDENCE))

    return matches


def parse_ai_tag_suggestions(text: str) -> list[TagSuggestion]:
    """`name|category|confidence|description` 형식의 줄만 파싱 (형식이 틀린 줄은 버림)"""
    suggestions: list[TagSuggestion] = []

    for line in text.splitlines():
        parts = line.split("|")
        if len(parts) < 3:
            continue

        name = parts[0].strip().lstrip("-* ").strip()
        category = parts[1].strip()
        try:
            confidence = float(parts[2].strip())
        except ValueError:
            confidence = DEFAULT_AI_CONFIDENCE
        if not confidence:
            confidence = DEFAULT_AI_CONFIDENCE
        description = parts[3].strip() if len(parts) > 3 and parts[3].strip() else None

        if not name or not category or not confidence > 0:
            continue

        suggestions.append(
            TagSuggestion(
                name=name,
                category=category,
                confidence=min(confidence, 1.0),
                description=description,
            )
        )
        if len(suggestions) >= MAX_AI_SUGGESTIONS:
            break

    return suggestions


def build_tag_prompt(title: str, description: str | None, content: str | None) -> str:
    return f"""Analyze the following course content and suggest relevant tags:

Course Title: {title}
Description: {description or 'No description provided'}
Content: {content or 'No content provided'}

Please suggest 5-8 relevant tags in the following format:
- Technology tags (programming languages, frameworks, tools)
- Domain tags (subject areas, industries)
- Skill tags (competencies, abilities)

Format each tag as: [name]|[category]|[confidence 0.0-1.0]|[brief description]

Example:
JavaScript|technology|0.9|JavaScript programming language
Web Development|domain|0.8|Web development and design
Problem Solving|skill|0.7|Analytical and problem-solving skills"""


async def generate_ai_tag_suggestions(
    title: str,
    description: str | None = None,
    content: str | None = None,
) -> list[TagSuggestion]:
    """AI 태그 제안 (키가 없거나 호출이 실패하면 빈 목록)"""
    if not ai_service.is_ai_enabled():
        return []

    try:
        text = await ai_service.generate_text(
            AITextGenerationRequest(
                prompt=build_tag_prompt(title, description, content),
                max_output_tokens=AI_TAG_MAX_OUTPUT_TOKENS,
                temperature=AI_TAG_TEMPERATURE,
            )
        )
    except AIServiceError as e:
        logger.warning(f"AI 태그 제안 실패, 키워드 매칭만 사용: title={title!r}, {e.message}")
        return []

    return parse_ai_tag_suggestions(text)


def remove_duplicate_suggestions(suggestions: list[TagSuggestion]) -> list[TagSuggestion]:
    """이름(대소문자 무시) 기준 중복 제거, 먼저 나온 것이 남는다"""
    seen: set[str] = set()
    unique = []
    for suggestion in suggestions:
        key = suggestion.name.lower()
        if key in seen:
            continue
        seen.add(key)
        unique.append(suggestion)
    return unique


async def suggest(
    title: str,
    description: str | None = None,
    content: str | None = None,
) -> list[TagSuggestion]:
    """태그 제안 (신뢰도 내림차순)"""
    text = f"{title} {description or ''} {content or ''}"

    suggestions = find_keyword_matches(text)
    suggestions.extend(await generate_ai_tag_suggestions(title, description, content))

    unique = remove_duplicate_suggestions(suggestions)
    return sorted(unique, key=lambda s: s.confidence, reverse=True)


async def suggest_tags_for_course(
    title: str,
    description: str | None = None,
    content: str | None = None,
) -> list[TagSuggestion]:
    """새 강좌용 태그 제안 (상위 8개)"""
    suggestions = await suggest(title, description, content)
    return suggestions[:MAX_COURSE_SUGGESTIONS]


async def ensure_tag_exists(session: AsyncSession, suggestion: TagSuggestion):
    """이름으로 태그를 찾고 없으면 생성 (색상이 없으면 팔레트에서 무작위)"""
    tag = await tag_crud.get_tag_by_name(session, suggestion.name)
    if tag:
        return tag

    tag = await tag_crud.add_tag(
        session,
        name=suggestion.name,
        category=suggestion.category,
        description=suggestion.description,
        color=suggestion.color or random.choice(TAG_COLOR_PALETTE),
    )
    logger.info(f"태그 생성: tag_id={tag.id}, name={tag.name}")
    return tag


async def auto_tag(
    session: AsyncSession,
    course_id: int,
    title: str,
    description: str | None = None,
    content: str | None = None,
    manual_tags: list[str] | None = None,
) -> CourseTagListResponse:
    """강좌 자동 태깅

    신뢰도 0.6 초과 제안을 그 신뢰도로, 수동 태그는 1.0으로 연결한다.
    이미 연결된 태그는 더 높은 신뢰도일 때만 갱신된다.
    """
    course = await course_crud.get_course_by_id(session, course_id)
    if not course:
        raise CourseNotFoundError(course_id)

    applied = 0
    for suggestion in await suggest(title, description, content):
        if suggestion.confidence <= AUTO_TAG_THRESHOLD:
            continue
        tag = await ensure_tag_exists(session, suggestion)
        await tag_crud.apply_tag_to_course(session, course_id, tag.id, suggestion.confidence)
        applied += 1

    for name in manual_tags or []:
        if not name.strip():
            continue
        tag = await ensure_tag_exists(
            session,
            TagSuggestion(name=name.strip(), category="manual", confidence=MANUAL_TAG_CONFIDENCE),
        )
        await tag_crud.apply_tag_to_course(session, course_id, tag.id, MANUAL_TAG_CONFIDENCE)
        applied += 1

    await session.commit()
    logger.info(f"강좌 자동 태깅: course_id={course_id}, 적용={applied}개")

    return await get_course_tags(session, course_id)


async def get_tags(
    session: AsyncSession,
    category: str | None = None,
    search: str | None = None,
) -> TagListResponse:
    tags = await tag_crud.get_tags(session, category=category, search=search)
    items = [TagResponse.model_validate(tag) for tag in tags]
    return TagListResponse(tags=items, total=len(items))


async def get_course_tags(session: AsyncSession, course_id: int) -> CourseTagListResponse:
    """강좌 태그 (신뢰도 높은 순)"""
    course = await course_crud.get_course_by_id(session, course_id)
    if not course:
        raise CourseNotFoundError(course_id)

    rows = await tag_crud.get_course_tags(session, course_id)
    items = [CourseTagResponse(**row) for row in rows]
    return CourseTagListResponse(course_id=course_id, tags=items, total=len(items))


async def remove_course_tag(session: AsyncSession, course_id: int, tag_id: int) -> None:
    removed = await tag_crud.remove_course_tag(session, course_id, tag_id)
    if not removed:
        raise TagNotFoundError(tag_id)
    logger.info(f"강좌 태그 제거: course_id={course_id}, tag_id={tag_id}")


async def create_tag(session: AsyncSession, request: TagCreateRequest) -> TagResponse:
    existing = await tag_crud.get_tag_by_name(session, request.name)
    if existing:
        raise DuplicateTagError(request.name)

    tag = await tag_crud.add_tag(
        session,
        name=request.name,
        category=request.category,
        description=request.description,
        color=request.color or random.choice(TAG_COLOR_PALETTE),
    )
    await session.commit()
    await session.refresh(tag)
    return TagResponse.model_validate(tag)


async def update_tag(session: AsyncSession, tag_id: int, request: TagUpdateRequest) -> TagResponse:
    tag = await tag_crud.get_tag_by_id(session, tag_id)
    if not tag:
        raise TagNotFoundError(tag_id)

    if request.name and request.name.strip().lower() != tag.name.lower():
        existing = await tag_crud.get_tag_by_name(session, request.name)
        if existing:
            raise DuplicateTagError(request.name)

    tag = await tag_crud.update_tag(session, tag, **request.model_dump(exclude_unset=True))
    return TagResponse.model_validate(tag)


async def delete_tag(session: AsyncSession, tag_id: int) -> None:
    """태그 삭제 (모든 강좌에서 연결 제거)"""
    tag = await tag_crud.get_tag_by_id(session, tag_id)
    if not tag:
        raise TagNotFoundError(tag_id)
    name = tag.name
    await tag_crud.delete_tag(session, tag_id)
    logger.info(f"태그 삭제: tag_id={tag_id}, name={name}")


async def get_popular_tags(session: AsyncSession, limit: int = 10) -> list[PopularTagResponse]:
    rows = await tag_crud.get_popular_tags(session, limit=limit)
    return [PopularTagResponse(**row) for row in rows]
