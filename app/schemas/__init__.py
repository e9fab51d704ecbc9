from app.schemas.ai import AITextGenerationRequest, QuizFeedbackRequest
from app.schemas.analytics import (
    AnalyticsFilter,
    CourseAnalytics,
    LearningMetrics,
    SkillGap,
    TrendData,
    TrendPeriod,
    UserAnalytics,
)
from app.schemas.course import (
    CourseCreateRequest,
    CourseResponse,
    CourseUpdateRequest,
    CourseWithTagsResponse,
)
from app.schemas.quiz import (
    QuizCreateRequest,
    QuizCreateResponse,
    QuizListResponse,
    QuizQuestionCreate,
    QuizQuestionResponse,
    QuizResponse,
    QuizSummaryResponse,
    QuizUpdateRequest,
)
from app.schemas.quiz_submission import (
    IncorrectAnswerFeedback,
    QuizAnswerRequest,
    QuizAnswerResponse,
    QuizHistoryItem,
    QuizHistoryResponse,
    QuizResultListResponse,
    QuizResultResponse,
    QuizStatsResponse,
    QuizSubmissionDetailResponse,
    QuizSubmissionResponse,
    QuizSubmitRequest,
)
from app.schemas.report import ReportListResponse, ReportResponse
from app.schemas.tag import (
    AutoTagRequest,
    CourseTagListResponse,
    CourseTagResponse,
    PopularTagResponse,
    TagCreateRequest,
    TagListResponse,
    TagResponse,
    TagSuggestion,
    TagSuggestRequest,
    TagUpdateRequest,
)

__all__ = [
    "AITextGenerationRequest",
    "QuizFeedbackRequest",
    "AnalyticsFilter",
    "LearningMetrics",
    "CourseAnalytics",
    "UserAnalytics",
    "TrendData",
    "SkillGap",
    "TrendPeriod",
    "CourseCreateRequest",
    "CourseUpdateRequest",
    "CourseResponse",
    "CourseWithTagsResponse",
    "QuizQuestionCreate",
    "QuizCreateRequest",
    "QuizCreateResponse",
    "QuizUpdateRequest",
    "QuizQuestionResponse",
    "QuizSummaryResponse",
    "QuizResponse",
    "QuizListResponse",
    "QuizAnswerRequest",
    "QuizSubmitRequest",
    "QuizAnswerResponse",
    "IncorrectAnswerFeedback",
    "QuizSubmissionResponse",
    "QuizSubmissionDetailResponse",
    "QuizResultResponse",
    "QuizResultListResponse",
    "QuizStatsResponse",
    "QuizHistoryItem",
    "QuizHistoryResponse",
    "ReportResponse",
    "ReportListResponse",
    "TagSuggestion",
    "TagSuggestRequest",
    "TagCreateRequest",
    "TagUpdateRequest",
    "TagResponse",
    "TagListResponse",
    "CourseTagResponse",
    "CourseTagListResponse",
    "PopularTagResponse",
    "AutoTagRequest",
]
