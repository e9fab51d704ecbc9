from app.services.ai_service import generate_text
from app.services.feedback_service import enrich_wrong_answers, generate_quiz_feedback
from app.services.grading import grade
from app.services.quiz_service import get_quiz_stats, submit_quiz
from app.services.tag_service import auto_tag, suggest, suggest_tags_for_course

__all__ = [
    "generate_text",
    "generate_quiz_feedback",
    "enrich_wrong_answers",
    "grade",
    "submit_quiz",
    "get_quiz_stats",
    "suggest",
    "suggest_tags_for_course",
    "auto_tag",
]
