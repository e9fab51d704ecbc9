from app.crud.course import create_course, get_course_by_id, update_course
from app.crud.quiz import (
    create_quiz,
    delete_quiz,
    get_questions_by_quiz_id,
    get_quiz_by_id,
    get_quizzes_by_course_id,
    update_quiz,
)
from app.crud.quiz_submission import (
    add_answer,
    add_submission,
    count_submissions,
    get_answers_with_questions,
    get_submissions_by_quiz_and_user,
    get_submissions_by_quiz_id,
    get_user_quiz_history,
    update_answer_ai_feedback,
)
from app.crud.report import create_report, get_reports
from app.crud.tag import (
    add_tag,
    apply_tag_to_course,
    delete_tag,
    get_course_tags,
    get_popular_tags,
    get_tag_by_id,
    get_tag_by_name,
    get_tags,
    remove_course_tag,
    update_tag,
)
from app.crud.user import get_user_by_id

__all__ = [
    "get_course_by_id",
    "create_course",
    "update_course",
    "get_quiz_by_id",
    "create_quiz",
    "update_quiz",
    "delete_quiz",
    "get_questions_by_quiz_id",
    "get_quizzes_by_course_id",
    "count_submissions",
    "add_submission",
    "add_answer",
    "get_submissions_by_quiz_and_user",
    "get_submissions_by_quiz_id",
    "get_user_quiz_history",
    "get_answers_with_questions",
    "update_answer_ai_feedback",
    "get_tag_by_id",
    "get_tag_by_name",
    "add_tag",
    "get_tags",
    "delete_tag",
    "update_tag",
    "apply_tag_to_course",
    "get_course_tags",
    "remove_course_tag",
    "get_popular_tags",
    "create_report",
    "get_reports",
    "get_user_by_id",
]
