from app.models.base import Base, get_db
from app.models.course import Assignment, AssignmentSubmission, Certification, Course, Enrollment
from app.models.quiz import Quiz, QuizAnswer, QuizQuestion, QuizSubmission
from app.models.report import NuraReport
from app.models.tag import CourseTag, Tag
from app.models.user import User

__all__ = [
    "Base",
    "User",
    "Course",
    "Enrollment",
    "Assignment",
    "AssignmentSubmission",
    "Certification",
    "Quiz",
    "QuizQuestion",
    "QuizSubmission",
    "QuizAnswer",
    "Tag",
    "CourseTag",
    "NuraReport",
    "get_db",
]
