from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, JSONType, TimestampMixin


class Quiz(Base, TimestampMixin):
    __tablename__ = "quizzes"

    id: Mapped[int] = mapped_column(primary_key=True)
    course_id: Mapped[int] = mapped_column(ForeignKey("courses.id"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    time_limit: Mapped[int | None] = mapped_column(default=None)  # 분 단위
    passing_score: Mapped[int] = mapped_column(nullable=False, default=70)
    is_randomized: Mapped[bool] = mapped_column(default=False)
    max_attempts: Mapped[int] = mapped_column(nullable=False, default=1)

    course: Mapped["Course"] = relationship("Course", back_populates="quizzes")
    questions: Mapped[list["QuizQuestion"]] = relationship(
        "QuizQuestion",
        back_populates="quiz",
        order_by="QuizQuestion.order_index",
    )


class QuizQuestion(Base):
    __tablename__ = "quiz_questions"
    __table_args__ = (UniqueConstraint("quiz_id", "order_index", name="uq_quiz_questions_quiz_order"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    quiz_id: Mapped[int] = mapped_column(ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True)
    question: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False)  # 'multiple_choice', 'true_false', 'short_answer', 'essay'
    options: Mapped[list[str] | None] = mapped_column(JSONType, default=None)
    correct_answer: Mapped[str] = mapped_column(Text, nullable=False)
    points: Mapped[int] = mapped_column(nullable=False, default=1)
    explanation: Mapped[str | None] = mapped_column(Text, default=None)
    order_index: Mapped[int] = mapped_column(nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    quiz: Mapped["Quiz"] = relationship("Quiz", back_populates="questions")


class QuizSubmission(Base):
    __tablename__ = "quiz_submissions"
    # 같은 응시 번호의 동시 insert는 DB에서 거부된다
    __table_args__ = (
        UniqueConstraint("user_id", "quiz_id", "attempt_number", name="uq_quiz_submissions_attempt"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    quiz_id: Mapped[int] = mapped_column(ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    attempt_number: Mapped[int] = mapped_column(nullable=False)
    answers: Mapped[list[dict] | None] = mapped_column(JSONType, default=None)
    score: Mapped[int] = mapped_column(nullable=False, default=0)
    max_score: Mapped[int] = mapped_column(nullable=False, default=0)
    time_spent: Mapped[int | None] = mapped_column(default=None)  # 초 단위
    is_passed: Mapped[bool] = mapped_column(nullable=False, default=False)
    submitted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    quiz: Mapped["Quiz"] = relationship("Quiz")
    answer_records: Mapped[list["QuizAnswer"]] = relationship(
        "QuizAnswer",
        back_populates="submission",
        order_by="QuizAnswer.id",
    )


class QuizAnswer(Base):
    __tablename__ = "quiz_answers"

    id: Mapped[int] = mapped_column(primary_key=True)
    submission_id: Mapped[int] = mapped_column(
        ForeignKey("quiz_submissions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    question_id: Mapped[int] = mapped_column(
        ForeignKey("quiz_questions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    answer: Mapped[str] = mapped_column(Text, nullable=False, default="")
    is_correct: Mapped[bool] = mapped_column(nullable=False, default=False)
    points: Mapped[int] = mapped_column(nullable=False, default=0)
    feedback: Mapped[str | None] = mapped_column(Text, default=None)
    ai_feedback: Mapped[str | None] = mapped_column(Text, default=None)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    submission: Mapped["QuizSubmission"] = relationship("QuizSubmission", back_populates="answer_records")
    question: Mapped["QuizQuestion"] = relationship("QuizQuestion")
