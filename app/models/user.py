from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, TimestampMixin


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    email: Mapped[str | None] = mapped_column(String(255), unique=True, default=None)
    first_name: Mapped[str | None] = mapped_column(String(100), default=None)
    last_name: Mapped[str | None] = mapped_column(String(100), default=None)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="learner")  # 'learner', 'mentor', 'admin'
    organization_id: Mapped[str | None] = mapped_column(String(64), index=True, default=None)

    enrollments: Mapped[list["Enrollment"]] = relationship("Enrollment", back_populates="user")
