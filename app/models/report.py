from datetime import datetime

from sqlalchemy import DateTime, Float, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, JSONType


class NuraReport(Base):
    __tablename__ = "nura_reports"

    id: Mapped[int] = mapped_column(primary_key=True)
    type: Mapped[str] = mapped_column(String(20), nullable=False, index=True)  # 'learner', 'course', 'system', 'quiz_feedback'
    target_id: Mapped[int | None] = mapped_column(index=True, default=None)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    insights: Mapped[list[str] | None] = mapped_column(JSONType, default=None)
    recommendations: Mapped[list[str] | None] = mapped_column(JSONType, default=None)
    confidence: Mapped[float | None] = mapped_column(Float, default=None)
    # 'metadata'는 DeclarativeBase 예약어라 컬럼명만 매핑
    report_metadata: Mapped[dict | None] = mapped_column("metadata", JSONType, default=None)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
