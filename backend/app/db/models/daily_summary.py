"""Daily completion summary ORM model."""
from __future__ import annotations

from sqlalchemy import Column, DateTime, Integer, String, Text, func, text as sa_text

from app.db.base import Base


class DailySummary(Base):
    __tablename__ = "daily_summaries"

    date = Column(String(length=10), primary_key=True)
    completed_tasks = Column(Integer, nullable=False, server_default=sa_text("0"))
    total_tasks = Column(Integer, nullable=False, server_default=sa_text("0"))
    completion_rate = Column(Integer, nullable=False, server_default=sa_text("0"))
    badge = Column(String(length=32), nullable=False, server_default=sa_text("'rest'"))
    mood = Column(String(length=32), nullable=False, server_default=sa_text("'neutral'"))
    ai_comment = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
