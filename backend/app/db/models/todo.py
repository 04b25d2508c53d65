"""Todo ORM model (main tasks and their scheduled subtasks)."""
from __future__ import annotations

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text, func, text as sa_text
from sqlalchemy.dialects.postgresql import JSONB, UUID

from app.db.base import Base


class Todo(Base):
    __tablename__ = "todos"
    __table_args__ = (
        Index("ix_todos_user_id", "user_id"),
        Index("ix_todos_parent_todo_id", "parent_todo_id"),
        Index("ix_todos_date", "date"),
    )

    # Client-generated ids such as "ai-subtask-<uuid>-0" are kept verbatim.
    id = Column(String(length=128), primary_key=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    location = Column(Text, nullable=True)
    time = Column(String(length=5), nullable=True)
    date = Column(String(length=10), nullable=True)
    deadline = Column(String(length=32), nullable=True)
    is_from_calendar = Column(Boolean, nullable=False, server_default=sa_text("false"))
    progress = Column(Integer, nullable=False, server_default=sa_text("0"))
    status = Column(String(length=16), nullable=False, server_default=sa_text("'active'"))
    parent_todo_id = Column(String(length=128), ForeignKey("todos.id", ondelete="CASCADE"), nullable=True)
    estimated_duration = Column(Integer, nullable=True)
    memo = Column(Text, nullable=True)
    # Column named "metadata" but attribute renamed to avoid Base.metadata collisions.
    metadata_json = Column("metadata", JSON().with_variant(JSONB(), "postgresql"), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
