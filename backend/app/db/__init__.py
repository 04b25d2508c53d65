"""Declarative base plus every mapped model, so ``Base.metadata`` is complete on import."""

from app.db.base import Base
from app.db.models import DailySummary, Todo, User

__all__ = ["Base", "DailySummary", "Todo", "User"]
