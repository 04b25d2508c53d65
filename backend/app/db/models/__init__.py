"""ORM models exposed for metadata discovery."""
from app.db.models.daily_summary import DailySummary
from app.db.models.todo import Todo
from app.db.models.user import User

__all__ = [
    "DailySummary",
    "Todo",
    "User",
]
