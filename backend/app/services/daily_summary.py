"""Daily completion summaries computed from todos."""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import date
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from app.db.models.daily_summary import DailySummary
from app.db.models.todo import Todo

logger = logging.getLogger(__name__)

# (minimum completion rate, badge, mood), checked top to bottom.
BADGE_THRESHOLDS: List[Tuple[int, str, str]] = [
    (100, "perfect", "excellent"),
    (80, "great", "great"),
    (60, "good", "good"),
    (30, "progress", "okay"),
    (1, "start", "needs_work"),
]
REST_BADGE = ("rest", "neutral")


@dataclass
class DaySummary:
    date: str
    completed_tasks: int
    total_tasks: int
    completion_rate: int
    badge: str
    mood: str

    def to_dict(self) -> dict:
        return asdict(self)


def summarize_todos(day: date, todos: Iterable[Todo]) -> DaySummary:
    todos = list(todos)
    total = len(todos)
    completed = sum(1 for todo in todos if (todo.progress or 0) == 100)
    # Half-up rounding, so 0.5% counts as 1%.
    rate = (completed * 200 + total) // (total * 2) if total else 0
    badge, mood = badge_for_rate(rate)
    return DaySummary(
        date=day.isoformat(),
        completed_tasks=completed,
        total_tasks=total,
        completion_rate=rate,
        badge=badge,
        mood=mood,
    )


def badge_for_rate(rate: int) -> Tuple[str, str]:
    for minimum, badge, mood in BADGE_THRESHOLDS:
        if rate >= minimum:
            return badge, mood
    return REST_BADGE


def todos_for_day(db: Session, day: date) -> List[Todo]:
    """Todos whose deadline or creation date falls on ``day``."""
    iso = day.isoformat()
    return (
        db.query(Todo)
        .filter(or_(func.substr(Todo.deadline, 1, 10) == iso, func.date(Todo.created_at) == iso))
        .all()
    )


def upsert_summary(db: Session, summary: DaySummary, ai_comment: Optional[str] = None) -> DailySummary:
    row = db.get(DailySummary, summary.date) or DailySummary(date=summary.date)
    row.completed_tasks = summary.completed_tasks
    row.total_tasks = summary.total_tasks
    row.completion_rate = summary.completion_rate
    row.badge = summary.badge
    row.mood = summary.mood
    if ai_comment is not None:
        row.ai_comment = ai_comment
    db.add(row)
    return row


def run_daily_summary_job(db: Session, day: date) -> DaySummary:
    """Compute and store the summary for ``day``."""
    summary = summarize_todos(day, todos_for_day(db, day))
    try:
        upsert_summary(db, summary)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info(
        "Daily summary stored for %s: %s/%s (%s%%)",
        summary.date,
        summary.completed_tasks,
        summary.total_tasks,
        summary.completion_rate,
    )
    return summary
