"""Daily summary routes."""
from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.api.schemas.daily_summary import DailySummaryPayload, DailySummarySaveResponse
from app.db.deps import get_db
from app.db.models.daily_summary import DailySummary
from app.observability.metrics import log_metric
from app.observability.tracing import trace
from app.services.daily_summary import DaySummary, summarize_todos, todos_for_day, upsert_summary

router = APIRouter(prefix="/api")


@router.get("/daily-summaries", response_model=List[DailySummaryPayload], tags=["daily-summaries"])
def list_daily_summaries(db: Session = Depends(get_db)) -> List[DailySummaryPayload]:
    rows = db.query(DailySummary).order_by(DailySummary.date.desc()).all()
    return [_serialize(row) for row in rows]


@router.get("/daily-summaries/{day}", response_model=Optional[DailySummaryPayload], tags=["daily-summaries"])
def get_daily_summary(day: date, db: Session = Depends(get_db)) -> Optional[DailySummaryPayload]:
    row = db.get(DailySummary, day.isoformat())
    return _serialize(row) if row else None


@router.post("/daily-summaries", response_model=DailySummarySaveResponse, tags=["daily-summaries"])
def save_daily_summary(
    payload: DailySummaryPayload,
    http_request: Request,
    db: Session = Depends(get_db),
) -> DailySummarySaveResponse:
    """Insert or replace the summary for ``payload.date``."""
    request_id = getattr(http_request.state, "request_id", None)
    summary = DaySummary(
        date=payload.date,
        completed_tasks=payload.completed_tasks,
        total_tasks=payload.total_tasks,
        completion_rate=payload.completion_rate,
        badge=payload.badge,
        mood=payload.mood,
    )
    try:
        with trace("daily_summary.save", metadata={"date": payload.date}, request_id=request_id):
            upsert_summary(db, summary, ai_comment=payload.ai_comment)
            db.commit()
    except Exception:
        db.rollback()
        raise
    log_metric("daily_summary.saved", 1, metadata={"date": payload.date})
    return DailySummarySaveResponse(
        date=payload.date,
        message="Daily summary saved successfully",
        request_id=request_id or "",
    )


@router.post("/calculate-daily-summary/{day}", response_model=DailySummaryPayload, tags=["daily-summaries"])
def calculate_daily_summary(day: date, http_request: Request, db: Session = Depends(get_db)) -> DailySummaryPayload:
    """Compute (without storing) the summary from todos due or created on ``day``."""
    request_id = getattr(http_request.state, "request_id", None)
    with trace("daily_summary.calculate", metadata={"date": day.isoformat()}, request_id=request_id):
        summary = summarize_todos(day, todos_for_day(db, day))
    return DailySummaryPayload(**summary.to_dict())


def _serialize(row: DailySummary) -> DailySummaryPayload:
    return DailySummaryPayload(
        date=row.date,
        completed_tasks=row.completed_tasks or 0,
        total_tasks=row.total_tasks or 0,
        completion_rate=row.completion_rate or 0,
        badge=row.badge or "rest",
        mood=row.mood or "neutral",
        ai_comment=row.ai_comment,
    )
