"""Schemas for daily summaries."""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class DailySummaryPayload(BaseModel):
    date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$")
    completed_tasks: int = Field(default=0, ge=0)
    total_tasks: int = Field(default=0, ge=0)
    completion_rate: int = Field(default=0, ge=0, le=100)
    badge: str = "rest"
    mood: str = "neutral"
    ai_comment: Optional[str] = None


class DailySummarySaveResponse(BaseModel):
    date: str
    message: str
    request_id: str
