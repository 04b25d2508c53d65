"""Schemas for the task analysis endpoint (camelCase to match the web client)."""
from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class TimeRangePayload(BaseModel):
    start: str = Field(..., description="HH:MM")
    end: str = Field(..., description="HH:MM")


class UserSchedulePayload(BaseModel):
    timezone: Optional[str] = None
    workingHours: Optional[TimeRangePayload] = None
    busyByDate: Dict[str, List[TimeRangePayload]] = Field(default_factory=dict)
    avoidWeekends: bool = False
    # Explicit null disables lunch; omitting the key applies the default.
    lunchBreak: Optional[TimeRangePayload] = None
    maxDailyMinutes: Optional[int] = None


class ContentAttachment(BaseModel):
    text: str = ""
    images: List[str] = Field(default_factory=list)


class FileContent(ContentAttachment):
    fileName: str


class WebContent(ContentAttachment):
    url: str


class AnalyzeTaskRequest(BaseModel):
    mainTaskTitle: str = Field(..., min_length=1)
    description: str = ""
    deadline: Optional[str] = None
    fileContents: List[FileContent] = Field(default_factory=list)
    webContents: List[WebContent] = Field(default_factory=list)
    userRequirements: str = ""
    difficultyLevel: Literal["easy", "normal", "hard"] = "normal"
    userSchedule: Optional[UserSchedulePayload] = None


class ScheduledSubtask(BaseModel):
    id: str
    text: str
    estimatedDuration: int
    priority: Literal["high", "medium", "low"]
    order: int
    time: Optional[str] = None
    date: Optional[str] = None


class SchedulingStatus(BaseModel):
    status: Literal["scheduled", "partial", "skipped"]
    error: Optional[str] = None


class TaskAnalysisResponse(BaseModel):
    complexity: Literal["simple", "moderate", "complex"]
    estimatedTotalTime: int
    priority: Literal["high", "medium", "low"]
    suggestedSubtasks: List[ScheduledSubtask]
    assumptions: List[str]
    missingInfo: List[str]
    scheduling: SchedulingStatus
    fallbackUsed: bool
    request_id: str
