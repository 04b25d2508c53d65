"""Schemas for todo CRUD."""
from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

TodoStatus = Literal["active", "paused", "completed"]

class TodoFields(BaseModel):
    time: Optional[str] = Field(default=None, pattern=r"^\d{2}:\d{2}$")
    title: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    progress: Optional[int] = Field(default=None, ge=0, le=100)
    deadline: Optional[str] = None
    parentTodoId: Optional[str] = None
    status: Optional[TodoStatus] = None
    date: Optional[str] = Field(default=None, pattern=r"^\d{4}-\d{2}-\d{2}$")
    estimatedDuration: Optional[int] = Field(default=None, ge=0)
    memo: Optional[str] = None

class TodoCreateRequest(TodoFields):
    user_id: UUID
    id: Optional[str] = Field(default=None, max_length=128)
    title: str = Field(..., min_length=1)
    isFromCalendar: bool = False
    priority: Optional[Literal["high", "medium", "low"]] = None
    order: Optional[int] = None


class TodoUpdateRequest(TodoFields):
    user_id: UUID

    @field_validator("title", "progress", "status")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("Field cannot be null")
        return value


class TodoPayload(BaseModel):
    id: str
    time: Optional[str]
    title: str
    description: Optional[str]
    location: Optional[str]
    isFromCalendar: bool
    progress: int
    deadline: Optional[str]
    parentTodoId: Optional[str]
    status: TodoStatus
    date: Optional[str]
    estimatedDuration: Optional[int]
    memo: Optional[str]
    priority: Optional[str] = None
    order: Optional[int] = None
    created_at: datetime
    updated_at: datetime

class TodoMutationResponse(BaseModel):
    id: str
    message: str
    request_id: str
