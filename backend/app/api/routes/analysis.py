"""Task analysis endpoint: LLM subtasks placed onto the user's calendar."""
from __future__ import annotations

from fastapi import APIRouter, Request

from app.api.schemas.analysis import AnalyzeTaskRequest, TaskAnalysisResponse
from app.observability.tracing import trace
from app.services.task_analyzer import analyze_task

router = APIRouter(prefix="/api")


@router.post("/analyze-task", response_model=TaskAnalysisResponse, tags=["analysis"])
def analyze_task_endpoint(payload: AnalyzeTaskRequest, http_request: Request) -> TaskAnalysisResponse:
    """Break a main task into subtasks and schedule them; LLM or scheduling trouble degrades, never fails."""
    request_id = getattr(http_request.state, "request_id", None)
    user_schedule = payload.userSchedule.model_dump(exclude_unset=True) if payload.userSchedule else None

    with trace(
        "task.analysis",
        metadata={
            "route": "/api/analyze-task",
            "difficulty": payload.difficultyLevel,
            "title": payload.mainTaskTitle[:200],
        },
        request_id=request_id,
    ):
        analysis = analyze_task(
            payload.mainTaskTitle,
            description=payload.description,
            deadline=payload.deadline,
            file_contents=[item.model_dump() for item in payload.fileContents],
            web_contents=[item.model_dump() for item in payload.webContents],
            user_requirements=payload.userRequirements,
            difficulty_level=payload.difficultyLevel,
            user_schedule=user_schedule,
            request_id=request_id,
        )

    return TaskAnalysisResponse(**analysis, request_id=request_id or "")
