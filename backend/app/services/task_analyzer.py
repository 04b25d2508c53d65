"""LLM-backed task analysis that feeds the subtask scheduler."""
from __future__ import annotations

import json
import logging
import re
from datetime import date, datetime, timedelta, timezone
from time import perf_counter
from typing import Any, Callable, Dict, List, Literal, Optional
from uuid import uuid4

import openai
from pydantic import BaseModel, Field, ValidationError

from app.core.config import settings
from app.observability.metrics import log_metric
from app.observability.tracing import trace
from app.services.scheduling import ScheduleDefaults, ScheduleOutcome, run_schedule

logger = logging.getLogger(__name__)

IdFactory = Callable[[int], str]


class AnalysisParseError(ValueError):
    """The model reply did not contain a usable JSON object."""


class SubtaskDraft(BaseModel):
    """One subtask suggestion as returned by the model."""

    id: Optional[str] = None
    text: str
    estimatedDuration: int = Field(default=30, ge=0, description="Estimated minutes needed.")
    priority: Literal["high", "medium", "low"] = "medium"
    order: int = 0
    time: Optional[str] = Field(default=None, description="Advisory start time like 09:00.")
    date: Optional[str] = Field(default=None, description="Advisory ISO day.")


class TaskAnalysisDraft(BaseModel):
    complexity: Literal["simple", "moderate", "complex"] = "moderate"
    estimatedTotalTime: int = Field(default=0, ge=0)
    priority: Literal["high", "medium", "low"] = "medium"
    suggestedSubtasks: List[SubtaskDraft] = Field(default_factory=list, min_length=1)


DIFFICULTY_GUIDES = {
    "easy": (
        "Relaxed mode:\n"
        "- Group the work into a few large chunks that can be checked loosely.\n"
        "- Do not split into fine-grained steps; keep the big picture.\n"
        "- Leave generous buffers and rest days.\n"
        "- Plan a pace with no pressure."
    ),
    "normal": (
        "Normal mode:\n"
        "- Split the work into reasonably sized subtasks with a balanced schedule.\n"
        "- Keep the plan efficient without overloading any day.\n"
        "- Pace the work steadily up to the deadline."
    ),
    "hard": (
        "Intense mode:\n"
        "- Break the work into small, precise subtasks so nothing is missed.\n"
        "- Make each step concrete and detailed.\n"
        "- Build a tight, focused schedule that prioritises efficiency."
    ),
}

SYSTEM_PROMPT = (
    "You are an expert at managing projects efficiently. Break the task into suitable subtasks and give "
    "realistic, actionable guidance so it can be finished before the deadline. Analyse any attached files, "
    "images and web pages together and use their concrete details in the plan."
)

RESPONSE_FORMAT_BLOCK = """Respond with JSON only, no commentary, in exactly this shape:
{
  "complexity": "simple|moderate|complex",
  "estimatedTotalTime": 180,
  "priority": "high|medium|low",
  "suggestedSubtasks": [
    {
      "id": "subtask-1",
      "text": "Concrete piece of work",
      "estimatedDuration": 30,
      "priority": "high",
      "order": 1,
      "time": "09:00",
      "date": "YYYY-MM-DD"
    }
  ]
}

Requirements:
- Produce 3-7 subtasks, each concrete and actionable.
- Size the workload to the difficulty setting.
- If there is a deadline, spread the subtasks evenly from today through the deadline day inclusive.
- Follow the user's requirements.
- Order subtasks logically, but prioritise spreading them across dates."""

_FENCED_JSON = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```", re.IGNORECASE)


def default_subtask_id(index: int) -> str:
    return f"ai-subtask-{uuid4().hex[:12]}-{index}"


def local_today() -> date:
    offset = timezone(timedelta(hours=settings.local_utc_offset_hours))
    return datetime.now(offset).date()


def analyze_task(
    main_task_title: str,
    description: str = "",
    deadline: Optional[str] = None,
    file_contents: Optional[List[Dict[str, Any]]] = None,
    web_contents: Optional[List[Dict[str, Any]]] = None,
    user_requirements: str = "",
    difficulty_level: str = "normal",
    user_schedule: Optional[Dict[str, Any]] = None,
    *,
    client: Any = None,
    today: Optional[date] = None,
    id_factory: Optional[IdFactory] = None,
    request_id: Optional[str] = None,
) -> Dict[str, Any]:
    """Generate subtasks for a main task, then place them on the user's calendar."""
    started = perf_counter()
    today = today or local_today()
    id_factory = id_factory or default_subtask_id
    deadline = (deadline or "").strip() or None
    client = client if client is not None else _build_client()
    trace_metadata = {
        "difficulty": difficulty_level,
        "has_deadline": bool(deadline),
        "files": len(file_contents or []),
        "web_pages": len(web_contents or []),
    }

    draft: Optional[TaskAnalysisDraft] = None
    if client is None:
        logger.info("OPENAI_API_KEY missing; using fallback analysis.")
    else:
        user_prompt = build_analysis_prompt(
            main_task_title,
            description=description,
            deadline=deadline,
            file_contents=file_contents,
            web_contents=web_contents,
            user_requirements=user_requirements,
            difficulty_level=difficulty_level,
            today=today,
            client=client,
        )
        try:
            with trace("task.analysis.generate", metadata=trace_metadata, request_id=request_id):
                draft = request_analysis(client, SYSTEM_PROMPT, user_prompt)
        except (openai.OpenAIError, AnalysisParseError, ValidationError) as exc:
            logger.warning("Task analysis failed, using fallback: %s", exc)

    fallback_used = draft is None
    if fallback_used:
        draft = fallback_analysis(main_task_title, today)

    subtasks = [
        {**item.model_dump(), "id": id_factory(index)}
        for index, item in enumerate(draft.suggestedSubtasks)
    ]
    with trace("task.schedule", metadata=trace_metadata, request_id=request_id) as schedule_trace:
        outcome = run_schedule(
            subtasks,
            start_date=today,
            deadline=deadline,
            user_schedule=user_schedule,
            defaults=_schedule_defaults(),
            horizon_days=settings.schedule_horizon_days,
            overrun_tolerance_min=settings.schedule_overrun_tolerance_min,
        )
        if schedule_trace is not None:
            schedule_trace.update(metadata={**trace_metadata, "status": outcome.status})

    assumptions = list(outcome.assumptions)
    if fallback_used:
        assumptions.insert(0, "AI analysis was unavailable; default subtasks were used.")
    if outcome.error:
        assumptions.append(f"Scheduling was skipped ({outcome.error}); suggested dates and times were kept.")

    _record_metrics(outcome, fallback_used, (perf_counter() - started) * 1000)

    total_minutes = draft.estimatedTotalTime or sum(item["estimatedDuration"] for item in subtasks)
    return {
        "complexity": draft.complexity,
        "estimatedTotalTime": total_minutes,
        "priority": draft.priority,
        "suggestedSubtasks": outcome.subtasks,
        "assumptions": assumptions,
        "missingInfo": _missing_info(description, deadline),
        "scheduling": {"status": outcome.status, "error": outcome.error},
        "fallbackUsed": fallback_used,
    }


def build_analysis_prompt(
    main_task_title: str,
    *,
    description: str = "",
    deadline: Optional[str] = None,
    file_contents: Optional[List[Dict[str, Any]]] = None,
    web_contents: Optional[List[Dict[str, Any]]] = None,
    user_requirements: str = "",
    difficulty_level: str = "normal",
    today: date,
    client: Any = None,
) -> str:
    lines = [
        "You are an experienced project manager. Analyse the following task realistically and split it "
        "into concrete execution steps.",
        "",
        f"Task title: {main_task_title}",
    ]
    if description:
        lines.append(f"Description: {description}")
    if deadline:
        lines.append(f"Deadline: {deadline}{_deadline_hint(deadline, today)}")

    for attachment in file_contents or []:
        lines.extend(_attachment_lines("File", attachment.get("fileName") or "attachment", attachment, client))
    for attachment in web_contents or []:
        lines.extend(_attachment_lines("Web page", attachment.get("url") or "link", attachment, client))

    if user_requirements:
        lines.extend(["", f"User requirements: {user_requirements}"])
    guide = DIFFICULTY_GUIDES.get(difficulty_level, DIFFICULTY_GUIDES["normal"])
    lines.extend(["", f"Difficulty: {guide}", "", f"Today's date: {today.isoformat()}", "", RESPONSE_FORMAT_BLOCK])
    return "\n".join(lines)


def request_analysis(client: Any, system_prompt: str, user_prompt: str) -> TaskAnalysisDraft:
    completion = client.chat.completions.create(
        model=settings.openai_model,
        response_format={"type": "json_object"},
        messages=[
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ],
        max_completion_tokens=settings.openai_max_completion_tokens,
    )
    content = completion.choices[0].message.content
    if not content:
        raise AnalysisParseError("Empty response from model")
    return TaskAnalysisDraft.model_validate(extract_json_object(content))


def extract_json_object(text: str) -> Dict[str, Any]:
    """Pull the first JSON object out of a reply that may carry code fences or prose."""
    candidate = text.strip()
    fenced = _FENCED_JSON.search(candidate)
    if fenced:
        candidate = fenced.group(1).strip()
    start, end = candidate.find("{"), candidate.rfind("}")
    if start == -1 or end <= start:
        raise AnalysisParseError("No JSON object found in model reply")
    try:
        payload = json.loads(candidate[start : end + 1])
    except json.JSONDecodeError as exc:
        raise AnalysisParseError(f"Malformed JSON in model reply: {exc.msg}") from exc
    if not isinstance(payload, dict):
        raise AnalysisParseError("Model reply is not a JSON object")
    return payload


def describe_image(client: Any, image_data: str, index: int) -> str:
    """Ask the vision model to describe an attached image; failures become placeholders."""
    try:
        completion = client.chat.completions.create(
            model=settings.openai_model,
            messages=[
                {
                    "role": "user",
                    "content": [
                        {
                            "type": "text",
                            "text": "Briefly describe how this image relates to the project or assignment. "
                            "Spell out any charts, diagrams, schedules or screenshots.",
                        },
                        {"type": "image_url", "image_url": {"url": image_data, "detail": "high"}},
                    ],
                }
            ],
            max_completion_tokens=settings.openai_image_max_tokens,
        )
    except openai.OpenAIError as exc:
        logger.warning("Image %s analysis failed: %s", index + 1, exc)
        return f"[Image {index + 1}: could not be analysed]"
    return completion.choices[0].message.content or f"[Image {index + 1}: analysis returned nothing]"


def fallback_analysis(main_task_title: str, today: date) -> TaskAnalysisDraft:
    day = today.isoformat()
    steps = [
        ("plan the work", 30, "high", "09:00"),
        ("gather material and research", 45, "high", "10:00"),
        ("carry out the work", 60, "medium", "14:00"),
        ("review and wrap up", 15, "medium", "16:00"),
    ]
    return TaskAnalysisDraft(
        complexity="moderate",
        estimatedTotalTime=sum(minutes for _, minutes, _, _ in steps),
        priority="medium",
        suggestedSubtasks=[
            SubtaskDraft(
                text=f"{main_task_title} - {label}",
                estimatedDuration=minutes,
                priority=priority,
                order=position,
                time=start,
                date=day,
            )
            for position, (label, minutes, priority, start) in enumerate(steps, start=1)
        ],
    )


def warmup_llm() -> bool:
    """Run one throwaway analysis so the first real request does not pay connection setup."""
    started = perf_counter()
    client = _build_client()
    if client is None:
        logger.info("LLM warmup skipped: no API key configured")
        return False
    try:
        request_analysis(
            client,
            SYSTEM_PROMPT,
            build_analysis_prompt(
                "Warmup check",
                description="Startup request verifying the LLM connection.",
                user_requirements="Answer quickly.",
                today=local_today(),
            ),
        )
    except (openai.OpenAIError, AnalysisParseError, ValidationError) as exc:
        logger.warning("LLM warmup failed after %.0fms: %s", (perf_counter() - started) * 1000, exc)
        return False
    logger.info("LLM warmup complete in %.0fms", (perf_counter() - started) * 1000)
    return True


def _build_client() -> Any:
    api_key = settings.openai_api_key
    return openai.OpenAI(api_key=api_key) if api_key else None


def _schedule_defaults() -> ScheduleDefaults:
    return ScheduleDefaults.from_ranges(
        settings.schedule_default_working_hours,
        settings.schedule_default_lunch_break,
    )


def _deadline_hint(deadline: str, today: date) -> str:
    try:
        remaining = (date.fromisoformat(deadline.split("T")[0]) - today).days
    except ValueError:
        return ""
    if remaining > 0:
        return f" ({remaining} day(s) left from today)"
    if remaining == 0:
        return " (due today)"
    return f" ({abs(remaining)} day(s) overdue)"


def _attachment_lines(kind: str, label: str, attachment: Dict[str, Any], client: Any) -> List[str]:
    lines = ["", f"=== {kind}: {label} ===", str(attachment.get("text") or "")]
    images = attachment.get("images") or []
    if images:
        lines.append(f"[{len(images)} image(s) attached]")
        if client is not None:
            for index, image in enumerate(images):
                lines.append(f"Image {index + 1}: {describe_image(client, image, index)}")
    return lines


def _missing_info(description: str, deadline: Optional[str]) -> List[str]:
    missing = []
    if not deadline:
        missing.append("No deadline was given; subtasks were packed from today onward.")
    if not (description or "").strip():
        missing.append("No task description was given; subtasks are based on the title only.")
    return missing


def _record_metrics(outcome: ScheduleOutcome, fallback_used: bool, latency_ms: float) -> None:
    metadata = {"status": outcome.status, "fallback_used": fallback_used}
    log_metric("task.analysis.latency_ms", latency_ms, metadata=metadata)
    log_metric("task.analysis.fallback_used", 1 if fallback_used else 0, metadata=metadata)
    log_metric("task.schedule.status", 1 if outcome.applied else 0, metadata=metadata)
    log_metric("task.schedule.placed", outcome.placed_count, metadata=metadata)
    log_metric("task.schedule.unplaced", outcome.unplaced_count, metadata=metadata)
