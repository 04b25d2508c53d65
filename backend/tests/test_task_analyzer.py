from __future__ import annotations

import json
from datetime import date
from types import SimpleNamespace
from typing import Any, List

import openai
import pytest

from app.services import task_analyzer
from app.services.task_analyzer import (
    AnalysisParseError,
    analyze_task,
    build_analysis_prompt,
    extract_json_object,
    fallback_analysis,
)

TODAY = date(2025, 1, 6)


class _FakeCompletions:
    def __init__(self, replies: List[Any]):
        self.replies = list(replies)
        self.calls: List[dict] = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=reply))])


class _FakeClient:
    def __init__(self, *replies: Any):
        self.chat = SimpleNamespace(completions=_FakeCompletions(list(replies)))

    @property
    def calls(self) -> List[dict]:
        return self.chat.completions.calls


def _ids(index: int) -> str:
    return f"subtask-{index}"


def _model_reply(**overrides) -> str:
    payload = {
        "complexity": "complex",
        "estimatedTotalTime": 150,
        "priority": "high",
        "suggestedSubtasks": [
            {"id": "x", "text": "Outline chapters", "estimatedDuration": 60, "priority": "high", "order": 1,
             "time": "09:00", "date": "2025-01-06"},
            {"id": "y", "text": "Write draft", "estimatedDuration": 90, "priority": "medium", "order": 2,
             "time": "14:00", "date": "2025-01-07"},
        ],
    }
    payload.update(overrides)
    return json.dumps(payload)


def test_extract_json_object_handles_fences_and_prose() -> None:
    assert extract_json_object('```json\n{"a": 1}\n```') == {"a": 1}
    assert extract_json_object('Here you go: {"a": {"b": 2}} hope it helps') == {"a": {"b": 2}}


@pytest.mark.parametrize("text", ["no json here", "{not: valid}", "```\n[1, 2]\n```"])
def test_extract_json_object_rejects_bad_replies(text) -> None:
    with pytest.raises(AnalysisParseError):
        extract_json_object(text)


def test_analysis_uses_model_reply_and_schedules_it() -> None:
    client = _FakeClient("```json\n" + _model_reply() + "\n```")

    result = analyze_task(
        "Write report",
        description="Quarterly report",
        deadline="2025-01-07",
        user_schedule={"workingHours": {"start": "09:00", "end": "18:00"}, "lunchBreak": None},
        client=client,
        today=TODAY,
        id_factory=_ids,
    )

    assert result["fallbackUsed"] is False
    assert result["complexity"] == "complex"
    assert result["estimatedTotalTime"] == 150
    assert result["scheduling"] == {"status": "scheduled", "error": None}
    subtasks = result["suggestedSubtasks"]
    assert [item["id"] for item in subtasks] == ["subtask-0", "subtask-1"]
    assert [(item["date"], item["time"]) for item in subtasks] == [
        ("2025-01-06", "09:00"),
        ("2025-01-07", "09:00"),
    ]
    assert result["missingInfo"] == []
    request = client.calls[0]
    assert request["response_format"] == {"type": "json_object"}
    assert "Task title: Write report" in request["messages"][1]["content"]


def test_missing_api_key_falls_back_to_default_subtasks(monkeypatch) -> None:
    monkeypatch.setattr(task_analyzer, "_build_client", lambda: None)

    result = analyze_task("Plan trip", today=TODAY, id_factory=_ids)

    assert result["fallbackUsed"] is True
    assert result["assumptions"][0] == "AI analysis was unavailable; default subtasks were used."
    subtasks = result["suggestedSubtasks"]
    assert len(subtasks) == 4
    assert [item["estimatedDuration"] for item in subtasks] == [30, 45, 60, 15]
    assert subtasks[0]["text"] == "Plan trip - plan the work"
    assert all(item["date"] == "2025-01-06" for item in subtasks)
    assert [item["time"] for item in subtasks] == ["09:00", "09:30", "10:15", "11:15"]
    assert len(result["missingInfo"]) == 2


@pytest.mark.parametrize(
    "reply",
    [
        "I cannot help with that.",
        json.dumps({"complexity": "moderate", "suggestedSubtasks": []}),
        openai.OpenAIError("upstream down"),
    ],
)
def test_bad_model_reply_falls_back(reply) -> None:
    result = analyze_task("Plan trip", client=_FakeClient(reply), today=TODAY, id_factory=_ids)

    assert result["fallbackUsed"] is True
    assert len(result["suggestedSubtasks"]) == 4


def test_malformed_schedule_keeps_suggested_times() -> None:
    result = analyze_task(
        "Write report",
        user_schedule={"workingHours": {"start": "late", "end": "later"}},
        client=_FakeClient(_model_reply()),
        today=TODAY,
        id_factory=_ids,
    )

    assert result["scheduling"]["status"] == "skipped"
    assert result["scheduling"]["error"]
    assert [item["time"] for item in result["suggestedSubtasks"]] == ["09:00", "14:00"]
    assert result["assumptions"][-1].startswith("Scheduling was skipped (")


def test_prompt_describes_attachments_and_deadline() -> None:
    client = _FakeClient("A bar chart of weekly sales.")

    prompt = build_analysis_prompt(
        "Write report",
        description="Quarterly report",
        deadline="2025-01-09",
        file_contents=[{"fileName": "notes.txt", "text": "Budget is tight", "images": ["data:image/png;base64,AAA"]}],
        web_contents=[{"url": "https://example.com/guide", "text": "Style guide"}],
        user_requirements="Keep it short",
        difficulty_level="hard",
        today=TODAY,
        client=client,
    )

    assert "Deadline: 2025-01-09 (3 day(s) left from today)" in prompt
    assert "=== File: notes.txt ===" in prompt
    assert "Image 1: A bar chart of weekly sales." in prompt
    assert "=== Web page: https://example.com/guide ===" in prompt
    assert "User requirements: Keep it short" in prompt
    assert "Intense mode" in prompt
    assert "Today's date: 2025-01-06" in prompt


def test_image_description_failure_becomes_placeholder() -> None:
    client = _FakeClient(openai.OpenAIError("vision unavailable"))

    prompt = build_analysis_prompt(
        "Design poster",
        file_contents=[{"fileName": "mock.png", "text": "", "images": ["data:image/png;base64,AAA"]}],
        today=TODAY,
        client=client,
    )

    assert "Image 1: [Image 1: could not be analysed]" in prompt


def test_fallback_analysis_shape() -> None:
    draft = fallback_analysis("Move house", TODAY)

    assert draft.estimatedTotalTime == 150
    assert [item.time for item in draft.suggestedSubtasks] == ["09:00", "10:00", "14:00", "16:00"]
    assert [item.order for item in draft.suggestedSubtasks] == [1, 2, 3, 4]


def test_warmup_without_key_is_skipped(monkeypatch) -> None:
    monkeypatch.setattr(task_analyzer, "_build_client", lambda: None)

    assert task_analyzer.warmup_llm() is False


def test_warmup_with_client_succeeds(monkeypatch) -> None:
    client = _FakeClient(_model_reply())
    monkeypatch.setattr(task_analyzer, "_build_client", lambda: client)

    assert task_analyzer.warmup_llm() is True
    assert len(client.calls) == 1
