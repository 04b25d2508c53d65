"""Greedy placement of queued subtasks into one day's free slots."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Sequence

from app.services.scheduling.intervals import Interval, format_hhmm

MIN_SUBTASK_MINUTES = 5


@dataclass(frozen=True)
class Placement:
    subtask: Dict[str, Any]
    day: date
    start_minute: int
    end_minute: int

    @property
    def minutes(self) -> int:
        return self.end_minute - self.start_minute

    @property
    def time_label(self) -> str:
        return format_hhmm(self.start_minute)


@dataclass
class DayFill:
    day: date
    placements: List[Placement] = field(default_factory=list)
    used_minutes: int = 0


def required_minutes(subtask: Dict[str, Any]) -> int:
    """Minutes a subtask occupies, never less than ``MIN_SUBTASK_MINUTES``."""
    raw = subtask.get("estimatedDuration")
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        try:
            raw = float(raw)
        except (TypeError, ValueError):
            raw = 0
    return max(MIN_SUBTASK_MINUTES, int(raw))


def place_on_date(
    day: date,
    free_slots: Sequence[Interval],
    pending: Sequence[Dict[str, Any]],
    daily_cap_minutes: int,
) -> DayFill:
    """
    Fill ``day`` with the head of ``pending`` until a subtask does not fit.

    Capacity for a candidate slot is the slot width clamped by what is left of
    ``daily_cap_minutes``. The first subtask of the day is only limited by slot
    width, so a single oversized subtask is still placed and reported later.
    Placement stops at the first subtask that fits nowhere; later subtasks are
    not pulled forward. The cursor only moves forward: a subtask goes into the
    first slot at or after the previous one, even when an earlier slot still has
    room for it. Slots before the one used are abandoned so start times
    stay non-decreasing in queue order.
    """
    slots = [slot for slot in free_slots if slot.minutes > 0]
    fill = DayFill(day=day)
    cursor = 0

    for subtask in pending:
        need = required_minutes(subtask)
        remaining_cap = daily_cap_minutes - fill.used_minutes
        chosen = None
        for index in range(cursor, len(slots)):
            capacity = slots[index].minutes
            if fill.placements:
                capacity = min(capacity, remaining_cap)
            if capacity >= need:
                chosen = index
                break
        if chosen is None:
            break

        slot = slots[chosen]
        fill.placements.append(Placement(subtask, day, slot.start, slot.start + need))
        fill.used_minutes += need
        slots[chosen] = Interval(slot.start + need, slot.end)
        cursor = chosen

    return fill
