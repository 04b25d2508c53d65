"""Day-by-day scheduling loop and result assembly."""
from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Literal, Mapping, Optional, Sequence, Tuple

from app.services.scheduling.budget import (
    daily_target_minutes,
    first_candidate_day,
    next_candidate_day,
)
from app.services.scheduling.config import ScheduleConfig, ScheduleDefaults, parse_schedule_config
from app.services.scheduling.intervals import ScheduleConfigError
from app.services.scheduling.placer import Placement, place_on_date, required_minutes
from app.services.scheduling.slots import build_day_slots

logger = logging.getLogger(__name__)

DEFAULT_HORIZON_DAYS = 60
DEFAULT_OVERRUN_TOLERANCE_MIN = 5
FALLBACK_TIME = "09:00"

ScheduleStatus = Literal["scheduled", "partial", "skipped"]


@dataclass
class ScheduleResult:
    subtasks: List[Dict[str, Any]]
    assumptions: List[str] = field(default_factory=list)
    placements: List[Placement] = field(default_factory=list)
    unplaced_count: int = 0


@dataclass
class ScheduleOutcome:
    """Result of a best-effort scheduling run, including the skipped case."""

    status: ScheduleStatus
    subtasks: List[Dict[str, Any]]
    assumptions: List[str] = field(default_factory=list)
    error: Optional[str] = None
    placed_count: int = 0
    unplaced_count: int = 0

    @property
    def applied(self) -> bool:
        return self.status != "skipped"


def order_subtasks(subtasks: Sequence[Mapping[str, Any]]) -> Tuple[Dict[str, Any], ...]:
    """Copy and stable-sort subtasks by ``order``; entries without one keep their position at the end."""
    copies = [dict(item) for item in subtasks or []]
    return tuple(sorted(copies, key=_order_key))


def schedule_subtasks(
    subtasks: Sequence[Mapping[str, Any]],
    config: ScheduleConfig,
    *,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
    overrun_tolerance_min: int = DEFAULT_OVERRUN_TOLERANCE_MIN,
) -> ScheduleResult:
    """Place every subtask on a concrete date and start time, falling back when no room is found."""
    queue = order_subtasks(subtasks)
    placed: Dict[int, Placement] = {}
    assumptions: List[str] = []
    cursor = 0
    deadline_noted = False
    day = first_candidate_day(config.start_date, config.avoid_weekends)

    for _ in range(horizon_days):
        if cursor >= len(queue):
            break
        if config.deadline and day > config.deadline and not deadline_noted:
            assumptions.append(
                f"Not all subtasks fit before the deadline {config.deadline.isoformat()}; "
                f"scheduling continued from {day.isoformat()}."
            )
            deadline_noted = True

        pending = queue[cursor:]
        target = daily_target_minutes(
            sum(required_minutes(item) for item in pending),
            day,
            config.deadline,
            config.avoid_weekends,
            config.max_daily_minutes,
        )
        fill = place_on_date(day, build_day_slots(day, config), pending, target)
        if fill.placements:
            logger.debug(
                "Placed %s subtask(s) on %s (%s/%s min)",
                len(fill.placements),
                day.isoformat(),
                fill.used_minutes,
                target,
            )
            for offset, placement in enumerate(fill.placements):
                placed[cursor + offset] = placement
            cursor += len(fill.placements)
        day = next_candidate_day(day, config.avoid_weekends)

    result = _assemble_result(queue, placed, config)
    result.assumptions[:0] = assumptions
    if result.unplaced_count:
        logger.info(
            "%s subtask(s) could not be placed within %s days; keeping suggested date/time",
            result.unplaced_count,
            horizon_days,
        )
        result.assumptions.append(
            f"{result.unplaced_count} subtask(s) could not be placed within {horizon_days} days "
            "and kept their suggested date and time."
        )
    result.assumptions.extend(_overrun_warnings(result.placements, config, overrun_tolerance_min))
    return result


def run_schedule(
    subtasks: Sequence[Mapping[str, Any]],
    *,
    start_date: date | str,
    deadline: date | str | None,
    user_schedule: Optional[Mapping[str, Any]],
    defaults: Optional[ScheduleDefaults] = None,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
    overrun_tolerance_min: int = DEFAULT_OVERRUN_TOLERANCE_MIN,
) -> ScheduleOutcome:
    """
    Best-effort scheduling for the task-analysis flow.

    Malformed configuration yields a ``skipped`` outcome with the subtasks left as
    supplied; it never raises for bad schedule input.
    """
    try:
        config, config_notes = parse_schedule_config(user_schedule, start_date, deadline, defaults)
    except ScheduleConfigError as exc:
        logger.warning("Scheduling skipped: %s", exc)
        return ScheduleOutcome(
            status="skipped",
            subtasks=list(order_subtasks(subtasks)),
            error=str(exc),
            unplaced_count=len(subtasks or []),
        )

    result = schedule_subtasks(
        subtasks,
        config,
        horizon_days=horizon_days,
        overrun_tolerance_min=overrun_tolerance_min,
    )
    return ScheduleOutcome(
        status="partial" if result.unplaced_count else "scheduled",
        subtasks=result.subtasks,
        assumptions=config_notes + result.assumptions,
        placed_count=len(result.placements),
        unplaced_count=result.unplaced_count,
    )


def _assemble_result(
    queue: Tuple[Dict[str, Any], ...],
    placed: Dict[int, Placement],
    config: ScheduleConfig,
) -> ScheduleResult:
    subtasks: List[Dict[str, Any]] = []
    placements: List[Placement] = []
    unplaced = 0
    for index, item in enumerate(queue):
        entry = dict(item)
        placement = placed.get(index)
        if placement:
            entry["date"] = placement.day.isoformat()
            entry["time"] = placement.time_label
            placements.append(placement)
        else:
            entry["date"] = item.get("date") or config.start_date.isoformat()
            entry["time"] = item.get("time") or FALLBACK_TIME
            unplaced += 1
        subtasks.append(entry)
    return ScheduleResult(subtasks=subtasks, placements=placements, unplaced_count=unplaced)


def _overrun_warnings(
    placements: Sequence[Placement],
    config: ScheduleConfig,
    tolerance: int,
) -> List[str]:
    if not config.max_daily_minutes:
        return []
    per_day: Dict[date, int] = defaultdict(int)
    for placement in placements:
        per_day[placement.day] += placement.minutes
    warnings = []
    for day in sorted(per_day):
        if per_day[day] > config.max_daily_minutes + tolerance:
            warnings.append(
                f"{day.isoformat()} has {per_day[day]} minutes scheduled, above the daily limit "
                f"of {config.max_daily_minutes} minutes."
            )
    return warnings


def _order_key(item: Dict[str, Any]) -> Tuple[int, float]:
    value = item.get("order")
    if isinstance(value, bool) or value is None:
        return (1, 0)
    try:
        return (0, float(value))
    except (TypeError, ValueError):
        return (1, 0)
