"""Schedule configuration model and parsing from the ``userSchedule`` payload."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Tuple

from app.services.scheduling.intervals import (
    Interval,
    ScheduleConfigError,
    interval_from_strings,
)

DEFAULT_WORKING_HOURS = Interval(9 * 60, 18 * 60)
DEFAULT_LUNCH_BREAK = Interval(12 * 60, 13 * 60)


@dataclass(frozen=True)
class ScheduleDefaults:
    working_hours: Interval = DEFAULT_WORKING_HOURS
    lunch_break: Optional[Interval] = DEFAULT_LUNCH_BREAK

    @classmethod
    def from_ranges(cls, working_hours: str, lunch_break: str | None) -> "ScheduleDefaults":
        """Build defaults from ``"HH:MM-HH:MM"`` strings; an empty lunch string disables lunch."""
        return cls(
            working_hours=parse_time_range(working_hours),
            lunch_break=parse_time_range(lunch_break) if lunch_break else None,
        )


@dataclass
class ScheduleConfig:
    start_date: date
    deadline: Optional[date] = None
    working_hours: Interval = DEFAULT_WORKING_HOURS
    lunch_break: Optional[Interval] = DEFAULT_LUNCH_BREAK
    busy_by_date: Dict[str, List[Interval]] = field(default_factory=dict)
    avoid_weekends: bool = False
    max_daily_minutes: Optional[int] = None
    timezone: Optional[str] = None

    def busy_for(self, day: date) -> List[Interval]:
        return list(self.busy_by_date.get(day.isoformat(), []))


def parse_time_range(value: str) -> Interval:
    parts = [segment.strip() for segment in str(value).split("-")]
    if len(parts) != 2:
        raise ScheduleConfigError(f"Invalid time range: {value!r}")
    return interval_from_strings(parts[0], parts[1])


def parse_iso_date(value: Any, field_name: str) -> date:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).split("T")[0])
    except ValueError as exc:
        raise ScheduleConfigError(f"Invalid {field_name}: {value!r}") from exc


def parse_schedule_config(
    user_schedule: Optional[Mapping[str, Any]],
    start_date: date | str,
    deadline: date | str | None = None,
    defaults: Optional[ScheduleDefaults] = None,
) -> Tuple[ScheduleConfig, List[str]]:
    """
    Translate the camelCase ``userSchedule`` object into a ``ScheduleConfig``.

    Returns the config together with human-readable notes about defaults applied.
    A key present with a ``None`` lunch break disables lunch; a missing key falls
    back to the default.
    """
    defaults = defaults or ScheduleDefaults()
    payload = dict(user_schedule or {})
    assumptions: List[str] = []

    working_raw = payload.get("workingHours")
    if working_raw:
        working_hours = _interval_from_payload(working_raw, "workingHours")
    else:
        working_hours = defaults.working_hours
        assumptions.append(f"Working hours not provided; assumed {working_hours.label()}.")

    if "lunchBreak" in payload:
        lunch_raw = payload["lunchBreak"]
        lunch_break = _interval_from_payload(lunch_raw, "lunchBreak") if lunch_raw else None
    else:
        lunch_break = defaults.lunch_break
        if lunch_break:
            assumptions.append(f"Lunch break not provided; assumed {lunch_break.label()}.")

    busy_by_date: Dict[str, List[Interval]] = {}
    for day_key, entries in (payload.get("busyByDate") or {}).items():
        day_iso = parse_iso_date(day_key, "busyByDate key").isoformat()
        busy_by_date.setdefault(day_iso, []).extend(
            _interval_from_payload(entry, f"busyByDate[{day_iso}]") for entry in entries or []
        )

    max_daily = payload.get("maxDailyMinutes")
    if max_daily is not None:
        try:
            max_daily = int(max_daily)
        except (TypeError, ValueError) as exc:
            raise ScheduleConfigError(f"Invalid maxDailyMinutes: {max_daily!r}") from exc
        if max_daily <= 0:
            max_daily = None

    avoid_weekends = payload.get("avoidWeekends")
    if avoid_weekends is None:
        avoid_weekends = False
    elif not isinstance(avoid_weekends, bool):
        raise ScheduleConfigError(f"Invalid avoidWeekends: {avoid_weekends!r}")

    config = ScheduleConfig(
        start_date=parse_iso_date(start_date, "start date"),
        deadline=parse_iso_date(deadline, "deadline") if deadline else None,
        working_hours=working_hours,
        lunch_break=lunch_break,
        busy_by_date=busy_by_date,
        avoid_weekends=avoid_weekends,
        max_daily_minutes=max_daily,
        timezone=payload.get("timezone"),
    )
    return config, assumptions


def _interval_from_payload(raw: Any, field_name: str) -> Interval:
    if isinstance(raw, Interval):
        return raw
    if not isinstance(raw, Mapping) or "start" not in raw or "end" not in raw:
        raise ScheduleConfigError(f"{field_name} must be an object with start and end")
    return interval_from_strings(raw["start"], raw["end"])
