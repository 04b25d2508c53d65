"""Calendar-aware placement of AI-suggested subtasks."""

from app.services.scheduling.config import ScheduleConfig, ScheduleDefaults, parse_schedule_config
from app.services.scheduling.driver import ScheduleOutcome, ScheduleResult, run_schedule, schedule_subtasks
from app.services.scheduling.intervals import Interval, ScheduleConfigError

__all__ = [
    "Interval",
    "ScheduleConfig",
    "ScheduleConfigError",
    "ScheduleDefaults",
    "ScheduleOutcome",
    "ScheduleResult",
    "parse_schedule_config",
    "run_schedule",
    "schedule_subtasks",
]
