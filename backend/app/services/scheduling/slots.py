"""Per-day free slot construction."""
from __future__ import annotations

from datetime import date
from typing import List

from app.services.scheduling.config import ScheduleConfig
from app.services.scheduling.intervals import Interval, subtract_busy_from_working


def build_day_slots(day: date, config: ScheduleConfig) -> List[Interval]:
    """Working hours minus lunch and the busy intervals declared for ``day``."""
    busy = config.busy_for(day)
    if config.lunch_break:
        busy.append(config.lunch_break)
    return subtract_busy_from_working([config.working_hours], busy)
