from __future__ import annotations

from datetime import date

from app.services.scheduling.config import ScheduleConfig, parse_schedule_config
from app.services.scheduling.intervals import Interval
from app.services.scheduling.slots import build_day_slots


def test_busy_block_and_lunch_are_carved_out() -> None:
    config, _ = parse_schedule_config(
        {"busyByDate": {"2025-01-02": [{"start": "10:00", "end": "11:00"}]}},
        "2025-01-02",
    )

    slots = build_day_slots(date(2025, 1, 2), config)

    assert [slot.label() for slot in slots] == ["09:00-10:00", "11:00-12:00", "13:00-18:00"]


def test_busy_blocks_only_apply_to_their_date() -> None:
    config, _ = parse_schedule_config(
        {"busyByDate": {"2025-01-02": [{"start": "10:00", "end": "11:00"}]}},
        "2025-01-02",
    )

    slots = build_day_slots(date(2025, 1, 3), config)

    assert [slot.label() for slot in slots] == ["09:00-12:00", "13:00-18:00"]


def test_without_lunch_the_whole_working_day_is_free() -> None:
    config = ScheduleConfig(start_date=date(2025, 1, 2), lunch_break=None)

    assert build_day_slots(date(2025, 1, 2), config) == [Interval(540, 1080)]


def test_building_slots_does_not_mutate_busy_map() -> None:
    busy = [Interval(600, 660)]
    config = ScheduleConfig(start_date=date(2025, 1, 2), busy_by_date={"2025-01-02": busy})

    build_day_slots(date(2025, 1, 2), config)
    build_day_slots(date(2025, 1, 2), config)

    assert config.busy_by_date["2025-01-02"] == [Interval(600, 660)]
