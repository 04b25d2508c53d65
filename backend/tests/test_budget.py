from __future__ import annotations

from datetime import date

import pytest

from app.services.scheduling.budget import (
    count_candidate_days,
    daily_target_minutes,
    first_candidate_day,
    is_weekend,
    next_candidate_day,
)

FRIDAY = date(2025, 1, 3)
SATURDAY = date(2025, 1, 4)
TUESDAY = date(2025, 1, 7)


def test_weekend_detection() -> None:
    assert not is_weekend(FRIDAY)
    assert is_weekend(SATURDAY)
    assert is_weekend(date(2025, 1, 5))


def test_candidate_day_navigation_skips_weekends() -> None:
    assert first_candidate_day(SATURDAY, avoid_weekends=True) == date(2025, 1, 6)
    assert first_candidate_day(SATURDAY, avoid_weekends=False) == SATURDAY
    assert next_candidate_day(FRIDAY, avoid_weekends=True) == date(2025, 1, 6)
    assert next_candidate_day(FRIDAY, avoid_weekends=False) == SATURDAY


def test_friday_to_tuesday_counts_three_weekdays() -> None:
    assert count_candidate_days(FRIDAY, TUESDAY, avoid_weekends=True) == 3
    assert count_candidate_days(FRIDAY, TUESDAY, avoid_weekends=False) == 5


@pytest.mark.parametrize(
    ("start", "end", "expected"),
    [
        (date(2025, 1, 6), date(2025, 1, 6), 1),
        (date(2025, 1, 6), date(2025, 1, 19), 10),
        (SATURDAY, date(2025, 1, 5), 0),
        (date(2025, 1, 1), date(2025, 1, 31), 23),
    ],
)
def test_count_candidate_days_across_weeks(start, end, expected) -> None:
    assert count_candidate_days(start, end, avoid_weekends=True) == expected


def test_count_is_zero_when_deadline_passed() -> None:
    assert count_candidate_days(TUESDAY, FRIDAY, avoid_weekends=False) == 0


def test_target_divides_work_over_remaining_weekdays() -> None:
    assert daily_target_minutes(300, FRIDAY, TUESDAY, avoid_weekends=True) == 100
    assert daily_target_minutes(300, FRIDAY, TUESDAY, avoid_weekends=False) == 60


def test_target_rounds_up() -> None:
    assert daily_target_minutes(100, FRIDAY, TUESDAY, avoid_weekends=True) == 34


def test_target_without_deadline_or_after_deadline_is_whole_remainder() -> None:
    assert daily_target_minutes(450, FRIDAY, None) == 450
    assert daily_target_minutes(450, TUESDAY, FRIDAY) == 450


def test_target_is_clamped_by_daily_limit() -> None:
    assert daily_target_minutes(900, FRIDAY, None, max_daily_minutes=240) == 240
    assert daily_target_minutes(100, FRIDAY, None, max_daily_minutes=240) == 100
