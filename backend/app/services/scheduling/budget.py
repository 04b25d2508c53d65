"""Candidate-day arithmetic and deadline-aware daily targets."""
from __future__ import annotations

import math
from datetime import date, timedelta
from typing import Optional

SATURDAY = 5


def is_weekend(day: date) -> bool:
    return day.weekday() >= SATURDAY


def first_candidate_day(day: date, avoid_weekends: bool) -> date:
    while avoid_weekends and is_weekend(day):
        day += timedelta(days=1)
    return day


def next_candidate_day(day: date, avoid_weekends: bool) -> date:
    return first_candidate_day(day + timedelta(days=1), avoid_weekends)


def count_candidate_days(start: date, end: date, avoid_weekends: bool) -> int:
    """Number of candidate days in ``[start, end]``; zero when ``end`` precedes ``start``."""
    if end < start:
        return 0
    span = (end - start).days + 1
    if not avoid_weekends:
        return span
    full_weeks, extra = divmod(span, 7)
    count = full_weeks * 5
    for offset in range(extra):
        if not is_weekend(start + timedelta(days=full_weeks * 7 + offset)):
            count += 1
    return count


def daily_target_minutes(
    remaining_total: int,
    today: date,
    deadline: Optional[date],
    avoid_weekends: bool = False,
    max_daily_minutes: Optional[int] = None,
) -> int:
    """
    Minutes to aim for today so the remaining work spreads evenly up to ``deadline``.

    Without a deadline, or once it has passed, the whole remainder is the target.
    """
    remaining_days = 1
    if deadline is not None:
        remaining_days = max(1, count_candidate_days(today, deadline, avoid_weekends))
    target = math.ceil(max(0, remaining_total) / remaining_days)
    if max_daily_minutes:
        target = min(target, max_daily_minutes)
    return target
