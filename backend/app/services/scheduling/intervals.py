"""Time-of-day interval arithmetic used by the subtask scheduler."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional

MINUTES_PER_DAY = 24 * 60

_HHMM_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")


class ScheduleConfigError(ValueError):
    """Raised when scheduling input cannot be interpreted."""


@dataclass(frozen=True)
class Interval:
    """Half-open ``[start, end)`` range in minutes since midnight."""

    start: int
    end: int

    @property
    def minutes(self) -> int:
        return self.end - self.start

    def overlaps(self, other: "Interval") -> bool:
        return self.start < other.end and other.start < self.end

    def label(self) -> str:
        return f"{format_hhmm(self.start)}-{format_hhmm(self.end)}"


def parse_hhmm(value: str) -> int:
    """Convert ``"HH:MM"`` into minutes since midnight."""
    match = _HHMM_PATTERN.match(str(value).strip()) if value is not None else None
    if not match:
        raise ScheduleConfigError(f"Invalid time value: {value!r}")
    hours, minutes = int(match.group(1)), int(match.group(2))
    total = hours * 60 + minutes
    if minutes >= 60 or total > MINUTES_PER_DAY:
        raise ScheduleConfigError(f"Invalid time value: {value!r}")
    return total


def format_hhmm(total_minutes: int) -> str:
    hours, minutes = divmod(int(total_minutes), 60)
    return f"{hours:02d}:{minutes:02d}"


def interval_from_strings(start: str, end: str) -> Interval:
    return Interval(parse_hhmm(start), parse_hhmm(end))


def merge_intervals(intervals: Optional[Iterable[Interval]]) -> List[Interval]:
    """
    Collapse overlapping or touching intervals into a sorted, disjoint list.

    Zero-length and inverted intervals are dropped first.
    """
    valid = sorted((iv for iv in intervals or () if iv.end > iv.start), key=lambda iv: iv.start)
    merged: List[Interval] = []
    for interval in valid:
        if merged and interval.start <= merged[-1].end:
            last = merged[-1]
            merged[-1] = Interval(last.start, max(last.end, interval.end))
        else:
            merged.append(interval)
    return merged


def subtract_busy_from_working(
    working: Optional[Iterable[Interval]],
    busy: Optional[Iterable[Interval]],
) -> List[Interval]:
    """Return the parts of ``working`` not covered by any ``busy`` interval."""
    busy_merged = merge_intervals(busy)
    free: List[Interval] = []
    for window in merge_intervals(working):
        fragments = [window]
        for blocked in busy_merged:
            next_fragments: List[Interval] = []
            for fragment in fragments:
                if not fragment.overlaps(blocked):
                    next_fragments.append(fragment)
                    continue
                if blocked.start > fragment.start:
                    next_fragments.append(Interval(fragment.start, blocked.start))
                if blocked.end < fragment.end:
                    next_fragments.append(Interval(blocked.end, fragment.end))
            fragments = next_fragments
        free.extend(fragments)
    return sorted(free, key=lambda iv: iv.start)


def total_minutes(intervals: Iterable[Interval]) -> int:
    return sum(iv.minutes for iv in intervals)
