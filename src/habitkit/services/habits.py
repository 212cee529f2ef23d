"""Habit statistics: score, streaks, weekday frequency and monthly history.

Every function here is pure. Results are derived from an already loaded
entry list and are cheap enough to recompute on every read. Only entries
whose value is the literal ``"yes"`` count as completions, which means
measurable habits never contribute to these figures.
"""

from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, Optional

from ..errors import ValidationError
from ..models.habit import YES, Habit, HabitEntry, normalize_day

MONTH_ABBREVIATIONS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


@dataclass(frozen=True, slots=True)
class Streak:
    """A maximal run of consecutive completed days."""

    start: date
    end: date
    length: int


@dataclass(frozen=True, slots=True)
class MonthlyCount:
    label: str
    year: int
    month: int
    count: int


def _done_days(entries: Iterable[HabitEntry]) -> list[date]:
    return [normalize_day(e.date) for e in entries if e.value == YES]


def _today(moment: Optional[date | datetime]) -> date:
    return normalize_day(moment) if moment is not None else date.today()


def calculate_score(
    entries: Iterable[HabitEntry], window_days: int, *, now: Optional[date | datetime] = None
) -> int:
    """Percentage of the last ``window_days`` calendar days marked ``yes``.

    The window ends on ``now``'s day and starts ``window_days - 1`` days
    earlier. Rounds half up.
    """

    if isinstance(window_days, bool) or not isinstance(window_days, int) or window_days < 1:
        raise ValidationError(f"window_days must be a positive integer, got {window_days!r}")

    today = _today(now)
    first = today - timedelta(days=window_days - 1)
    done = sum(1 for day in _done_days(entries) if first <= day <= today)
    return min(100, math.floor(done * 100 / window_days + 0.5))


def _runs(days: list[date]) -> list[Streak]:
    """Split ascending days into consecutive runs, in chronological order."""

    if not days:
        return []

    streaks: list[Streak] = []
    start = end = days[0]
    length = 1
    for previous, current in zip(days, days[1:]):
        if (current - previous).days == 1:
            end = current
            length += 1
        else:
            streaks.append(Streak(start=start, end=end, length=length))
            start = end = current
            length = 1
    streaks.append(Streak(start=start, end=end, length=length))
    return streaks


def calculate_streaks(entries: Iterable[HabitEntry]) -> list[Streak]:
    """Every run of consecutive ``yes`` days, longest first.

    Equal lengths keep chronological order.
    """

    streaks = _runs(sorted(_done_days(entries)))
    return sorted(streaks, key=lambda streak: streak.length, reverse=True)


def compute_streaks(
    entries: Iterable[HabitEntry], *, today: Optional[date | datetime] = None
) -> tuple[int, int]:
    """Return (current_streak, longest_streak) from a collection of entries."""

    done = set(_done_days(entries))

    # Current streak: walk backwards from today until a gap.
    current = 0
    cursor = _today(today)
    while cursor in done:
        current += 1
        cursor -= timedelta(days=1)

    longest = max((run.length for run in _runs(sorted(done))), default=0)
    return current, longest


def frequency_by_weekday(entries: Iterable[HabitEntry]) -> list[int]:
    """Count ``yes`` entries per weekday, indexed Sunday=0 .. Saturday=6."""

    counts = [0] * 7
    for day in _done_days(entries):
        counts[day.isoweekday() % 7] += 1
    return counts


def monthly_history(
    entries: Iterable[HabitEntry],
    month_count: int = 6,
    *,
    today: Optional[date | datetime] = None,
) -> list[MonthlyCount]:
    """``yes`` counts for the trailing ``month_count`` months, oldest first.

    The current month is always the last element.
    """

    if isinstance(month_count, bool) or not isinstance(month_count, int) or month_count < 0:
        raise ValidationError(f"month_count must be a non-negative integer, got {month_count!r}")

    anchor = _today(today)
    per_month = Counter((day.year, day.month) for day in _done_days(entries))

    history: list[MonthlyCount] = []
    for offset in range(month_count - 1, -1, -1):
        year, month_index = divmod(anchor.year * 12 + anchor.month - 1 - offset, 12)
        month = month_index + 1
        history.append(
            MonthlyCount(
                label=f"{MONTH_ABBREVIATIONS[month_index]} {year}",
                year=year,
                month=month,
                count=per_month.get((year, month), 0),
            )
        )
    return history


def completion_ratio(habit: Habit, entry: Optional[HabitEntry]) -> float:
    """How complete a day is: 1.0 for ``yes``, value/target for measurements.

    Measurements are not capped, so exceeding the target yields more than 1.0.
    """

    if entry is None:
        return 0.0
    if entry.value == YES:
        return 1.0
    if isinstance(entry.value, float) and entry.value > 0:
        return entry.value / (habit.target or 1)
    return 0.0


def recent_days(
    entries: Iterable[HabitEntry], days: int = 4, *, today: Optional[date | datetime] = None
) -> list[tuple[date, Optional[HabitEntry]]]:
    """The last ``days`` calendar days, newest first, paired with their entry."""

    if isinstance(days, bool) or not isinstance(days, int) or days < 0:
        raise ValidationError(f"days must be a non-negative integer, got {days!r}")

    by_day: dict[date, HabitEntry] = {}
    for entry in entries:
        by_day.setdefault(normalize_day(entry.date), entry)

    anchor = _today(today)
    slots = []
    for offset in range(days):
        day = anchor - timedelta(days=offset)
        slots.append((day, by_day.get(day)))
    return slots


__all__ = [
    "MonthlyCount",
    "Streak",
    "calculate_score",
    "calculate_streaks",
    "completion_ratio",
    "compute_streaks",
    "frequency_by_weekday",
    "monthly_history",
    "recent_days",
]
