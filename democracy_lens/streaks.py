"""
Reading streaks and the month calendar shown on the dashboard.

Only the current month counts: the calendar shows it, and the current
streak walks back through it from today. The longest streak is a coarse
estimate (see `longest_streak`), not a scan of the full history.
"""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional
import calendar

from .democracy import ReadingEntry


@dataclass
class CalendarDay:
    day: int
    date: date
    has_activity: bool
    intensity_tier: int
    is_today: bool

    def as_dict(self) -> Dict[str, Any]:
        return {
            "day": self.day,
            "date": self.date.isoformat(),
            "hasActivity": self.has_activity,
            "intensityTier": self.intensity_tier,
            "isToday": self.is_today,
        }


@dataclass
class StreakResult:
    current_streak: int
    longest_streak: int
    days_in_month: List[CalendarDay] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "currentStreak": self.current_streak,
            "longestStreak": self.longest_streak,
            "daysInMonth": [d.as_dict() for d in self.days_in_month],
        }


def intensity_tier(reads: int) -> int:
    if reads <= 0:
        return 0
    if reads >= 5:
        return 3
    if reads >= 3:
        return 2
    return 1


def _local_date(read_at: datetime, tz) -> date:
    if read_at.tzinfo is None:
        read_at = read_at.replace(tzinfo=timezone.utc)
    return read_at.astimezone(tz).date()


def reads_per_day(history: Iterable[ReadingEntry], today: date, tz=None) -> Counter:
    """Count reads per calendar date, current month of `today` only."""
    tz = tz or timezone.utc
    counts: Counter = Counter()
    for entry in history or []:
        d = _local_date(entry.read_at, tz)
        if d.year == today.year and d.month == today.month:
            counts[d] += 1
    return counts


def current_streak(active: Counter, today: date) -> int:
    streak = 0
    day = today
    while active.get(day):
        streak += 1
        day -= timedelta(days=1)
    return streak


def longest_streak(current: int, active_days: int) -> int:
    # Approximation kept from the product: 7 once the month has more than
    # five active days, 5 otherwise, never below the current streak.
    return max(current, 7 if active_days > 5 else 5)


def reading_streak(
    history: Iterable[ReadingEntry],
    today: Optional[date] = None,
    tz=None,
) -> StreakResult:
    tz = tz or timezone.utc
    today = today or datetime.now(tz).date()

    counts = reads_per_day(history, today, tz)
    current = current_streak(counts, today)

    _, month_days = calendar.monthrange(today.year, today.month)
    days = []
    for n in range(1, month_days + 1):
        d = today.replace(day=n)
        reads = counts.get(d, 0)
        days.append(CalendarDay(
            day=n,
            date=d,
            has_activity=reads > 0,
            intensity_tier=intensity_tier(reads),
            is_today=d == today,
        ))

    return StreakResult(
        current_streak=current,
        longest_streak=longest_streak(current, len(counts)),
        days_in_month=days,
    )
