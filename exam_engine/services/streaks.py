"""
Streak strategies

Two definitions of a streak are in use by the product:
- ThresholdStreak: consecutive successful attempts (percentage >= threshold)
- CalendarStreak: consecutive calendar days with at least one attempt,
  counted only while the run reaches today
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta
from typing import List, Optional, Sequence, Tuple

from exam_engine.core.config import settings
from exam_engine.schemas.exam_attempt import ExamAttempt
from exam_engine.utils import as_utc, sort_recent_first, utcnow


class StreakStrategy(ABC):
    """Computes current and longest streak from attempts sorted most recent first"""

    name = "base"

    @abstractmethod
    def current(self, attempts: Sequence[ExamAttempt], now: datetime) -> int:
        pass

    @abstractmethod
    def longest(self, attempts: Sequence[ExamAttempt]) -> int:
        pass


class ThresholdStreak(StreakStrategy):
    name = "threshold"

    def __init__(self, threshold: Optional[float] = None):
        self.threshold = settings.SUCCESS_THRESHOLD if threshold is None else threshold

    def is_success(self, attempt: ExamAttempt) -> bool:
        return attempt.percentage >= self.threshold

    def current(self, attempts, now):
        streak = 0
        for attempt in attempts:
            if not self.is_success(attempt):
                break
            streak += 1
        return streak

    def longest(self, attempts):
        longest = 0
        run = 0
        for attempt in reversed(attempts):
            if self.is_success(attempt):
                run += 1
                longest = max(longest, run)
            else:
                run = 0
        return longest


class CalendarStreak(StreakStrategy):
    name = "calendar"

    @staticmethod
    def _days(attempts) -> List[date]:
        days = {as_utc(a.completed_at).date() for a in attempts if a.completed_at is not None}
        return sorted(days, reverse=True)

    def current(self, attempts, now):
        days = set(self._days(attempts))
        day = as_utc(now).date()
        streak = 0
        while day in days:
            streak += 1
            day -= timedelta(days=1)
        return streak

    def longest(self, attempts):
        longest = 0
        run = 0
        previous = None
        for day in self._days(attempts):
            if previous is not None and previous - day == timedelta(days=1):
                run += 1
            else:
                run = 1
            longest = max(longest, run)
            previous = day
        return longest


STRATEGIES = {
    ThresholdStreak.name: ThresholdStreak,
    CalendarStreak.name: CalendarStreak,
}


def get_streak_strategy(name: Optional[str] = None) -> StreakStrategy:
    """Strategy selected by STREAK_STRATEGY"""
    key = (name or settings.STREAK_STRATEGY).lower()
    if key not in STRATEGIES:
        raise ValueError(f"Unknown streak strategy: {key}")
    return STRATEGIES[key]()


def compute_streaks(
    attempts: Sequence[ExamAttempt],
    strategy: Optional[StreakStrategy] = None,
    now: Optional[datetime] = None,
    previous_longest: int = 0,
    presorted: bool = False,
) -> Tuple[int, int]:
    """Returns (current_streak, longest_streak); longest never drops below previous_longest

    presorted=True keeps the given order (most recent first) instead of sorting by completed_at.
    """
    strategy = strategy or get_streak_strategy()
    ordered = list(attempts) if presorted else sort_recent_first(attempts)
    current = strategy.current(ordered, now or utcnow())
    longest = max(strategy.longest(ordered), current, previous_longest)
    return current, longest
