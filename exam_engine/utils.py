"""
Small datetime helpers shared by the analytics services
"""

from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional

from exam_engine.schemas.exam_attempt import ExamAttempt

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes (SQLite drops the offset) as UTC"""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def end_of_day(value: datetime) -> datetime:
    """Next UTC midnight after value"""
    value = as_utc(value)
    return datetime(value.year, value.month, value.day, tzinfo=timezone.utc) + timedelta(days=1)


def completed_key(attempt: ExamAttempt) -> datetime:
    # attempts without a completion time sort as the oldest
    return as_utc(attempt.completed_at) or _EPOCH


def sort_recent_first(attempts: Iterable[ExamAttempt]) -> List[ExamAttempt]:
    return sorted(attempts, key=completed_key, reverse=True)


def sort_oldest_first(attempts: Iterable[ExamAttempt]) -> List[ExamAttempt]:
    return sorted(attempts, key=completed_key)
