from datetime import timedelta

import pytest

from exam_engine.services.streaks import (
    CalendarStreak, ThresholdStreak, compute_streaks, get_streak_strategy,
)
from tests.helpers import NOW, attempts_with_percentages, make_attempt


def test_threshold_streak_counts_back_from_latest():
    # oldest first: success, fail, success, success
    attempts = attempts_with_percentages([80, 50, 70, 90])

    current, longest = compute_streaks(attempts, strategy=ThresholdStreak(), now=NOW)

    assert current == 2
    assert longest == 2


def test_threshold_streak_broken_by_latest_failure():
    attempts = attempts_with_percentages([80, 90, 100, 60])

    current, longest = compute_streaks(attempts, strategy=ThresholdStreak(), now=NOW)

    assert current == 0
    assert longest == 3


def test_threshold_boundary_is_inclusive():
    attempts = attempts_with_percentages([70])

    assert compute_streaks(attempts, strategy=ThresholdStreak(), now=NOW) == (1, 1)
    assert compute_streaks(attempts, strategy=ThresholdStreak(threshold=71), now=NOW) == (0, 0)


def test_longest_never_drops_below_previous():
    attempts = attempts_with_percentages([90, 40])

    current, longest = compute_streaks(
        attempts, strategy=ThresholdStreak(), now=NOW, previous_longest=7
    )

    assert current == 0
    assert longest == 7


def test_longest_is_monotonic_as_history_grows():
    percentages = [80, 90, 40, 100, 30, 75, 75, 75, 10]
    previous = 0
    for n in range(1, len(percentages) + 1):
        _, longest = compute_streaks(
            attempts_with_percentages(percentages[:n]),
            strategy=ThresholdStreak(),
            now=NOW,
            previous_longest=previous,
        )
        assert longest >= previous
        previous = longest

    assert previous == 3


def test_empty_history_has_no_streak():
    assert compute_streaks([], strategy=ThresholdStreak(), now=NOW) == (0, 0)
    assert compute_streaks([], strategy=CalendarStreak(), now=NOW) == (0, 0)


def test_calendar_streak_counts_consecutive_days_up_to_today():
    attempts = [
        make_attempt("a1", 1, 10, completed_at=NOW),
        make_attempt("a2", 1, 10, completed_at=NOW - timedelta(hours=3)),
        make_attempt("a3", 1, 10, completed_at=NOW - timedelta(days=1)),
        make_attempt("a4", 1, 10, completed_at=NOW - timedelta(days=2)),
        make_attempt("a5", 1, 10, completed_at=NOW - timedelta(days=10)),
    ]

    current, longest = compute_streaks(attempts, strategy=CalendarStreak(), now=NOW)

    # scores do not matter for calendar streaks
    assert current == 3
    assert longest == 3


def test_calendar_streak_lapses_without_attempt_today():
    attempts = [
        make_attempt("a1", 9, 10, completed_at=NOW - timedelta(days=1)),
        make_attempt("a2", 9, 10, completed_at=NOW - timedelta(days=2)),
    ]

    current, longest = compute_streaks(attempts, strategy=CalendarStreak(), now=NOW)

    assert current == 0
    assert longest == 2


def test_strategy_lookup_by_name():
    assert isinstance(get_streak_strategy("threshold"), ThresholdStreak)
    assert isinstance(get_streak_strategy("Calendar"), CalendarStreak)

    with pytest.raises(ValueError):
        get_streak_strategy("weekly")
