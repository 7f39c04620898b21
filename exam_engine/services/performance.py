"""
Performance aggregation - cross-attempt analytics for one user
Everything here is derived from the attempt history on read; nothing is stored.
"""

import logging
import math
from datetime import datetime, timedelta
from typing import Dict, List, Mapping, Optional, Sequence

from exam_engine.core.config import settings
from exam_engine.schemas.exam import Difficulty, Exam
from exam_engine.schemas.exam_attempt import AttemptStatus, ExamAttempt
from exam_engine.schemas.performance import (
    DifficultyScore, FolderPerformance, PerformanceSnapshot, ScoreTrendPoint, TimeAnalysis,
    TimedExam, TopicPerformance, WeeklyPerformance,
)
from exam_engine.services.grading import is_correct
from exam_engine.services.streaks import StreakStrategy, compute_streaks, get_streak_strategy
from exam_engine.utils import as_utc, end_of_day, sort_oldest_first, utcnow

logger = logging.getLogger(__name__)

UNKNOWN_FOLDER = "Unknown"


def _accuracy(correct: int, total: int) -> float:
    return correct / total * 100 if total > 0 else 0.0


def legacy_correct_estimate(attempt: ExamAttempt) -> int:
    """Correct answers as older dashboards estimated them from percentage and score"""
    estimate = attempt.percentage / 100 * (attempt.score / settings.POINTS_PER_QUESTION)
    # half-up rounding
    return int(math.floor(estimate + 0.5))


class PerformanceAggregator:

    def __init__(
        self,
        strategy: Optional[StreakStrategy] = None,
        use_legacy_xp: Optional[bool] = None,
    ):
        self.strategy = strategy or get_streak_strategy()
        self.use_legacy_xp = settings.XP_FROM_LEGACY_ESTIMATE if use_legacy_xp is None else use_legacy_xp

    def aggregate(
        self,
        attempts: Sequence[ExamAttempt],
        exams: Mapping[str, Exam],
        now: Optional[datetime] = None,
    ) -> PerformanceSnapshot:
        """Build the performance snapshot

        Args:
            attempts: the user's attempts, any order; only completed ones count
            exams: exam id -> exam for every exam still available
            now: end of the most recent weekly window; defaults to the end of the
                current UTC day so repeated reads on the same day are identical
        """
        if now is None:
            now = utcnow()
            window_end = end_of_day(now)
        else:
            now = window_end = as_utc(now)
        completed = sort_oldest_first(a for a in attempts if a.status == AttemptStatus.COMPLETED)

        missing = sorted({a.exam_id for a in completed if a.exam_id not in exams})
        if missing:
            skipped = sum(1 for a in completed if a.exam_id in missing)
            logger.warning(
                f"Exams missing for {skipped} attempt(s), skipping them in difficulty analysis: {', '.join(missing)}"
            )

        total_exams = len(completed)
        total_time = sum(a.time_spent_seconds for a in completed)
        average_score = sum(a.percentage for a in completed) / total_exams if total_exams else 0.0

        topic_performance = self.topic_performance(completed)
        current_streak, longest_streak = compute_streaks(completed, strategy=self.strategy, now=now)
        xp_points = self.xp_points(completed)

        return PerformanceSnapshot(
            total_exams=total_exams,
            average_score=average_score,
            total_time_spent=total_time,
            current_streak=current_streak,
            longest_streak=longest_streak,
            xp_points=xp_points,
            level=self.level(xp_points),
            topic_performance=topic_performance,
            difficulty_analysis=self.difficulty_analysis(completed, exams),
            weekly_performance=self.weekly_performance(completed, window_end),
            time_analysis=self.time_analysis(completed, exams, total_time),
            improvement_areas=self.improvement_areas(topic_performance),
            score_trends=self.score_trends(completed, exams),
            folder_performance=self.folder_performance(completed, exams),
        )

    def topic_performance(self, attempts: Sequence[ExamAttempt]) -> List[TopicPerformance]:
        """Merge every attempt's per-topic counts"""
        merged: Dict[str, Dict[str, int]] = {}
        for attempt in attempts:
            for topic, stats in attempt.performance_by_topic.items():
                entry = merged.setdefault(topic, {'correct': 0, 'total': 0})
                entry['correct'] += stats.correct
                entry['total'] += stats.total

        return [
            TopicPerformance(
                topic=topic,
                correct=stats['correct'],
                total=stats['total'],
                accuracy=_accuracy(stats['correct'], stats['total']),
            )
            for topic, stats in merged.items()
        ]

    def difficulty_analysis(
        self, attempts: Sequence[ExamAttempt], exams: Mapping[str, Exam]
    ) -> Dict[str, DifficultyScore]:
        """Re-grade each question against the stored answers, bucketed by difficulty"""
        buckets = {d.value: {'correct': 0, 'total': 0} for d in Difficulty}

        for attempt in attempts:
            exam = exams.get(attempt.exam_id)
            if exam is None:
                continue
            for question in exam.questions:
                bucket = buckets[question.difficulty.value]
                bucket['total'] += 1
                if is_correct(question, attempt.answers):
                    bucket['correct'] += 1

        return {
            name: DifficultyScore(
                correct=stats['correct'],
                total=stats['total'],
                accuracy=_accuracy(stats['correct'], stats['total']),
            )
            for name, stats in buckets.items()
        }

    def weekly_performance(self, attempts: Sequence[ExamAttempt], now: datetime) -> List[WeeklyPerformance]:
        """Rolling 7-day windows ending at now, oldest first"""
        windows = settings.WEEKLY_WINDOWS
        weeks = []
        for i in range(windows - 1, -1, -1):
            end = now - timedelta(days=7 * i)
            start = end - timedelta(days=7)
            in_window = [
                a for a in attempts
                if a.completed_at is not None and start < as_utc(a.completed_at) <= end
            ]
            average = sum(a.percentage for a in in_window) / len(in_window) if in_window else 0.0
            weeks.append(WeeklyPerformance(
                week=f"Week {windows - i}",
                start=start,
                end=end,
                exams=len(in_window),
                average_score=average,
            ))
        return weeks

    def time_analysis(
        self, attempts: Sequence[ExamAttempt], exams: Mapping[str, Exam], total_time: int
    ) -> TimeAnalysis:
        if not attempts:
            return TimeAnalysis()

        total_questions = sum(a.total_questions for a in attempts)
        fastest = slowest = attempts[0]
        for attempt in attempts[1:]:
            # strict comparison: ties keep the earliest attempt
            if attempt.time_spent_seconds < fastest.time_spent_seconds:
                fastest = attempt
            if attempt.time_spent_seconds > slowest.time_spent_seconds:
                slowest = attempt

        return TimeAnalysis(
            average_time_per_question=total_time / total_questions if total_questions else 0.0,
            fastest_exam=self._timed(fastest, exams),
            slowest_exam=self._timed(slowest, exams),
        )

    def _timed(self, attempt: ExamAttempt, exams: Mapping[str, Exam]) -> TimedExam:
        return TimedExam(
            attempt_id=attempt.id,
            exam_id=attempt.exam_id,
            folder_name=self.folder_name(attempt, exams),
            time_spent_seconds=attempt.time_spent_seconds,
            completed_at=attempt.completed_at,
        )

    def improvement_areas(self, topics: Sequence[TopicPerformance]) -> List[TopicPerformance]:
        """Weakest topics with enough samples, lowest accuracy first"""
        candidates = [
            t for t in topics
            if t.accuracy < settings.IMPROVEMENT_THRESHOLD and t.total >= settings.IMPROVEMENT_MIN_SAMPLES
        ]
        candidates.sort(key=lambda t: t.accuracy)
        return candidates[:settings.IMPROVEMENT_AREA_LIMIT]

    def xp_points(self, attempts: Sequence[ExamAttempt]) -> int:
        total = 0
        for attempt in attempts:
            correct = legacy_correct_estimate(attempt) if self.use_legacy_xp else attempt.correct_count
            total += correct * settings.XP_PER_CORRECT
        return total

    @staticmethod
    def level(xp_points: int) -> int:
        return xp_points // settings.XP_PER_LEVEL + 1

    @staticmethod
    def folder_name(attempt: ExamAttempt, exams: Mapping[str, Exam]) -> str:
        exam = exams.get(attempt.exam_id)
        return exam.display_name if exam is not None else UNKNOWN_FOLDER

    def score_trends(self, attempts: Sequence[ExamAttempt], exams: Mapping[str, Exam]) -> List[ScoreTrendPoint]:
        return [
            ScoreTrendPoint(
                date=attempt.completed_at,
                score=attempt.percentage,
                folder_name=self.folder_name(attempt, exams),
            )
            for attempt in attempts
        ]

    def folder_performance(
        self, attempts: Sequence[ExamAttempt], exams: Mapping[str, Exam]
    ) -> List[FolderPerformance]:
        stats: Dict[str, Dict[str, float]] = {}
        for attempt in attempts:
            folder = self.folder_name(attempt, exams)
            exam = exams.get(attempt.exam_id)
            entry = stats.setdefault(folder, {
                'attempts': 0, 'total_score': 0.0, 'total_time': 0, 'best_score': 0.0, 'questions': 0,
            })
            entry['attempts'] += 1
            entry['total_score'] += attempt.percentage
            entry['total_time'] += attempt.time_spent_seconds
            entry['best_score'] = max(entry['best_score'], attempt.percentage)
            entry['questions'] += exam.question_count if exam is not None else attempt.total_questions

        return [
            FolderPerformance(
                folder=folder,
                attempts=entry['attempts'],
                average_score=entry['total_score'] / entry['attempts'],
                best_score=entry['best_score'],
                average_time_per_question=entry['total_time'] / entry['questions'] if entry['questions'] else 0.0,
                total_questions=entry['questions'],
            )
            for folder, entry in stats.items()
        ]


def aggregate(
    attempts: Sequence[ExamAttempt],
    exams: Mapping[str, Exam],
    now: Optional[datetime] = None,
    strategy: Optional[StreakStrategy] = None,
) -> PerformanceSnapshot:
    return PerformanceAggregator(strategy=strategy).aggregate(attempts, exams, now=now)
