"""
Analytics read models for the dashboard
Loads one user's history through the repository and hands it to the aggregator.
"""

import logging
from datetime import datetime
from typing import List, Mapping, Optional, Sequence

from exam_engine.core.config import settings
from exam_engine.core.exceptions import ForbiddenError, NotFoundError
from exam_engine.repositories.base import ExamRepository
from exam_engine.schemas.exam import Exam
from exam_engine.schemas.exam_attempt import AttemptStatus, ExamAttempt
from exam_engine.schemas.performance import DashboardStats, PerformanceSnapshot, RecentAttempt
from exam_engine.schemas.review import ReviewQuestion, ReviewView
from exam_engine.services.grading import is_correct
from exam_engine.services.performance import UNKNOWN_FOLDER, PerformanceAggregator
from exam_engine.services.streaks import StreakStrategy
from exam_engine.utils import sort_recent_first

logger = logging.getLogger(__name__)


class ExamAnalytics:

    def __init__(self, repository: ExamRepository, strategy: Optional[StreakStrategy] = None):
        self.repository = repository
        self.aggregator = PerformanceAggregator(strategy=strategy)

    def _load_history(self, user_id: str):
        attempts = [a for a in self.repository.load_attempts(user_id) if a.status == AttemptStatus.COMPLETED]
        exams = self.repository.load_exams(a.exam_id for a in attempts)
        return attempts, exams

    def recent_attempts(
        self, attempts: Sequence[ExamAttempt], exams: Mapping[str, Exam], limit: Optional[int] = None
    ) -> List[RecentAttempt]:
        """Most recent attempts paired with exam display name and question count"""
        limit = settings.RECENT_ATTEMPTS_LIMIT if limit is None else limit
        recent = []
        for attempt in sort_recent_first(attempts)[:limit]:
            exam = exams.get(attempt.exam_id)
            recent.append(RecentAttempt(
                id=attempt.id,
                exam_id=attempt.exam_id,
                folder_name=exam.display_name if exam else UNKNOWN_FOLDER,
                score=attempt.score,
                percentage=attempt.percentage,
                completed_at=attempt.completed_at,
                time_spent_seconds=attempt.time_spent_seconds,
                question_count=exam.question_count if exam else attempt.total_questions,
            ))
        return recent

    def get_user_performance(self, user_id: str, now: Optional[datetime] = None) -> PerformanceSnapshot:
        attempts, exams = self._load_history(user_id)
        snapshot = self.aggregator.aggregate(attempts, exams, now=now)
        return snapshot.model_copy(update={
            'recent_attempts': self.recent_attempts(attempts, exams),
            'achievements': self.repository.load_achievements(user_id),
        })

    def get_dashboard_stats(self, user_id: str, now: Optional[datetime] = None) -> DashboardStats:
        snapshot = self.get_user_performance(user_id, now=now)
        return DashboardStats(
            total_exams=snapshot.total_exams,
            average_score=round(snapshot.average_score),
            current_streak=snapshot.current_streak,
            longest_streak=snapshot.longest_streak,
            xp_points=snapshot.xp_points,
            level=snapshot.level,
            recent_exams=snapshot.recent_attempts,
            achievements=snapshot.achievements,
        )

    def get_attempt_review(self, attempt_id: str, user_id: str) -> ReviewView:
        """Per-question review of one attempt

        Raises:
            NotFoundError: attempt or its exam does not exist
            ForbiddenError: attempt belongs to another user
        """
        attempt = self.repository.load_attempt(attempt_id)
        if attempt is None:
            raise NotFoundError(f"Exam attempt {attempt_id} not found")
        if attempt.user_id != user_id:
            logger.warning(f"Review of attempt {attempt_id} refused for user {user_id}")
            raise ForbiddenError("You do not have access to this exam attempt")

        exam = self.repository.load_exam(attempt.exam_id)
        if exam is None:
            raise NotFoundError(f"Exam {attempt.exam_id} for attempt {attempt_id} not found")

        reveal = attempt.status == AttemptStatus.COMPLETED
        questions = [
            ReviewQuestion(
                id=question.id,
                text=question.text,
                options=dict(question.options),
                topic=question.topic,
                difficulty=question.difficulty,
                user_answer=attempt.answers.get(question.id),
                is_correct=is_correct(question, attempt.answers),
                correct_answer=question.correct_answer if reveal else None,
                explanation=question.explanation if reveal else None,
            )
            for question in exam.questions
        ]

        return ReviewView(
            attempt_id=attempt.id,
            exam_id=exam.id,
            exam_title=exam.title,
            folder_name=exam.display_name,
            completed_at=attempt.completed_at,
            score=attempt.score,
            percentage=attempt.percentage,
            correct_count=attempt.correct_count,
            incorrect_count=attempt.incorrect_count,
            time_spent_seconds=attempt.time_spent_seconds,
            total_questions=exam.question_count,
            questions=questions,
        )
