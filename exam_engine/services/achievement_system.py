"""
Achievement system - streaks and unlockable achievements
perfect_score = 100%, first_exam = first completed attempt, speed_demon = under a minute per question
"""

import logging
from datetime import datetime
from typing import Dict, List, NamedTuple, Optional, Sequence

from exam_engine.core.config import settings
from exam_engine.schemas.achievement import Achievement, AchievementType
from exam_engine.schemas.exam_attempt import ExamAttempt
from exam_engine.services.streaks import StreakStrategy, compute_streaks
from exam_engine.utils import as_utc, sort_recent_first, utcnow

logger = logging.getLogger(__name__)


class ProgressResult(NamedTuple):
    current_streak: int
    longest_streak: int
    achievements: List[Achievement]


class AchievementSystem:
    # Achievement catalog
    ACHIEVEMENTS: Dict[AchievementType, Dict[str, str]] = {
        AchievementType.PERFECT_SCORE: {
            'name': 'Perfect Score!',
            'description': 'Scored 100% on an exam',
        },
        AchievementType.FIRST_EXAM: {
            'name': 'First Steps',
            'description': 'Completed your first exam',
        },
        AchievementType.SPEED_DEMON: {
            'name': 'Speed Demon',
            'description': 'Completed an exam in under 1 minute per question',
        },
    }

    def __init__(self, repository=None, strategy: Optional[StreakStrategy] = None):
        self.repository = repository
        self.strategy = strategy

    def build_achievement(self, achievement_type: AchievementType, attempt: ExamAttempt) -> Achievement:
        info = self.ACHIEVEMENTS[achievement_type]
        return Achievement(
            user_id=attempt.user_id,
            type=achievement_type,
            name=info['name'],
            description=info['description'],
            exam_id=attempt.exam_id,
            earned_at=as_utc(attempt.completed_at) or utcnow(),
        )

    def check_achievements(self, attempt: ExamAttempt, total_completed: int) -> List[Achievement]:
        """Achievements triggered by one attempt

        Args:
            attempt: the newly graded attempt
            total_completed: completed attempts of the user, the new one included
        """
        triggered = []

        if attempt.percentage == 100:
            triggered.append(AchievementType.PERFECT_SCORE)

        if total_completed == 1:
            triggered.append(AchievementType.FIRST_EXAM)

        question_count = attempt.total_questions
        if attempt.time_spent_seconds < question_count * settings.SPEED_SECONDS_PER_QUESTION:
            triggered.append(AchievementType.SPEED_DEMON)

        return [self.build_achievement(t, attempt) for t in triggered]

    def evaluate_progress(
        self,
        history: Sequence[ExamAttempt],
        new_attempt: ExamAttempt,
        previous_longest: int = 0,
        now: Optional[datetime] = None,
    ) -> ProgressResult:
        """Streaks and achievements after a new attempt

        history may or may not already contain new_attempt; it is counted once
        and always treated as the most recent attempt.
        """
        earlier = sort_recent_first(a for a in history if a.id != new_attempt.id)
        ordered = [new_attempt] + earlier

        current, longest = compute_streaks(
            ordered,
            strategy=self.strategy,
            now=now or as_utc(new_attempt.completed_at) or utcnow(),
            previous_longest=previous_longest,
            presorted=True,
        )
        achievements = self.check_achievements(new_attempt, total_completed=len(ordered))
        return ProgressResult(current, longest, achievements)

    def record_achievements(self, achievements: Sequence[Achievement]) -> List[Achievement]:
        """Upsert achievements; returns only the ones the user did not have yet"""
        if self.repository is None:
            raise RuntimeError("AchievementSystem has no repository to record achievements")

        newly_earned = []
        for achievement in achievements:
            if self.repository.upsert_achievement(achievement):
                logger.info(
                    f"Achievement unlocked (user_id={achievement.user_id}, "
                    f"type={achievement.type.value}, exam_id={achievement.exam_id})"
                )
                newly_earned.append(achievement)
        return newly_earned


def evaluate_progress(
    history: Sequence[ExamAttempt],
    new_attempt: ExamAttempt,
    previous_longest: int = 0,
    strategy: Optional[StreakStrategy] = None,
    now: Optional[datetime] = None,
) -> ProgressResult:
    return AchievementSystem(strategy=strategy).evaluate_progress(
        history, new_attempt, previous_longest=previous_longest, now=now
    )
