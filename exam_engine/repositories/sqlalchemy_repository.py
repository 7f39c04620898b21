"""
SqlAlchemyExamRepository - ExamRepository backed by SQLAlchemy ORM models
"""
import logging
from typing import Dict, Iterable, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from exam_engine.core.exceptions import AlreadyCompletedError, NotFoundError, ValidationError
from exam_engine.models.achievement import UserAchievement
from exam_engine.models.exam import Exam as ExamModel
from exam_engine.models.exam_attempt import ExamAttempt as ExamAttemptModel
from exam_engine.repositories.base import ExamRepository
from exam_engine.schemas.achievement import Achievement, AchievementType
from exam_engine.schemas.exam import Exam, Question
from exam_engine.schemas.exam_attempt import AttemptStatus, ExamAttempt, TopicScore
from exam_engine.utils import utcnow

logger = logging.getLogger(__name__)


def _to_exam(row: ExamModel) -> Exam:
    return Exam(
        id=row.id,
        user_id=row.user_id,
        title=row.title,
        questions=[Question(**q) for q in (row.questions or [])],
        question_count=row.question_count,
        difficulty=row.difficulty,
        source_note_ids=row.source_note_ids or [],
        folder_name=row.folder_name,
        is_active=row.is_active,
        created_at=row.created_at or utcnow(),
    )


def _to_attempt(row: ExamAttemptModel) -> ExamAttempt:
    return ExamAttempt(
        id=row.id,
        exam_id=row.exam_id,
        user_id=row.user_id,
        answers=row.answers or {},
        score=row.score,
        percentage=row.percentage,
        correct_count=row.correct_count,
        incorrect_count=row.incorrect_count,
        time_spent_seconds=row.time_spent_seconds or 0,
        performance_by_topic={
            topic: TopicScore(**stats) for topic, stats in (row.performance_by_topic or {}).items()
        },
        status=row.status,
        completed_at=row.completed_at,
    )


def _to_achievement(row: UserAchievement) -> Achievement:
    return Achievement(
        user_id=row.user_id,
        type=AchievementType(row.achievement_type),
        name=row.achievement_name,
        description=row.achievement_description or "",
        exam_id=row.exam_id,
        earned_at=row.earned_at or utcnow(),
    )


class SqlAlchemyExamRepository(ExamRepository):

    def __init__(self, db: Session):
        self.db = db

    def load_exam(self, exam_id):
        row = self.db.query(ExamModel).filter(ExamModel.id == exam_id).first()
        return _to_exam(row) if row else None

    def load_exams(self, exam_ids: Iterable[str]) -> Dict[str, Exam]:
        ids = list(set(exam_ids))
        if not ids:
            return {}
        rows = self.db.query(ExamModel).filter(ExamModel.id.in_(ids)).all()
        return {row.id: _to_exam(row) for row in rows}

    def save_exam(self, exam: Exam) -> Exam:
        row = ExamModel(
            id=exam.id,
            user_id=exam.user_id,
            title=exam.title,
            folder_name=exam.folder_name,
            questions=[q.model_dump(mode="json") for q in exam.questions],
            question_count=exam.question_count,
            difficulty=exam.difficulty.value,
            source_note_ids=list(exam.source_note_ids),
            is_active=exam.is_active,
            created_at=exam.created_at,
        )
        try:
            self.db.add(row)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ValidationError(f"Exam {exam.id} already exists")
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to save exam (exam_id={exam.id}): {e}")
            raise
        self.db.refresh(row)
        return _to_exam(row)

    def load_attempt(self, attempt_id):
        row = self.db.query(ExamAttemptModel).filter(ExamAttemptModel.id == attempt_id).first()
        return _to_attempt(row) if row else None

    def load_attempts(self, user_id: str) -> List[ExamAttempt]:
        rows = self.db.query(ExamAttemptModel).filter(
            ExamAttemptModel.user_id == user_id,
            ExamAttemptModel.status == AttemptStatus.COMPLETED.value,
        ).order_by(
            ExamAttemptModel.completed_at.desc()
        ).all()
        return [_to_attempt(row) for row in rows]

    def find_completed_attempt(self, exam_id, user_id) -> Optional[ExamAttempt]:
        row = self.db.query(ExamAttemptModel).filter(
            ExamAttemptModel.exam_id == exam_id,
            ExamAttemptModel.user_id == user_id,
            ExamAttemptModel.status == AttemptStatus.COMPLETED.value,
        ).first()
        return _to_attempt(row) if row else None

    def save_attempt(self, attempt: ExamAttempt) -> ExamAttempt:
        row = ExamAttemptModel(
            id=attempt.id,
            exam_id=attempt.exam_id,
            user_id=attempt.user_id,
            answers=dict(attempt.answers),
            score=attempt.score,
            percentage=attempt.percentage,
            correct_count=attempt.correct_count,
            incorrect_count=attempt.incorrect_count,
            time_spent_seconds=attempt.time_spent_seconds,
            performance_by_topic={t: s.model_dump() for t, s in attempt.performance_by_topic.items()},
            status=attempt.status.value,
            completed_at=attempt.completed_at,
        )
        try:
            self.db.add(row)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            # look at what is stored now; SQLite does not name the violated index
            if (
                attempt.status == AttemptStatus.COMPLETED
                and self.find_completed_attempt(attempt.exam_id, attempt.user_id) is not None
            ):
                raise AlreadyCompletedError(f"Exam {attempt.exam_id} already completed")
            if self.load_exam(attempt.exam_id) is None:
                raise NotFoundError(f"Exam {attempt.exam_id} not found")
            logger.error(f"Failed to save attempt (attempt_id={attempt.id}, exam_id={attempt.exam_id}): {e}")
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to save attempt (exam_id={attempt.exam_id}, user_id={attempt.user_id}): {e}")
            raise
        self.db.refresh(row)
        return _to_attempt(row)

    def upsert_achievement(self, achievement: Achievement) -> bool:
        existing = self.db.query(UserAchievement).filter(
            UserAchievement.user_id == achievement.user_id,
            UserAchievement.achievement_type == achievement.type.value,
        ).first()
        if existing:
            return False

        row = UserAchievement(
            user_id=achievement.user_id,
            achievement_type=achievement.type.value,
            achievement_name=achievement.name,
            achievement_description=achievement.description,
            exam_id=achievement.exam_id,
            earned_at=achievement.earned_at,
        )
        try:
            self.db.add(row)
            self.db.commit()
        except IntegrityError:
            # recorded concurrently, still only once
            self.db.rollback()
            return False
        return True

    def load_achievements(self, user_id: str) -> List[Achievement]:
        rows = self.db.query(UserAchievement).filter(
            UserAchievement.user_id == user_id
        ).order_by(
            UserAchievement.earned_at.desc()
        ).all()
        return [_to_achievement(row) for row in rows]
