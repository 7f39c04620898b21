"""
Exam lifecycle: register generated exams, serve them for taking, grade submissions
"""

import logging
import uuid
from typing import List, Mapping, Optional

from exam_engine.core.exceptions import AlreadyCompletedError, ForbiddenError, NotFoundError, ValidationError
from exam_engine.repositories.base import ExamRepository
from exam_engine.schemas.exam import Exam, ExamCreate, ExamDifficulty, ExamForTaking, QuestionForTaking
from exam_engine.schemas.exam_attempt import ExamAttempt, SubmissionResult
from exam_engine.services.achievement_system import AchievementSystem
from exam_engine.services.generation import ExamGenerator
from exam_engine.services.grading import ensure_not_completed, grade, grade_questions, validate_exam_structure
from exam_engine.services.streaks import StreakStrategy
from exam_engine.utils import utcnow

logger = logging.getLogger(__name__)

MIN_QUESTIONS = 1
MAX_QUESTIONS = 50


class ExamService:

    def __init__(self, repository: ExamRepository, strategy: Optional[StreakStrategy] = None):
        self.repository = repository
        self.achievements = AchievementSystem(repository, strategy=strategy)

    def register_exam(self, payload: ExamCreate, user_id: str) -> Exam:
        """Validate a generated exam and store it for the user"""
        exam = Exam(
            id=payload.id or f"exam_{uuid.uuid4().hex}",
            user_id=user_id,
            title=payload.title or f"Exam - {utcnow():%Y-%m-%d}",
            questions=payload.questions,
            question_count=len(payload.questions),
            difficulty=payload.difficulty,
            source_note_ids=payload.source_note_ids,
            folder_name=payload.folder_name,
            is_active=True,
            created_at=utcnow(),
        )
        validate_exam_structure(exam)
        saved = self.repository.save_exam(exam)
        logger.info(f"Exam registered (exam_id={saved.id}, user_id={user_id}, questions={saved.question_count})")
        return saved

    def generate_exam(
        self,
        generator: ExamGenerator,
        user_id: str,
        source_content: str,
        question_count: int = 10,
        difficulty: ExamDifficulty = ExamDifficulty.MIXED,
        title: Optional[str] = None,
    ) -> Exam:
        if not source_content or not source_content.strip():
            raise ValidationError("No source content to generate an exam from")
        if not MIN_QUESTIONS <= question_count <= MAX_QUESTIONS:
            raise ValidationError(f"Question count must be between {MIN_QUESTIONS} and {MAX_QUESTIONS}")

        payload = generator.generate_exam(
            source_content, question_count=question_count, difficulty=difficulty, title=title
        )
        return self.register_exam(payload, user_id)

    def get_owned_exam(self, exam_id: str, user_id: str) -> Exam:
        exam = self.repository.load_exam(exam_id)
        if exam is None:
            raise NotFoundError(f"Exam {exam_id} not found")
        if exam.user_id != user_id:
            raise ForbiddenError("You do not have access to this exam")
        return exam

    def get_exam_for_taking(self, exam_id: str, user_id: str) -> ExamForTaking:
        """Exam without correct answers and explanations"""
        exam = self.get_owned_exam(exam_id, user_id)
        return ExamForTaking(
            id=exam.id,
            title=exam.title,
            questions=[
                QuestionForTaking(
                    id=q.id,
                    text=q.text,
                    options=dict(q.options),
                    topic=q.topic,
                    difficulty=q.difficulty,
                )
                for q in exam.questions
            ],
            question_count=exam.question_count,
            difficulty=exam.difficulty,
            folder_name=exam.display_name,
        )

    def submit_exam(
        self,
        exam_id: str,
        user_id: str,
        answers: Mapping[str, str],
        time_spent_seconds: int,
    ) -> SubmissionResult:
        """Grade, persist, then evaluate streaks and achievements

        Raises:
            NotFoundError / ForbiddenError: exam missing or not owned by the user
            AlreadyCompletedError: the user already completed this exam
            ValidationError: empty exam or negative time
        """
        exam = self.get_owned_exam(exam_id, user_id)

        existing = self.repository.find_completed_attempt(exam_id, user_id)
        try:
            ensure_not_completed(exam_id, user_id, [existing] if existing else [])
        except AlreadyCompletedError:
            logger.warning(f"Rejected resubmission (exam_id={exam_id}, user_id={user_id})")
            raise

        attempt = grade(exam, answers, time_spent_seconds, user_id=user_id)
        attempt = self.repository.save_attempt(attempt)
        logger.info(
            f"Exam submitted (exam_id={exam_id}, user_id={user_id}, "
            f"score={attempt.score}, percentage={attempt.percentage:.1f})"
        )

        # history is read after the write so it already contains this attempt
        history = self.repository.load_attempts(user_id)
        progress = self.achievements.evaluate_progress(history, attempt)
        newly_earned = self.achievements.record_achievements(progress.achievements)

        return SubmissionResult(
            attempt=attempt,
            questions=grade_questions(exam, attempt.answers),
            achievements=newly_earned,
            current_streak=progress.current_streak,
            longest_streak=progress.longest_streak,
        )

    def list_attempts(self, user_id: str) -> List[ExamAttempt]:
        """Completed attempts, most recent first"""
        return self.repository.load_attempts(user_id)
