"""
Exam storage port

Services only talk to storage through this interface.
"""
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional

from exam_engine.schemas.achievement import Achievement
from exam_engine.schemas.exam import Exam
from exam_engine.schemas.exam_attempt import ExamAttempt


class ExamRepository(ABC):

    @abstractmethod
    def load_exam(self, exam_id: str) -> Optional[Exam]:
        pass

    @abstractmethod
    def load_exams(self, exam_ids: Iterable[str]) -> Dict[str, Exam]:
        """Exams by id; ids that no longer exist are left out"""
        pass

    @abstractmethod
    def save_exam(self, exam: Exam) -> Exam:
        pass

    @abstractmethod
    def load_attempt(self, attempt_id: str) -> Optional[ExamAttempt]:
        pass

    @abstractmethod
    def load_attempts(self, user_id: str) -> List[ExamAttempt]:
        """Completed attempts of a user, most recent first"""
        pass

    @abstractmethod
    def find_completed_attempt(self, exam_id: str, user_id: str) -> Optional[ExamAttempt]:
        pass

    @abstractmethod
    def save_attempt(self, attempt: ExamAttempt) -> ExamAttempt:
        """Persist a graded attempt

        Raises AlreadyCompletedError when a completed attempt for the same
        (exam, user) already exists.
        """
        pass

    @abstractmethod
    def upsert_achievement(self, achievement: Achievement) -> bool:
        """Record an achievement once per (user, type); True when newly recorded"""
        pass

    @abstractmethod
    def load_achievements(self, user_id: str) -> List[Achievement]:
        pass
