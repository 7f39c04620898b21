"""
Question generation port
Prompting an LLM lives outside this service; only the shape of its output matters here.
"""
from abc import ABC, abstractmethod
from typing import Optional

from exam_engine.schemas.exam import ExamCreate, ExamDifficulty


class ExamGenerator(ABC):

    @abstractmethod
    def generate_exam(
        self,
        source_content: str,
        question_count: int = 10,
        difficulty: ExamDifficulty = ExamDifficulty.MIXED,
        title: Optional[str] = None,
    ) -> ExamCreate:
        """Turn note text into an exam with multiple-choice questions"""
        pass
