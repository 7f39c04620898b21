from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from exam_engine.schemas.achievement import Achievement
from exam_engine.schemas.exam import Question


class AttemptStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class TopicScore(BaseModel):
    model_config = ConfigDict(frozen=True)

    correct: int = 0
    total: int = 0


class ExamAttempt(BaseModel):
    """One grading event of an exam by a user"""
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str
    exam_id: str
    user_id: str
    answers: Dict[str, str] = Field(default_factory=dict)
    score: int
    percentage: float
    correct_count: int
    incorrect_count: int
    time_spent_seconds: int
    performance_by_topic: Dict[str, TopicScore] = Field(default_factory=dict)
    status: AttemptStatus = AttemptStatus.COMPLETED
    completed_at: Optional[datetime] = None

    @property
    def total_questions(self) -> int:
        return self.correct_count + self.incorrect_count


class ExamSubmission(BaseModel):
    answers: Dict[str, str]
    time_spent_seconds: int = Field(ge=0)


class GradedQuestion(BaseModel):
    """A question joined with the user's answer"""
    question: Question
    user_answer: Optional[str] = None
    is_correct: bool


class SubmissionResult(BaseModel):
    attempt: ExamAttempt
    questions: List[GradedQuestion]
    achievements: List[Achievement] = Field(default_factory=list)
    current_streak: int = 0
    longest_streak: int = 0
