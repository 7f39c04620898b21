from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class ExamDifficulty(str, Enum):
    """Declared difficulty mix of a whole exam"""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    MIXED = "mixed"


class Question(BaseModel):
    """One multiple-choice exam item (options: label -> text)"""
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str
    text: str
    options: Dict[str, str]
    correct_answer: str
    explanation: str = ""
    topic: str = "General"
    difficulty: Difficulty = Difficulty.MEDIUM
    source_reference: Optional[str] = None


class Exam(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str
    user_id: str
    title: str
    questions: List[Question]
    question_count: int
    difficulty: ExamDifficulty = ExamDifficulty.MIXED
    source_note_ids: List[str] = Field(default_factory=list)
    folder_name: Optional[str] = None
    is_active: bool = True
    created_at: datetime

    @property
    def display_name(self) -> str:
        return self.folder_name or "General"


class ExamCreate(BaseModel):
    """Generated exam handed over by the question generator"""
    id: Optional[str] = None
    title: str
    questions: List[Question]
    difficulty: ExamDifficulty = ExamDifficulty.MIXED
    source_note_ids: List[str] = Field(default_factory=list)
    folder_name: Optional[str] = None


class QuestionForTaking(BaseModel):
    """Question as shown while the exam is being taken (no answer key)"""
    id: str
    text: str
    options: Dict[str, str]
    topic: str
    difficulty: Difficulty


class ExamForTaking(BaseModel):
    id: str
    title: str
    questions: List[QuestionForTaking]
    question_count: int
    difficulty: ExamDifficulty
    folder_name: str
