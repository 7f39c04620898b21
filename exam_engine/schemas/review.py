from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel

from exam_engine.schemas.exam import Difficulty


class ReviewQuestion(BaseModel):
    id: str
    text: str
    options: Dict[str, str]
    topic: str
    difficulty: Difficulty
    user_answer: Optional[str] = None
    is_correct: bool
    # only filled for the owner's completed attempts
    correct_answer: Optional[str] = None
    explanation: Optional[str] = None


class ReviewView(BaseModel):
    """Per-question review of one attempt"""
    attempt_id: str
    exam_id: str
    exam_title: str
    folder_name: str
    completed_at: Optional[datetime] = None
    score: int
    percentage: float
    correct_count: int
    incorrect_count: int
    time_spent_seconds: int
    total_questions: int
    questions: List[ReviewQuestion]
