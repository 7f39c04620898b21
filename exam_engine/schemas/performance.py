from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from exam_engine.schemas.achievement import Achievement


class TopicPerformance(BaseModel):
    """Topic mastery merged over all attempts"""
    topic: str
    correct: int
    total: int
    accuracy: float


class DifficultyScore(BaseModel):
    correct: int = 0
    total: int = 0
    accuracy: float = 0.0


class WeeklyPerformance(BaseModel):
    """One rolling 7-day window"""
    week: str
    start: datetime
    end: datetime
    exams: int = 0
    average_score: float = 0.0


class TimedExam(BaseModel):
    attempt_id: str
    exam_id: str
    folder_name: str
    time_spent_seconds: int
    completed_at: Optional[datetime] = None


class TimeAnalysis(BaseModel):
    average_time_per_question: float = 0.0
    fastest_exam: Optional[TimedExam] = None
    slowest_exam: Optional[TimedExam] = None


class ScoreTrendPoint(BaseModel):
    date: Optional[datetime] = None
    score: float
    folder_name: str


class FolderPerformance(BaseModel):
    folder: str
    attempts: int
    average_score: float
    best_score: float
    average_time_per_question: float
    total_questions: int


class RecentAttempt(BaseModel):
    """Recent attempt paired with its exam's display name"""
    id: str
    exam_id: str
    folder_name: str
    score: int
    percentage: float
    completed_at: Optional[datetime] = None
    time_spent_seconds: int
    question_count: int


class PerformanceSnapshot(BaseModel):
    """Cross-attempt analytics for one user, derived on read"""
    total_exams: int = 0
    average_score: float = 0.0
    total_time_spent: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    xp_points: int = 0
    level: int = 1
    topic_performance: List[TopicPerformance] = Field(default_factory=list)
    difficulty_analysis: Dict[str, DifficultyScore] = Field(default_factory=dict)
    weekly_performance: List[WeeklyPerformance] = Field(default_factory=list)
    time_analysis: TimeAnalysis = Field(default_factory=TimeAnalysis)
    improvement_areas: List[TopicPerformance] = Field(default_factory=list)
    score_trends: List[ScoreTrendPoint] = Field(default_factory=list)
    folder_performance: List[FolderPerformance] = Field(default_factory=list)
    recent_attempts: List[RecentAttempt] = Field(default_factory=list)
    achievements: List[Achievement] = Field(default_factory=list)


class DashboardStats(BaseModel):
    """Dashboard header numbers"""
    total_exams: int
    average_score: float
    current_streak: int
    longest_streak: int
    xp_points: int
    level: int
    recent_exams: List[RecentAttempt] = Field(default_factory=list)
    achievements: List[Achievement] = Field(default_factory=list)
