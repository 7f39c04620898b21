from exam_engine.schemas.achievement import Achievement, AchievementType
from exam_engine.schemas.exam import (
    Difficulty, Exam, ExamCreate, ExamDifficulty, ExamForTaking, Question, QuestionForTaking,
)
from exam_engine.schemas.exam_attempt import (
    AttemptStatus, ExamAttempt, ExamSubmission, GradedQuestion, SubmissionResult, TopicScore,
)
from exam_engine.schemas.performance import (
    DashboardStats, DifficultyScore, FolderPerformance, PerformanceSnapshot, RecentAttempt,
    ScoreTrendPoint, TimeAnalysis, TimedExam, TopicPerformance, WeeklyPerformance,
)
from exam_engine.schemas.review import ReviewQuestion, ReviewView
