from exam_engine.models.achievement import UserAchievement
from exam_engine.models.exam import Exam
from exam_engine.models.exam_attempt import ExamAttempt
