from datetime import datetime, timedelta, timezone

from exam_engine.core.exceptions import AlreadyCompletedError
from exam_engine.repositories.base import ExamRepository
from exam_engine.schemas.exam import Exam, Question
from exam_engine.schemas.exam_attempt import AttemptStatus, ExamAttempt, TopicScore

NOW = datetime(2026, 10, 16, 12, 0, tzinfo=timezone.utc)

OPTIONS = {"A": "Option A", "B": "Option B", "C": "Option C", "D": "Option D"}


def make_question(qid, topic="General", difficulty="medium", correct="A"):
    return Question(
        id=qid,
        text=f"Question {qid}",
        options=OPTIONS,
        correct_answer=correct,
        explanation=f"Explanation for {qid}",
        topic=topic,
        difficulty=difficulty,
        source_reference="note-1",
    )


def make_exam(questions, exam_id="exam-1", user_id="user-1", folder_name=None, title="Sample exam"):
    return Exam(
        id=exam_id,
        user_id=user_id,
        title=title,
        questions=questions,
        question_count=len(questions),
        difficulty="mixed",
        source_note_ids=["note-1"],
        folder_name=folder_name,
        created_at=NOW - timedelta(days=30),
    )


def make_attempt(
    attempt_id,
    correct,
    total,
    exam_id=None,
    user_id="user-1",
    completed_at=None,
    time_spent=300,
    topics=None,
    answers=None,
):
    """Attempt with explicit counts; topics defaults to one topic holding all questions"""
    points = correct * 5
    return ExamAttempt(
        id=attempt_id,
        exam_id=exam_id or f"exam-{attempt_id}",
        user_id=user_id,
        answers=answers or {},
        score=points,
        percentage=correct / total * 100,
        correct_count=correct,
        incorrect_count=total - correct,
        time_spent_seconds=time_spent,
        performance_by_topic=topics if topics is not None else {"General": TopicScore(correct=correct, total=total)},
        status=AttemptStatus.COMPLETED,
        completed_at=completed_at or NOW,
    )


def attempts_with_percentages(percentages, start=None, total=10):
    """Chronological attempts one day apart with the given percentages"""
    start = start or NOW - timedelta(days=len(percentages))
    return [
        make_attempt(
            f"a{i}",
            correct=round(p / 100 * total),
            total=total,
            completed_at=start + timedelta(days=i),
        )
        for i, p in enumerate(percentages)
    ]


class DummyRepository(ExamRepository):
    """In-memory ExamRepository that records writes"""

    def __init__(self, exams=None, attempts=None):
        self.exams = {e.id: e for e in (exams or [])}
        self.attempts = {a.id: a for a in (attempts or [])}
        self.achievements = {}
        self.saved_attempts = []
        self.upserts = []

    def load_exam(self, exam_id):
        return self.exams.get(exam_id)

    def load_exams(self, exam_ids):
        return {i: self.exams[i] for i in set(exam_ids) if i in self.exams}

    def save_exam(self, exam):
        self.exams[exam.id] = exam
        return exam

    def load_attempt(self, attempt_id):
        return self.attempts.get(attempt_id)

    def load_attempts(self, user_id):
        rows = [
            a for a in self.attempts.values()
            if a.user_id == user_id and a.status == AttemptStatus.COMPLETED
        ]
        return sorted(rows, key=lambda a: a.completed_at, reverse=True)

    def find_completed_attempt(self, exam_id, user_id):
        for a in self.attempts.values():
            if a.exam_id == exam_id and a.user_id == user_id and a.status == AttemptStatus.COMPLETED:
                return a
        return None

    def save_attempt(self, attempt):
        if self.find_completed_attempt(attempt.exam_id, attempt.user_id):
            raise AlreadyCompletedError("duplicate")
        self.attempts[attempt.id] = attempt
        self.saved_attempts.append(attempt)
        return attempt

    def upsert_achievement(self, achievement):
        self.upserts.append(achievement)
        key = (achievement.user_id, achievement.type)
        if key in self.achievements:
            return False
        self.achievements[key] = achievement
        return True

    def load_achievements(self, user_id):
        return [a for (uid, _), a in self.achievements.items() if uid == user_id]
