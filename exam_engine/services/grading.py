"""
Exam grading
Scores one attempt against the exam's answer key. Pure functions, no I/O.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Mapping, Optional

from exam_engine.core.config import settings
from exam_engine.core.exceptions import AlreadyCompletedError, ValidationError
from exam_engine.schemas.exam import Exam, Question
from exam_engine.schemas.exam_attempt import AttemptStatus, ExamAttempt, GradedQuestion, TopicScore

logger = logging.getLogger(__name__)

OPTION_COUNT = 4


def is_correct(question: Question, answers: Mapping[str, str]) -> bool:
    """Exact, case-sensitive label match. Unanswered counts as incorrect."""
    user_answer = answers.get(question.id)
    return user_answer is not None and user_answer == question.correct_answer


def validate_exam_structure(exam: Exam) -> None:
    """Check that a generated exam is complete enough to be graded

    The quality of the questions is not judged, only their shape.
    """
    if not exam.questions:
        raise ValidationError("Exam has no questions")

    if exam.question_count != len(exam.questions):
        raise ValidationError(
            f"question_count ({exam.question_count}) does not match the number of questions ({len(exam.questions)})"
        )

    seen_ids = set()
    for index, question in enumerate(exam.questions, 1):
        if not question.id:
            raise ValidationError(f"Question {index} has no id")
        if question.id in seen_ids:
            raise ValidationError(f"Duplicate question id: {question.id}")
        seen_ids.add(question.id)

        if not question.text or not question.text.strip():
            raise ValidationError(f"Question {question.id} has no text")
        if len(question.options) != OPTION_COUNT:
            raise ValidationError(
                f"Question {question.id} must have exactly {OPTION_COUNT} options, got {len(question.options)}"
            )
        if any(not label or not str(text).strip() for label, text in question.options.items()):
            raise ValidationError(f"Question {question.id} has an empty option")
        if question.correct_answer not in question.options:
            raise ValidationError(
                f"Question {question.id}: correct answer '{question.correct_answer}' is not one of its options"
            )


def ensure_not_completed(exam_id: str, user_id: str, attempts: Iterable[ExamAttempt]) -> None:
    """Reject a resubmission against an exam the user already completed"""
    for attempt in attempts:
        if (
            attempt.exam_id == exam_id
            and attempt.user_id == user_id
            and attempt.status == AttemptStatus.COMPLETED
        ):
            raise AlreadyCompletedError(f"Exam {exam_id} already completed (attempt {attempt.id})")


def grade_questions(exam: Exam, answers: Mapping[str, str]) -> List[GradedQuestion]:
    """Join every question with the stored answer"""
    return [
        GradedQuestion(
            question=question,
            user_answer=answers.get(question.id),
            is_correct=is_correct(question, answers),
        )
        for question in exam.questions
    ]


def grade(
    exam: Exam,
    answers: Mapping[str, str],
    time_spent_seconds: int,
    user_id: Optional[str] = None,
    completed_at: Optional[datetime] = None,
    attempt_id: Optional[str] = None,
) -> ExamAttempt:
    """Grade one submission

    Args:
        exam: the exam being answered
        answers: question id -> chosen label, may leave questions out
        time_spent_seconds: time the user spent, must not be negative
        user_id: submitting user, defaults to the exam owner

    Returns:
        completed ExamAttempt

    Raises:
        ValidationError: malformed exam or negative time
    """
    validate_exam_structure(exam)
    if time_spent_seconds is None or time_spent_seconds < 0:
        raise ValidationError("time_spent_seconds must be >= 0")

    correct_count = 0
    incorrect_count = 0
    by_topic: Dict[str, Dict[str, int]] = {}

    for question in exam.questions:
        correct = is_correct(question, answers)
        if correct:
            correct_count += 1
        else:
            incorrect_count += 1

        topic_stats = by_topic.setdefault(question.topic, {"correct": 0, "total": 0})
        topic_stats["total"] += 1
        if correct:
            topic_stats["correct"] += 1

    total_questions = len(exam.questions)
    score = correct_count * settings.POINTS_PER_QUESTION
    percentage = correct_count / total_questions * 100

    attempt = ExamAttempt(
        id=attempt_id or uuid.uuid4().hex,
        exam_id=exam.id,
        user_id=user_id or exam.user_id,
        answers=dict(answers),
        score=score,
        percentage=percentage,
        correct_count=correct_count,
        incorrect_count=incorrect_count,
        time_spent_seconds=time_spent_seconds,
        performance_by_topic={topic: TopicScore(**stats) for topic, stats in by_topic.items()},
        status=AttemptStatus.COMPLETED,
        completed_at=completed_at or datetime.now(timezone.utc),
    )

    logger.debug(
        f"Graded exam {exam.id} for user {attempt.user_id}: "
        f"{correct_count}/{total_questions} ({percentage:.1f}%)"
    )
    return attempt
