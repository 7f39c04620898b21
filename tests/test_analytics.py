from datetime import timedelta

import pytest

from exam_engine.core.exceptions import ForbiddenError, NotFoundError
from exam_engine.schemas.exam_attempt import AttemptStatus
from exam_engine.services.analytics import ExamAnalytics
from exam_engine.services.performance import UNKNOWN_FOLDER
from tests.helpers import NOW, DummyRepository, make_attempt, make_exam, make_question


def review_setup():
    exam = make_exam(
        [make_question("q1", correct="A"), make_question("q2", correct="B")],
        exam_id="exam-1",
        folder_name="Physics",
        title="Mechanics",
    )
    attempt = make_attempt("a1", 1, 2, exam_id="exam-1", answers={"q1": "A", "q2": "C"})
    return DummyRepository(exams=[exam], attempts=[attempt])


def test_review_for_owner():
    analytics = ExamAnalytics(review_setup())

    review = analytics.get_attempt_review("a1", "user-1")

    assert review.exam_title == "Mechanics"
    assert review.folder_name == "Physics"
    assert review.total_questions == 2
    assert [q.is_correct for q in review.questions] == [True, False]
    assert [q.user_answer for q in review.questions] == ["A", "C"]
    assert review.questions[1].correct_answer == "B"
    assert review.questions[1].explanation == "Explanation for q2"


def test_review_of_someone_elses_attempt_is_forbidden():
    analytics = ExamAnalytics(review_setup())

    with pytest.raises(ForbiddenError):
        analytics.get_attempt_review("a1", "intruder")


def test_review_of_unknown_attempt():
    analytics = ExamAnalytics(review_setup())

    with pytest.raises(NotFoundError):
        analytics.get_attempt_review("missing", "user-1")


def test_review_with_deleted_exam():
    repo = review_setup()
    del repo.exams["exam-1"]

    with pytest.raises(NotFoundError):
        ExamAnalytics(repo).get_attempt_review("a1", "user-1")


def test_review_hides_answer_key_until_completed():
    repo = review_setup()
    repo.attempts["a1"] = repo.attempts["a1"].model_copy(update={"status": AttemptStatus.IN_PROGRESS})

    review = ExamAnalytics(repo).get_attempt_review("a1", "user-1")

    assert all(q.correct_answer is None and q.explanation is None for q in review.questions)
    assert review.questions[0].is_correct


def test_recent_attempts_limited_and_most_recent_first():
    exam = make_exam([make_question("q1")], exam_id="exam-1", folder_name="History")
    attempts = [
        make_attempt(f"a{i}", 1, 1, exam_id="exam-1" if i % 2 else "gone", completed_at=NOW - timedelta(days=i))
        for i in range(12)
    ]
    analytics = ExamAnalytics(DummyRepository(exams=[exam], attempts=attempts))

    recent = analytics.recent_attempts(attempts, {exam.id: exam})

    assert [r.id for r in recent] == [f"a{i}" for i in range(10)]
    assert recent[0].folder_name == UNKNOWN_FOLDER
    assert recent[1].folder_name == "History"
    assert recent[1].question_count == 1
    assert len(analytics.recent_attempts(attempts, {}, limit=3)) == 3


def test_performance_includes_achievements_and_recent_attempts():
    exam = make_exam([make_question("q1")], exam_id="exam-1")
    other = make_attempt("x1", 0, 1, user_id="someone-else")
    repo = DummyRepository(
        exams=[exam],
        attempts=[make_attempt("a1", 1, 1, exam_id="exam-1", answers={"q1": "A"}), other],
    )
    analytics = ExamAnalytics(repo)
    snapshot = analytics.get_user_performance("user-1", now=NOW)

    assert snapshot.total_exams == 1
    assert [r.id for r in snapshot.recent_attempts] == ["a1"]
    assert snapshot.achievements == []


def test_performance_reads_are_repeatable():
    analytics = ExamAnalytics(review_setup())

    assert analytics.get_user_performance("user-1") == analytics.get_user_performance("user-1")


def test_dashboard_stats_round_average():
    attempts = [
        make_attempt("a1", 2, 3, completed_at=NOW - timedelta(days=1)),
        make_attempt("a2", 1, 1, completed_at=NOW),
    ]
    stats = ExamAnalytics(DummyRepository(attempts=attempts)).get_dashboard_stats("user-1", now=NOW)

    # (66.67 + 100) / 2
    assert stats.average_score == 83
    assert stats.total_exams == 2
    assert [r.id for r in stats.recent_exams] == ["a2", "a1"]
