from datetime import timedelta

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from exam_engine.core.database import create_tables
from exam_engine.core.exceptions import AlreadyCompletedError, NotFoundError, ValidationError
from exam_engine.repositories.sqlalchemy_repository import SqlAlchemyExamRepository
from exam_engine.schemas.exam_attempt import AttemptStatus
from exam_engine.services.achievement_system import AchievementSystem
from exam_engine.utils import as_utc
from tests.helpers import NOW, make_attempt, make_exam, make_question


@pytest.fixture()
def repo(db_session):
    return SqlAlchemyExamRepository(db_session)


@pytest.fixture()
def fk_repo(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'fk.db'}")

    @event.listens_for(engine, "connect")
    def enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    create_tables(bind=engine)
    db = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield SqlAlchemyExamRepository(db)
    db.close()
    engine.dispose()


def stored_exam(repo, exam_id="exam-1", user_id="user-1"):
    return repo.save_exam(make_exam(
        [make_question("q1", topic="optics", difficulty="hard"), make_question("q2")],
        exam_id=exam_id,
        user_id=user_id,
        folder_name="Physics",
    ))


def test_exam_round_trip(repo):
    exam = stored_exam(repo)

    loaded = repo.load_exam("exam-1")

    assert loaded.questions == exam.questions
    assert loaded.folder_name == "Physics"
    assert loaded.question_count == 2
    assert repo.load_exam("missing") is None
    assert set(repo.load_exams(["exam-1", "missing"])) == {"exam-1"}
    assert repo.load_exams([]) == {}


def test_duplicate_exam_id_is_rejected(repo):
    stored_exam(repo)

    with pytest.raises(ValidationError):
        stored_exam(repo)


def test_attempt_round_trip(repo):
    stored_exam(repo)
    attempt = make_attempt("a1", 1, 2, exam_id="exam-1", answers={"q1": "A"}, completed_at=NOW)

    repo.save_attempt(attempt)
    loaded = repo.load_attempt("a1")

    assert loaded.answers == {"q1": "A"}
    assert loaded.performance_by_topic == attempt.performance_by_topic
    assert loaded.status == AttemptStatus.COMPLETED
    assert as_utc(loaded.completed_at) == NOW
    assert repo.find_completed_attempt("exam-1", "user-1").id == "a1"
    assert repo.find_completed_attempt("exam-1", "user-2") is None


def test_second_completed_attempt_hits_unique_index(repo):
    stored_exam(repo)
    repo.save_attempt(make_attempt("a1", 1, 2, exam_id="exam-1"))

    with pytest.raises(AlreadyCompletedError):
        repo.save_attempt(make_attempt("a2", 2, 2, exam_id="exam-1"))

    # session is still usable after the rollback
    assert [a.id for a in repo.load_attempts("user-1")] == ["a1"]


def test_duplicate_attempt_id_is_not_reported_as_completed(repo, session_factory):
    stored_exam(repo, exam_id="exam-1")
    stored_exam(repo, exam_id="exam-2")
    draft = make_attempt("a1", 0, 2, exam_id="exam-1").model_copy(update={"status": AttemptStatus.IN_PROGRESS})
    repo.save_attempt(draft)

    db = session_factory()
    try:
        other = SqlAlchemyExamRepository(db)
        with pytest.raises(IntegrityError):
            other.save_attempt(make_attempt("a1", 2, 2, exam_id="exam-2"))
        assert other.find_completed_attempt("exam-2", "user-1") is None
    finally:
        db.close()


def test_attempt_for_deleted_exam_is_not_found(fk_repo):
    with pytest.raises(NotFoundError):
        fk_repo.save_attempt(make_attempt("a1", 1, 2, exam_id="deleted-exam"))

    assert fk_repo.load_attempt("a1") is None


def test_in_progress_attempts_do_not_block(repo):
    stored_exam(repo)
    draft = make_attempt("a0", 0, 2, exam_id="exam-1").model_copy(update={"status": AttemptStatus.IN_PROGRESS})

    repo.save_attempt(draft)
    repo.save_attempt(make_attempt("a1", 1, 2, exam_id="exam-1"))

    assert [a.id for a in repo.load_attempts("user-1")] == ["a1"]


def test_load_attempts_most_recent_first(repo):
    for i in range(3):
        stored_exam(repo, exam_id=f"exam-{i}")
        repo.save_attempt(make_attempt(f"a{i}", 1, 2, exam_id=f"exam-{i}", completed_at=NOW - timedelta(days=i)))
    stored_exam(repo, exam_id="exam-x", user_id="user-2")
    repo.save_attempt(make_attempt("other", 1, 2, exam_id="exam-x", user_id="user-2"))

    assert [a.id for a in repo.load_attempts("user-1")] == ["a0", "a1", "a2"]


def test_achievements_recorded_once(repo):
    stored_exam(repo)
    system = AchievementSystem(repo)
    attempt = make_attempt("a1", 2, 2, exam_id="exam-1", time_spent=500, completed_at=NOW)
    achievements = system.check_achievements(attempt, total_completed=1)

    assert len(system.record_achievements(achievements)) == 2
    assert system.record_achievements(achievements) == []

    stored = repo.load_achievements("user-1")
    assert sorted(a.type.value for a in stored) == ["first_exam", "perfect_score"]
    assert repo.load_achievements("user-2") == []
