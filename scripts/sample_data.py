#!/usr/bin/env python3
"""
Sample data loader
Registers a sample exam for a user and submits one attempt, so the
dashboard endpoints have something to show.
"""

import argparse
import logging

from exam_engine.core.database import SessionLocal, create_tables
from exam_engine.core.exceptions import ExamEngineError
from exam_engine.repositories.sqlalchemy_repository import SqlAlchemyExamRepository
from exam_engine.schemas.exam import ExamCreate, Question
from exam_engine.services.exam_service import ExamService

logger = logging.getLogger("exam_engine.sample_data")

SAMPLE_QUESTIONS = [
    {
        "id": "q_1",
        "text": "What is the time complexity of binary search on a sorted array?",
        "options": {"A": "O(n)", "B": "O(log n)", "C": "O(n log n)", "D": "O(1)"},
        "correct_answer": "B",
        "explanation": "Each comparison halves the remaining search interval.",
        "topic": "Algorithms",
        "difficulty": "easy",
        "source_reference": "lecture-01",
    },
    {
        "id": "q_2",
        "text": "Which data structure gives O(1) average lookup by key?",
        "options": {"A": "Linked list", "B": "Binary heap", "C": "Hash table", "D": "Stack"},
        "correct_answer": "C",
        "explanation": "A hash table maps keys to buckets directly.",
        "topic": "Data Structures",
        "difficulty": "easy",
        "source_reference": "lecture-02",
    },
    {
        "id": "q_3",
        "text": "What does a recursive function need in order to terminate?",
        "options": {"A": "A loop", "B": "A base case", "C": "A global variable", "D": "Tail call optimisation"},
        "correct_answer": "B",
        "explanation": "Without a base case the recursion never stops.",
        "topic": "Recursion",
        "difficulty": "medium",
        "source_reference": "lecture-03",
    },
    {
        "id": "q_4",
        "text": "Which traversal visits a binary search tree's keys in sorted order?",
        "options": {"A": "Pre-order", "B": "Post-order", "C": "Level-order", "D": "In-order"},
        "correct_answer": "D",
        "explanation": "In-order visits left subtree, node, then right subtree.",
        "topic": "Data Structures",
        "difficulty": "hard",
        "source_reference": "lecture-02",
    },
]


def main():
    parser = argparse.ArgumentParser(description='Load a sample exam and attempt')
    parser.add_argument('--user-id', default='demo-user', help='owner of the sample exam')
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    create_tables()

    db = SessionLocal()
    try:
        service = ExamService(SqlAlchemyExamRepository(db))
        exam = service.register_exam(
            ExamCreate(
                title="Sample Exam - Computer Science Basics",
                questions=[Question(**q) for q in SAMPLE_QUESTIONS],
                difficulty="mixed",
                source_note_ids=["lecture-01", "lecture-02", "lecture-03"],
                folder_name="Computer Science",
            ),
            args.user_id,
        )
        result = service.submit_exam(
            exam.id, args.user_id, {"q_1": "B", "q_2": "C", "q_3": "A"}, time_spent_seconds=180
        )
        logger.info(
            f"Sample exam {exam.id}: {result.attempt.correct_count}/{exam.question_count} correct, "
            f"achievements: {[a.type.value for a in result.achievements]}"
        )
        logger.info(f"Start the API with `python run.py` and open /api/v1/performance with X-User-Id: {args.user_id}")
    except ExamEngineError as e:
        logger.error(f"Sample data load failed: {e.message}")
        db.rollback()
    finally:
        db.close()


if __name__ == "__main__":
    main()
