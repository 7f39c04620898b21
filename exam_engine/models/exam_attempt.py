from sqlalchemy import Column, DateTime, Float, ForeignKey, Index, Integer, JSON, String, text
from sqlalchemy.orm import relationship

from exam_engine.core.database import Base


class ExamAttempt(Base):
    __tablename__ = "exam_attempts"

    id = Column(String(64), primary_key=True)
    exam_id = Column(String(64), ForeignKey("exams.id"), nullable=False)
    user_id = Column(String(64), nullable=False, index=True)

    answers = Column(JSON, nullable=False, default=dict)
    score = Column(Integer, nullable=False)
    percentage = Column(Float, nullable=False)
    correct_count = Column(Integer, nullable=False)
    incorrect_count = Column(Integer, nullable=False)
    time_spent_seconds = Column(Integer, nullable=False, default=0)
    performance_by_topic = Column(JSON, nullable=False, default=dict)

    status = Column(String(16), nullable=False, default="completed")
    completed_at = Column(DateTime(timezone=True))

    exam = relationship("Exam", back_populates="attempts")

    __table_args__ = (
        # one completed attempt per (exam, user)
        Index(
            "uq_exam_attempts_completed",
            "exam_id",
            "user_id",
            unique=True,
            postgresql_where=text("status = 'completed'"),
            sqlite_where=text("status = 'completed'"),
        ),
    )
