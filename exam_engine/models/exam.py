from sqlalchemy import Boolean, Column, DateTime, Integer, JSON, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from exam_engine.core.database import Base


class Exam(Base):
    __tablename__ = "exams"

    id = Column(String(64), primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    folder_name = Column(String(255))

    # list of question dicts, see schemas.exam.Question
    questions = Column(JSON, nullable=False)
    question_count = Column(Integer, nullable=False)
    difficulty = Column(String(16), nullable=False, default="mixed")
    source_note_ids = Column(JSON, nullable=False, default=list)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    attempts = relationship("ExamAttempt", back_populates="exam")
