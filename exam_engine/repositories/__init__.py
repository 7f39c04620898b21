from exam_engine.repositories.base import ExamRepository
from exam_engine.repositories.sqlalchemy_repository import SqlAlchemyExamRepository
