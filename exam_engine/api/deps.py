from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from exam_engine.core.database import get_db
from exam_engine.core.exceptions import ExamEngineError
from exam_engine.repositories.sqlalchemy_repository import SqlAlchemyExamRepository
from exam_engine.services.analytics import ExamAnalytics
from exam_engine.services.exam_service import ExamService


def get_current_user_id(x_user_id: str = Header(None)) -> str:
    """User id forwarded by the authentication layer"""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )
    return x_user_id.strip()


def get_repository(db: Session = Depends(get_db)) -> SqlAlchemyExamRepository:
    return SqlAlchemyExamRepository(db)


def get_exam_service(repository: SqlAlchemyExamRepository = Depends(get_repository)) -> ExamService:
    return ExamService(repository)


def get_analytics(repository: SqlAlchemyExamRepository = Depends(get_repository)) -> ExamAnalytics:
    return ExamAnalytics(repository)


def http_error(error: ExamEngineError) -> HTTPException:
    return HTTPException(status_code=error.status_code, detail=error.message)
