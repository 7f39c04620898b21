from typing import List

from fastapi import APIRouter, Depends, status

from exam_engine.api.deps import get_current_user_id, get_exam_service, http_error
from exam_engine.core.exceptions import ExamEngineError
from exam_engine.schemas.exam import Exam, ExamCreate, ExamForTaking
from exam_engine.schemas.exam_attempt import ExamAttempt, ExamSubmission, SubmissionResult
from exam_engine.services.exam_service import ExamService

router = APIRouter()


@router.post("/", response_model=Exam, status_code=status.HTTP_201_CREATED)
def register_exam(
    payload: ExamCreate,
    user_id: str = Depends(get_current_user_id),
    service: ExamService = Depends(get_exam_service),
):
    """Store an exam produced by the question generator"""
    try:
        return service.register_exam(payload, user_id)
    except ExamEngineError as e:
        raise http_error(e)


@router.get("/attempts", response_model=List[ExamAttempt])
def list_attempts(
    user_id: str = Depends(get_current_user_id),
    service: ExamService = Depends(get_exam_service),
):
    """Completed attempts of the current user"""
    return service.list_attempts(user_id)


@router.get("/{exam_id}", response_model=ExamForTaking)
def get_exam(
    exam_id: str,
    user_id: str = Depends(get_current_user_id),
    service: ExamService = Depends(get_exam_service),
):
    """Exam for taking (answer key removed)"""
    try:
        return service.get_exam_for_taking(exam_id, user_id)
    except ExamEngineError as e:
        raise http_error(e)


@router.post("/{exam_id}/submit", response_model=SubmissionResult)
def submit_exam(
    exam_id: str,
    submission: ExamSubmission,
    user_id: str = Depends(get_current_user_id),
    service: ExamService = Depends(get_exam_service),
):
    """Grade a submission"""
    try:
        return service.submit_exam(
            exam_id, user_id, submission.answers, submission.time_spent_seconds
        )
    except ExamEngineError as e:
        raise http_error(e)
