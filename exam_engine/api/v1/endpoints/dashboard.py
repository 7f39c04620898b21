from fastapi import APIRouter, Depends

from exam_engine.api.deps import get_analytics, get_current_user_id, http_error
from exam_engine.core.exceptions import ExamEngineError
from exam_engine.schemas.performance import DashboardStats, PerformanceSnapshot
from exam_engine.schemas.review import ReviewView
from exam_engine.services.analytics import ExamAnalytics

router = APIRouter()


@router.get("/stats", response_model=DashboardStats)
def get_stats(
    user_id: str = Depends(get_current_user_id),
    analytics: ExamAnalytics = Depends(get_analytics),
):
    """Dashboard header stats"""
    return analytics.get_dashboard_stats(user_id)


@router.get("/performance", response_model=PerformanceSnapshot)
def get_performance(
    user_id: str = Depends(get_current_user_id),
    analytics: ExamAnalytics = Depends(get_analytics),
):
    """Performance analytics over all completed attempts"""
    return analytics.get_user_performance(user_id)


@router.get("/review/{attempt_id}", response_model=ReviewView)
def get_review(
    attempt_id: str,
    user_id: str = Depends(get_current_user_id),
    analytics: ExamAnalytics = Depends(get_analytics),
):
    """Per-question review of one attempt"""
    try:
        return analytics.get_attempt_review(attempt_id, user_id)
    except ExamEngineError as e:
        raise http_error(e)
