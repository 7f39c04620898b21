from fastapi import APIRouter

from exam_engine.api.v1.endpoints import dashboard, exams

api_router = APIRouter()

api_router.include_router(exams.router, prefix="/exams", tags=["exams"])
api_router.include_router(dashboard.router, tags=["dashboard"])
