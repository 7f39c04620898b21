import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from exam_engine.api.v1.api import api_router
from exam_engine.core.config import settings
from exam_engine.core.database import create_tables

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_tables()
    logger.info(f"Exam Engine API started (environment={settings.ENVIRONMENT})")
    yield
    logger.info("Exam Engine API stopped")


def create_application() -> FastAPI:
    app = FastAPI(
        title="Exam Engine API",
        description="Exam grading and performance analytics",
        version=VERSION,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router, prefix="/api/v1")

    @app.get("/health")
    def health_check():
        return {"status": "healthy", "version": VERSION, "environment": settings.ENVIRONMENT}

    return app


app = create_application()
