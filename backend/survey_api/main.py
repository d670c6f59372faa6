"""FastAPI application entry point. Registers middleware, error handlers and the API routers."""

import logging
from datetime import datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from survey_api.config import settings
from survey_api.database import Base, engine
import survey_api.models  # noqa: F401 - registers the models on the metadata
from survey_api.errors import register_exception_handlers
from survey_api.routers import auth, student, survey_responses, surveys, teacher
from survey_api.utils.schema_sync import sync_missing_schema_objects

logging.basicConfig(
    level=getattr(logging, str(settings.LOG_LEVEL).upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Survey Platform API",
    description="Survey authoring, response collection and analysis for teachers and students",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Register all routers
app.include_router(auth.router)
app.include_router(surveys.router)
app.include_router(survey_responses.router)
app.include_router(teacher.router)
app.include_router(student.router)


@app.on_event("startup")
def ensure_schema():
    # Tables missing entirely are created; older tables get their missing columns/indexes.
    Base.metadata.create_all(bind=engine)
    added = sync_missing_schema_objects(engine, Base.metadata)
    if added:
        logger.info("[schema] synchronised %d objects", len(added))


@app.get("/api/health")
def health_check():
    return {
        "status": "ok",
        "timestamp": datetime.utcnow().isoformat(),
        "environment": settings.ENVIRONMENT,
    }
