"""FastAPI application entrypoint."""
import logging
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

import app.models  # noqa: F401  register tables on Base.metadata
from app.api import auth, responses, templates, users
from app.core.config import settings
from app.core.database import Base, check_db_health, engine, get_db
from app.core.logging import setup_logging
from app.core.middleware import RequestLoggingMiddleware

setup_logging(settings.LOG_LEVEL, json_logs=settings.is_production)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI):
    logger.info("Starting survey backend (environment: %s)", settings.ENVIRONMENT)
    if not settings.is_production:
        # Production schemas are managed by alembic
        Base.metadata.create_all(bind=engine)
    yield
    logger.info("Shutting down survey backend")


def create_app() -> FastAPI:
    application = FastAPI(
        title="Survey Collection API",
        description="Field survey collection with offline sync and dashboard analytics",
        version="1.0.0",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_middleware(RequestLoggingMiddleware)

    for router in (auth.router, users.router, templates.router, responses.router):
        application.include_router(router, prefix=settings.API_PREFIX)

    @application.get(f"{settings.API_PREFIX}/health", tags=["Health"])
    def health(db: Annotated[Session, Depends(get_db)]):
        if not check_db_health(db):
            return JSONResponse(status_code=503, content={"status": "unavailable", "database": "down"})
        return {"status": "ok", "database": "up"}

    return application


app = create_app()
