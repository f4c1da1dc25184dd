# ========================================
# jobboard/main.py
# ========================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from jobboard import config
from jobboard.database import close_mongo_connection, connect_to_mongo, ensure_indexes
from jobboard.logging_config import configure_logging

# ===========================
# IMPORT ALL ROUTERS
# ===========================

from jobboard.routes.admin import router as admin_router
from jobboard.routes.analytics import router as analytics_router
from jobboard.routes.application import router as application_router
from jobboard.routes.auth import router as auth_router
from jobboard.routes.company import router as company_router
from jobboard.routes.dashboard import router as dashboard_router
from jobboard.routes.job import router as job_router
from jobboard.routes.notification import router as notification_router
from jobboard.routes.password_reset import router as password_reset_router
from jobboard.routes.report import router as report_router
from jobboard.routes.saved_job import router as saved_job_router

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


def create_app(db=None, resume_storage=None) -> FastAPI:
    """
    Build the API.

    With no arguments the lifespan connects to MONGO_URI. Passing ``db``
    (and optionally ``resume_storage``) skips the connection, which is
    how tests and scripts hand in their own handles.
    """
    configure_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.db is None:
            await connect_to_mongo(app)
        await ensure_indexes(app.state.db)
        yield
        await close_mongo_connection(app)

    app = FastAPI(
        title="Local Job Board API",
        description="Job board with anonymized applicant review and admin-approved identity access",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.db = db
    app.state.resume_storage = resume_storage
    app.state.mongo_client = None

    # ===========================
    # CORS MIDDLEWARE
    # ===========================
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(Exception)
    async def unhandled_exception(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    # ===========================
    # REGISTER ROUTERS
    # ===========================
    app.include_router(auth_router)
    app.include_router(password_reset_router)
    app.include_router(saved_job_router)
    app.include_router(job_router)
    app.include_router(application_router)
    app.include_router(company_router)
    app.include_router(dashboard_router)
    app.include_router(notification_router)
    app.include_router(admin_router)
    app.include_router(report_router)
    app.include_router(analytics_router)

    @app.get("/", tags=["Root"])
    async def root():
        return {"status": "Local Job Board API running", "version": VERSION, "documentation": "/docs"}

    @app.get("/health", tags=["Health"])
    async def health_check():
        return {"status": "healthy", "version": VERSION}

    return app


app = create_app()
