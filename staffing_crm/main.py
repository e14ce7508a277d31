"""
Staffing CRM - Main Application

FastAPI backend with:
- PostgreSQL (SQLAlchemy ORM) for all records
- JWT authentication with role-based permissions
- Resume upload with PDF/DOCX text extraction
- Rule-based matching of candidates and engineers to projects

Run: uvicorn staffing_crm.main:app --reload
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.orm import Session

from staffing_crm import __version__
from staffing_crm.api.routes import api_router
from staffing_crm.core.config import get_settings
from staffing_crm.core.logging import configure_logging
from staffing_crm.db.database import check_db_connection, get_db, init_db
from staffing_crm.schemas.schemas import HealthResponse
from staffing_crm.utils.file_upload import UPLOAD_URL_PREFIX

logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging and create missing tables on startup."""
    configure_logging()
    init_db()
    logger.info("Staffing CRM %s started", __version__)
    yield


# Create FastAPI app
app = FastAPI(
    title="Staffing CRM",
    description="""
    Internal CRM for a staffing and consulting company.

    ## Features
    - **Authentication**: JWT bearer tokens, four roles with static permissions
    - **Customers & Projects**: pipeline, DevOps and developer-pool projects
    - **Candidates & Engineers**: talent records, resumes, candidate to engineer conversion
    - **Pipelines**: project candidates and project talents with match scores
    - **Matching**: ranked talent for a project with human-readable reasons
    - **Activity, Notifications, Search**: audit trail, mentions, global search
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"detail": "Validation failed", "errors": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# Include API routes
app.include_router(api_router, prefix="/api")

# Serve uploaded resumes
os.makedirs(settings.upload_dir, exist_ok=True)
app.mount(UPLOAD_URL_PREFIX, StaticFiles(directory=settings.upload_dir), name="uploads")


@app.get("/health", response_model=HealthResponse, tags=["Health"])
def health_check(db: Session = Depends(get_db)):
    """Health check with database connectivity."""
    connected = check_db_connection(db)
    return HealthResponse(
        status="healthy" if connected else "degraded",
        database="connected" if connected else "disconnected",
    )
