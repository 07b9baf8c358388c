"""
FastAPI Main Application

Entry point for the commute expense API.
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..expenses.exceptions import (
    ConfirmationAborted,
    ExpenseWorkflowError,
    NothingToExport,
    PermissionDenied,
    PersistenceFailure,
    SubmissionNotFound,
    ValidationFailure,
)
from .database import init_db
from .routes import (
    session_router,
    drafts_router,
    submissions_router,
    approvals_router,
)

logger = logging.getLogger(__name__)

# Most specific first
ERROR_STATUS_CODES = [
    (NothingToExport, 404),
    (ValidationFailure, 400),
    (SubmissionNotFound, 404),
    (PersistenceFailure, 502),
    (ConfirmationAborted, 409),
    (PermissionDenied, 403),
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    logger.info("Starting Commute Expense API...")
    if os.getenv("INIT_DB", "true").lower() == "true":
        init_db()
    yield
    # Shutdown
    logger.info("Shutting down Commute Expense API...")


app = FastAPI(
    title="Commute Expense API",
    description="API for commuting expense submission and approval",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS configuration
cors_origins = os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ExpenseWorkflowError)
async def workflow_error_handler(request: Request, exc: ExpenseWorkflowError) -> JSONResponse:
    """Translate workflow errors into JSON responses."""
    status_code = 500
    for error_type, code in ERROR_STATUS_CODES:
        if isinstance(exc, error_type):
            status_code = code
            break

    content = {"detail": exc.message, "code": exc.code}
    if isinstance(exc, ValidationFailure):
        content["field"] = exc.field
        content["line_index"] = exc.line_index

    return JSONResponse(status_code=status_code, content=content)


# Include routers
app.include_router(session_router, prefix="/api")
app.include_router(drafts_router, prefix="/api")
app.include_router(submissions_router, prefix="/api")
app.include_router(approvals_router, prefix="/api")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Commute Expense API",
        "version": "1.0.0",
        "status": "running",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/api")
async def api_info():
    """API information endpoint."""
    return {
        "endpoints": {
            "session": "/api/session",
            "profile": "/api/profile",
            "draft": "/api/draft",
            "submissions": "/api/submissions",
            "approvals": "/api/approvals",
            "export": "/api/approvals/export",
        },
        "authentication": "X-User-ID header required in production",
    }


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))

    uvicorn.run(
        "commute_expense.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=os.getenv("ENVIRONMENT", "development") == "development",
    )
