from fastapi import FastAPI, Depends
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy import text

from regretless.db.base import get_db
from regretless.core.config import settings
from regretless.core.logging import configure_logging
from regretless.routers import profile as profile_router
from regretless.routers import progress as progress_router
from regretless.routers import sessions as sessions_router
from regretless.routers import engagement as engagement_router
from regretless.routers import rewards as rewards_router
from regretless.core.errors import (
    RegretLessException,
    regretless_exception_handler,
    validation_exception_handler,
    unhandled_exception_handler,
)

configure_logging()

app = FastAPI(
    title="RegretLess API",
    description=(
        "**Points, milestones and rewards for vaping cessation**\n\n"
        "Tracks logged sessions, awards points for healthy actions, grants "
        "milestones and lets users spend points in the reward shop.\n\n"
        "Every request carries the caller's id in the `X-User-Id` header. "
        "All error responses follow the `{code, message, details}` envelope."
    ),
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# --- CORS ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Exception handlers (most specific first) ---
app.add_exception_handler(RegretLessException, regretless_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# --- Routers ---
app.include_router(profile_router.router)
app.include_router(progress_router.router)
app.include_router(sessions_router.router)
app.include_router(engagement_router.router)
app.include_router(rewards_router.router)


@app.get("/health", tags=["health"], summary="Health check")
def health(db: Session = Depends(get_db)):
    """
    Returns `{"status": "ok", "db": "ok"}` when the document store answers.
    Returns HTTP 503 otherwise.
    """
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        return JSONResponse(
            status_code=503,
            content={"status": "error", "db": "unreachable"},
        )
    return {"status": "ok", "db": "ok", "env": settings.APP_ENV}
