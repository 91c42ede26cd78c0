"""Main FastAPI application with modularized routes."""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from exam_api.config import CORS_ORIGINS
from exam_api.database import init_db
from exam_api.logging_setup import setup_console_logging
from exam_api.routes import attempts, auth, questions, test_series, tests, users
from exam_api.services.cleanup_service import schedule_attempt_sweep

setup_console_logging()

app = FastAPI(title="Test Series API")

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Startup events
@app.on_event("startup")
def startup_events() -> None:
    """Initialize database and schedule the expired-attempt sweep on startup."""
    init_db()
    schedule_attempt_sweep()


@app.get("/api/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


# Include routers
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(test_series.router)
app.include_router(tests.router)
app.include_router(questions.router)
app.include_router(attempts.router)
