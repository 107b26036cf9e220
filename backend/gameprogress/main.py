"""
Game Progress Backend - FastAPI Application Entry Point.

This is the main application module that:
1. Initializes the FastAPI app with CORS middleware
2. Sets up structured JSON logging
3. Implements request ID middleware (X-Request-ID header)
4. Maps service errors to JSON error responses
5. Registers all API route handlers
6. Provides health check endpoint

The application follows a modular architecture:
- routes/: API endpoint handlers
- models/: SQLAlchemy ORM models
- services/: Business logic (student store, session processing, badges)
- logging_config.py: Structured logging configuration
- database.py: Database connection management
"""

import time
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from gameprogress.config import CORS_ORIGINS, DATABASE_URL
from gameprogress.errors import ServiceError, BadRequest
from gameprogress.logging_config import (
    setup_logging, get_logger, log_with_context,
    request_id_var, generate_request_id
)
from gameprogress.routes import students, admin, sessions, leaderboard, games
from gameprogress.database import create_tables

# Import all models so they are registered with Base.metadata
from gameprogress.models.student import Student
from gameprogress.models.badge import Badge

# ──────────────────────────────────────────────────────────────
# Initialize structured logging BEFORE anything else
# ──────────────────────────────────────────────────────────────
setup_logging()
logger = get_logger("http")

# Auto-create tables for SQLite local development
if DATABASE_URL.startswith("sqlite"):
    logger.info("Using SQLite, creating tables directly")
    create_tables()

# ──────────────────────────────────────────────────────────────
# Create FastAPI application
# ──────────────────────────────────────────────────────────────
app = FastAPI(
    title="Game Progress Backend",
    description=(
        "Tracks student progress for the learning minigames: profiles, "
        "session results, high scores, play time and badges."
    ),
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# ──────────────────────────────────────────────────────────────
# CORS Middleware
#
# The game console and admin page are static files served from another
# origin, so every route must answer cross-origin requests.
# ──────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"]
)


# ──────────────────────────────────────────────────────────────
# Request ID Middleware
#
# Generates a unique UUID per incoming request and:
# 1. Stores it in a context variable (available to all log entries)
# 2. Returns it in the X-Request-ID response header
# 3. Logs request start/end with latency measurement
# ──────────────────────────────────────────────────────────────
@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    """
    Middleware that generates a unique request ID for every HTTP request.

    This enables end-to-end request tracing across all log entries.
    """
    req_id = generate_request_id()
    request_id_var.set(req_id)

    start_time = time.time()

    log_with_context(logger, "INFO",
        f"Request started: {request.method} {request.url.path}",
        context={"request_id": req_id},
        extra_data={
            "ip": request.client.host if request.client else "unknown",
            "user_agent": request.headers.get("user-agent", ""),
            "query_params": dict(request.query_params)
        })

    response = await call_next(request)

    duration_ms = (time.time() - start_time) * 1000

    response.headers["X-Request-ID"] = req_id

    log_with_context(logger, "INFO",
        f"Request completed: {request.method} {request.url.path} → {response.status_code}",
        context={"request_id": req_id},
        extra_data={
            "duration_ms": round(duration_ms, 2),
            "status_code": response.status_code
        })

    return response


# ──────────────────────────────────────────────────────────────
# Error handlers
#
# Every failure leaves as {"error": <kind>, "message": <text>} so the
# console can tell retryable errors (Unavailable) from user errors.
# ──────────────────────────────────────────────────────────────
@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    level = "ERROR" if exc.status_code >= 500 else "WARNING"
    log_with_context(logger, level,
        f"{exc.kind}: {exc.message}",
        extra_data={"path": request.url.path, "status_code": exc.status_code})
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    problems = [
        "{}: {}".format(".".join(str(p) for p in err.get("loc", ()) if p != "body"), err.get("msg"))
        for err in exc.errors()
    ]
    error = BadRequest("; ".join(problems) or "Malformed request")
    log_with_context(logger, "WARNING",
        f"BadRequest: {error.message}",
        extra_data={"path": request.url.path, "status_code": error.status_code})
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


# ──────────────────────────────────────────────────────────────
# Register API routes
# ──────────────────────────────────────────────────────────────
app.include_router(students.router, tags=["Students"])
app.include_router(admin.router, tags=["Admin"])
app.include_router(sessions.router, tags=["Sessions"])
app.include_router(leaderboard.router, tags=["Leaderboard"])
app.include_router(games.router, tags=["Games"])


# ──────────────────────────────────────────────────────────────
# Health check endpoint
# ──────────────────────────────────────────────────────────────
@app.get("/health", tags=["Health"])
def health_check():
    """Health check endpoint for Docker health checks and monitoring."""
    return {"status": "healthy", "service": "game-progress-backend", "version": "1.0.0"}


@app.get("/", tags=["Root"])
def root():
    """Root endpoint with API information."""
    return {
        "service": "Game Progress Backend",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "student_profile": "GET/PUT/DELETE /api/students/{id}",
            "admin_students": "GET/POST /api/admin/students",
            "sessions": "POST /api/sessions",
            "leaderboard": "GET /api/leaderboard",
            "games": "GET /api/games"
        }
    }
