"""
FastAPI application main entry point.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from scriptpolish.api.rate_limit import limiter, rate_limit_exceeded_handler
from scriptpolish.api.routes import corrections_router, polish_router, voice_router
from scriptpolish.core.config import settings
from scriptpolish.core.database import close_db, init_db
from scriptpolish.core.exceptions import ScriptPolishError
from scriptpolish.core.observability import configure_logging, init_sentry
from scriptpolish.middleware import BodySizeLimitMiddleware

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    configure_logging()
    logger.info("Starting ScriptPolish backend", environment=settings.environment)

    try:
        await init_db()
        logger.info("Database initialized")
    except Exception as e:
        logger.warning("Database initialization failed", error=str(e))

    init_sentry()

    yield

    logger.info("Shutting down ScriptPolish backend")
    await close_db()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    ScriptPolish AI Backend

    Rewrites raw video scripts in the creator's own voice:
    - Voice analysis extracts a structured voice pattern profile from saved scripts
    - Polishing rewrites a script by those patterns (or by the best saved examples)
    - Corrections turn the creator's final edits into new, scored examples
    """,
    docs_url="/docs" if settings.environment != "production" else None,
    redoc_url="/redoc" if settings.environment != "production" else None,
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.max_request_body_bytes)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ScriptPolishError)
async def script_polish_error_handler(request: Request, exc: ScriptPolishError) -> JSONResponse:
    log = logger.warning if exc.status_code < 500 else logger.error
    log("Request failed", path=request.url.path, kind=exc.kind, error=exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    kind = "payload_too_large" if exc.status_code == 413 else "http_error"
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail, "kind": kind},
        headers=exc.headers,
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"error": "Invalid request body", "kind": "invalid_request"},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "kind": "internal_error"},
    )


app.include_router(polish_router, prefix=settings.api_v1_prefix)
app.include_router(voice_router, prefix=settings.api_v1_prefix)
app.include_router(corrections_router, prefix=settings.api_v1_prefix)


@app.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.environment,
    }


@app.get("/")
async def root() -> dict:
    """Root endpoint with API information."""
    prefix = settings.api_v1_prefix
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "endpoints": {
            "polish": f"{prefix}/polish",
            "analyze_voice": f"{prefix}/analyze-voice",
            "save_correction": f"{prefix}/save-correction",
        },
    }
