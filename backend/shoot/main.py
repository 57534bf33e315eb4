"""
╔══════════════════════════════════════════════════╗
║      Shoot                                        ║
║ From API specification to working client app      ║
║                                                   ║
║    Built with: FastAPI + OpenAI + PostgreSQL      ║
║    Version: 1.0.0                                 ║
╚══════════════════════════════════════════════════╝
"""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from shoot.api.envelope import domain_error_envelope, error_envelope
from shoot.core.config import get_settings
from shoot.core.context import bind_request_context, clear_request_context, current_correlation_id, current_request_id
from shoot.core.database import init_db
from shoot.core.errors import ShootError
from shoot.core.logging import get_logger, setup_logging
from shoot.schemas import HealthResponse
from shoot.services.llm_gateway import llm_gateway

# Import routers
from shoot.api.routes.ai import router as ai_router
from shoot.api.routes.api_keys import router as api_keys_router
from shoot.api.routes.apps import router as apps_router
from shoot.api.routes.chat import router as chat_router
from shoot.api.routes.insights import router as insights_router
from shoot.api.routes.proxy import router as proxy_router
from shoot.api.routes.specs import router as specs_router

settings = get_settings()
logger = get_logger("main")

# Track uptime
_start_time = time.time()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup & shutdown lifecycle."""

    # ── Startup ──
    setup_logging(debug=settings.app_debug)
    logger.info("app_starting", app=settings.app_name, env=settings.app_env)

    await init_db()
    logger.info("database_initialized")

    if not llm_gateway.configured:
        logger.warning("llm_not_configured", msg="AI features will answer with static fallbacks")

    logger.info("app_ready", port=settings.app_port, model=llm_gateway.model)

    yield

    # ── Shutdown ──
    logger.info("app_shutdown")


# ── Create FastAPI App ──

app = FastAPI(
    title="Shoot",
    description=(
        "Turn OpenAPI/Swagger specifications into working client apps.\n\n"
        "- Spec ingestion from URL, JSON or YAML\n"
        "- Template and AI generation of React and Node apps\n"
        "- Chat assistant with intent routing\n"
        "- API playground proxy with credential injection\n"
    ),
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS Middleware ──

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Request Logging Middleware ──

@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all incoming requests with timing."""
    request_id, correlation_id = bind_request_context(
        request_id=request.headers.get("x-request-id"),
        correlation_id=request.headers.get("x-correlation-id"),
    )
    start = time.time()
    response = None
    try:
        response = await call_next(request)
        return response
    finally:
        elapsed = round((time.time() - start) * 1000, 2)
        if response is not None:
            response.headers["x-request-id"] = request_id
            response.headers["x-correlation-id"] = correlation_id
            status_code = response.status_code
        else:
            status_code = 500

        if request.url.path not in ["/health", "/docs", "/redoc", "/openapi.json"]:
            logger.info(
                "http_request",
                method=request.method,
                path=request.url.path,
                status=status_code,
                elapsed_ms=elapsed,
                request_id=current_request_id(),
                correlation_id=current_correlation_id(),
            )

        clear_request_context()


# ── Global Exception Handlers ──

@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    logger.warning(
        "http_exception",
        path=request.url.path,
        status_code=exc.status_code,
        detail=str(exc.detail),
    )
    return error_envelope(
        code="http_error",
        message="Request failed",
        status_code=exc.status_code,
        details=exc.detail,
        meta={"path": request.url.path},
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning("validation_error", path=request.url.path, errors=exc.errors())
    return error_envelope(
        code="validation_error",
        message="Validation failed",
        status_code=422,
        details=exc.errors(),
        meta={"path": request.url.path},
    )


@app.exception_handler(ShootError)
async def domain_exception_handler(request: Request, exc: ShootError):
    logger.warning(
        "domain_error",
        path=request.url.path,
        code=exc.code,
        status_code=exc.status_code,
        error=exc.message,
    )
    return domain_error_envelope(exc, meta={"path": request.url.path})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Last resort: log and answer with a generic envelope."""
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        error=str(exc),
        error_type=type(exc).__name__,
    )
    return error_envelope(
        code="internal_error",
        message="Internal server error",
        status_code=500,
        details="Internal server error. The team has been notified.",
        meta={"path": request.url.path},
    )


# ── Register Routers ──

app.include_router(specs_router, prefix="/api/v1")
app.include_router(apps_router, prefix="/api/v1")
app.include_router(api_keys_router, prefix="/api/v1")
app.include_router(chat_router, prefix="/api/v1")
app.include_router(ai_router, prefix="/api/v1")
app.include_router(insights_router, prefix="/api/v1")
app.include_router(proxy_router, prefix="/api/v1")


# ── Health Check ──

@app.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check():
    """System health check endpoint."""
    uptime = round(time.time() - _start_time, 2)
    return HealthResponse(
        status="ok",
        version="1.0.0",
        database="connected",
        llm_configured=llm_gateway.configured,
        uptime_seconds=uptime,
    )


@app.get("/", tags=["System"])
async def root():
    """Welcome endpoint."""
    return {
        "name": "Shoot",
        "version": "1.0.0",
        "status": "operational",
        "docs": "/docs",
        "features": [
            "Spec ingestion",
            "App generation",
            "Chat assistant",
            "API playground proxy",
        ],
    }
