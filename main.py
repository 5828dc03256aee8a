# ruff: noqa: E402
# E402 disabled: load_dotenv() must run before other imports for Sentry DSN

import time
import traceback
from collections.abc import Awaitable, Callable
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

import sentry_sdk
from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from loguru import logger
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from core.correlation import (
    CORRELATION_HEADER,
    generate_correlation_id,
    get_correlation_id,
    resolve_correlation_id,
    set_correlation_id,
)
from core.logging_config import configure_logging
from core.sentry_config import init_sentry
from helpers.rate_limiter import limiter
from helpers.responses import error_body
from helpers.time_utils import utc_now
from models.config import settings
from models.exceptions import (
    AuthenticationException,
    BusinessRuleException,
    ConflictException,
    DomainException,
    ExternalServiceException,
    NotFoundException,
    PermissionDeniedException,
    ServiceUnavailableException,
    ValidationException,
)
from repositories.database import Base, engine
from routers import (
    admin_router,
    ai_router,
    answers_router,
    auth_router,
    bookmarks_router,
    comments_router,
    friends_router,
    questions_router,
    upload_router,
    users_router,
)

# Initialize Sentry BEFORE app creation
init_sentry()

configure_logging(settings.ENVIRONMENT)

STARTED_AT = time.time()

API_ROUTERS = (
    auth_router,
    questions_router,
    answers_router,
    comments_router,
    bookmarks_router,
    users_router,
    admin_router,
    ai_router,
    upload_router,
    friends_router,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables on startup when ``AUTO_CREATE_DB`` is enabled."""
    if settings.AUTO_CREATE_DB:
        logger.info(
            "AUTO_CREATE_DB enabled; creating database tables via SQLAlchemy create_all()"
        )
        Base.metadata.create_all(bind=engine)
    else:
        logger.info("AUTO_CREATE_DB disabled; run 'alembic upgrade head' to migrate")

    logger.info(
        f"Q&A forum API {settings.API_VERSION} starting "
        f"(environment={settings.ENVIRONMENT}, ai={settings.ai_configured})"
    )
    yield
    logger.info("Q&A forum API shutting down")


app = FastAPI(title="Q&A Forum API", version=settings.API_VERSION, lifespan=lifespan)

app.state.limiter = limiter


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Inject correlation ID into request context and Sentry."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        correlation_id = resolve_correlation_id(request.headers.get(CORRELATION_HEADER))
        set_correlation_id(correlation_id)
        sentry_sdk.set_tag("correlation_id", correlation_id)

        response = await call_next(request)
        response.headers[CORRELATION_HEADER] = correlation_id
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log all incoming requests with performance monitoring."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        start_time = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start_time

        logger.info(
            f"{request.method} {request.url.path} "
            f"status={response.status_code} duration={duration:.3f}s"
        )
        if duration > settings.SLOW_REQUEST_THRESHOLD:
            logger.warning(
                f"Slow request: {request.method} {request.url.path} "
                f"took {duration:.2f}s (threshold: {settings.SLOW_REQUEST_THRESHOLD}s)"
            )

        response.headers["X-Response-Time"] = f"{duration:.3f}s"
        return response


# Middleware runs in reverse order of registration: the correlation id must be
# set before the request is logged
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(CorrelationIdMiddleware)

cors_origins = ["*"] if settings.ENVIRONMENT == "development" else settings.CORS_ORIGINS
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=settings.ENVIRONMENT != "development",
    allow_methods=["*"],
    allow_headers=["*"],
)

# Uploaded files are served from the local upload directory
Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")


def _domain_error(
    request: Request,
    exc: DomainException,
    status_code: int,
    label: str,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Log a domain exception and render it in the error envelope."""
    sentry_sdk.set_tag("correlation_id", exc.correlation_id)
    sentry_sdk.set_tag("exception_type", exc.__class__.__name__)

    logger.warning(
        f"{label}: {exc.message}",
        correlation_id=exc.correlation_id,
        exception_type=exc.__class__.__name__,
        path=str(request.url.path),
    )

    return JSONResponse(
        status_code=status_code,
        content=error_body(exc.message, exc.correlation_id),
        headers=headers,
    )


# Global unhandled exception handler (returns generic 500 and logs details)
@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch all unhandled exceptions with full Sentry capture."""
    correlation_id = get_correlation_id() or generate_correlation_id()

    sentry_sdk.set_tag("correlation_id", correlation_id)
    sentry_sdk.capture_exception(exc)

    # repr() keeps curly braces in the message away from loguru's formatter
    logger.exception(
        f"Unhandled exception: {exc!r}",
        correlation_id=correlation_id,
        path=str(request.url.path),
        method=request.method,
    )

    extra = {}
    if not settings.is_production:
        extra["stack"] = "".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("Internal server error", correlation_id, **extra),
    )


@app.exception_handler(NotFoundException)
async def not_found_exception_handler(
    request: Request, exc: NotFoundException
) -> JSONResponse:
    return _domain_error(request, exc, status.HTTP_404_NOT_FOUND, "Not found")


@app.exception_handler(ValidationException)
async def validation_exception_handler(
    request: Request, exc: ValidationException
) -> JSONResponse:
    return _domain_error(request, exc, status.HTTP_400_BAD_REQUEST, "Validation error")


@app.exception_handler(BusinessRuleException)
async def business_rule_exception_handler(
    request: Request, exc: BusinessRuleException
) -> JSONResponse:
    return _domain_error(
        request, exc, status.HTTP_400_BAD_REQUEST, "Business rule violation"
    )


@app.exception_handler(ConflictException)
async def conflict_exception_handler(
    request: Request, exc: ConflictException
) -> JSONResponse:
    """Duplicates (already registered, already bookmarked) are client errors."""
    return _domain_error(request, exc, status.HTTP_400_BAD_REQUEST, "Conflict")


@app.exception_handler(PermissionDeniedException)
async def permission_denied_exception_handler(
    request: Request, exc: PermissionDeniedException
) -> JSONResponse:
    return _domain_error(request, exc, status.HTTP_403_FORBIDDEN, "Permission denied")


@app.exception_handler(AuthenticationException)
async def authentication_exception_handler(
    request: Request, exc: AuthenticationException
) -> JSONResponse:
    return _domain_error(
        request,
        exc,
        status.HTTP_401_UNAUTHORIZED,
        "Authentication failed",
        headers={"WWW-Authenticate": "Bearer"},
    )


@app.exception_handler(ExternalServiceException)
async def external_service_exception_handler(
    request: Request, exc: ExternalServiceException
) -> JSONResponse:
    # Upstream failures are worth seeing in Sentry
    sentry_sdk.capture_exception(exc)
    return _domain_error(
        request, exc, status.HTTP_502_BAD_GATEWAY, "External service error"
    )


@app.exception_handler(ServiceUnavailableException)
async def service_unavailable_exception_handler(
    request: Request, exc: ServiceUnavailableException
) -> JSONResponse:
    return _domain_error(
        request, exc, status.HTTP_503_SERVICE_UNAVAILABLE, "Service unavailable"
    )


@app.exception_handler(DomainException)
async def domain_exception_handler(
    request: Request, exc: DomainException
) -> JSONResponse:
    """Fallback for domain exceptions without a dedicated handler."""
    sentry_sdk.capture_exception(exc)
    return _domain_error(request, exc, status.HTTP_400_BAD_REQUEST, "Domain exception")


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed bodies, query strings or path parameters."""
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ())[1:])
        message = first.get("msg", message).removeprefix("Value error, ")
        if field:
            message = f"{field}: {message}"

    correlation_id = get_correlation_id() or generate_correlation_id()
    logger.warning(f"Request validation failed: {message}", path=str(request.url.path))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(message, correlation_id),
    )


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """Unique constraint races that slipped past the service-level checks."""
    correlation_id = get_correlation_id() or generate_correlation_id()
    logger.warning(
        f"Integrity error: {exc.orig!r}",
        correlation_id=correlation_id,
        path=str(request.url.path),
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(
            "Duplicate value violates a unique constraint", correlation_id
        ),
    )


@app.exception_handler(RateLimitExceeded)
async def rate_limit_exceeded_handler(
    request: Request, exc: RateLimitExceeded
) -> JSONResponse:
    correlation_id = get_correlation_id() or generate_correlation_id()
    client_host = request.client.host if request.client else "unknown"
    logger.warning(
        f"Rate limit exceeded: {request.method} {request.url.path} from {client_host}"
    )
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content=error_body("Too many requests, please try again later.", correlation_id),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Routing errors (unknown path, wrong method) in the error envelope."""
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        message = f"Route {request.url.path} not found"
    else:
        message = str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(message, get_correlation_id() or generate_correlation_id()),
        headers=getattr(exc, "headers", None),
    )


for api_router in API_ROUTERS:
    app.include_router(api_router.router, prefix="/api")


def _health() -> dict:
    return {
        "status": "OK",
        "timestamp": utc_now().isoformat(),
        "uptime": round(time.time() - STARTED_AT, 3),
        "environment": settings.ENVIRONMENT,
    }


@app.get("/health")
def health_check() -> dict:
    return _health()


@app.get("/api/health")
def api_health_check() -> dict:
    return _health()


@app.get("/")
def root() -> dict:
    return {
        "message": "Welcome to the Q&A Forum API",
        "version": settings.API_VERSION,
        "documentation": "/docs",
    }


@app.get("/api")
def api_index() -> dict:
    """List the mounted route groups."""
    return {
        "message": "Q&A Forum API",
        "version": settings.API_VERSION,
        "endpoints": {
            api_router.router.tags[0]: f"/api{api_router.router.prefix}"
            for api_router in API_ROUTERS
        },
    }
