import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import config, models  # noqa: F401 - registers every table on Base
from .database import Base, engine
from .domain.auth import router as auth_router
from .domain.bookings import router as bookings_router
from .domain.calls import router as calls_router
from .domain.catalog import categories_router, products_router
from .domain.providers import router as providers_router
from .domain.quotes import router as quotes_router
from .domain.service_requests import router as service_requests_router
from .domain.users import router as users_router
from .errors import AppError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

# Error codes for HTTP errors not raised through AppError (routing, rate limiting)
HTTP_ERROR_CODES = {
    400: "ValidationError",
    401: "Unauthorized",
    403: "Forbidden",
    404: "NotFound",
    405: "MethodNotAllowed",
    429: "RateLimited",
    503: "ServiceUnavailable",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Database tables created successfully")
    except Exception as e:
        # Ignore "already exists" errors from race conditions between workers
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")
            raise

    if config.RATE_LIMIT_ENABLED:
        try:
            from .rate_limiter import get_redis_client

            get_redis_client()  # Connection test
            logger.info("Redis connection established")
        except Exception as e:
            logger.warning(f"Redis connection failed - rate limited endpoints will answer 503: {e}")
    else:
        logger.warning("Rate limiting DISABLED - only use in development!")

    yield
    logger.info("Application shutting down...")


app = FastAPI(title="Fixer API", version="1.0.0", lifespan=lifespan)


def error_response(status_code: int, message: str, error: str, data=None, headers=None) -> JSONResponse:
    content = {"success": False, "message": message, "error": error}
    if data is not None:
        content["data"] = data
    return JSONResponse(status_code=status_code, content=content, headers=headers)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} - {exc.error}: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} - {exc.error}: {exc.message}")
    return error_response(exc.status_code, exc.message, exc.error, headers=getattr(exc, "headers", None))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    error = HTTP_ERROR_CODES.get(exc.status_code, "Internal" if exc.status_code >= 500 else "HTTPError")
    return error_response(exc.status_code, str(exc.detail), error, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Schema violations are reported as 400 ValidationError with per-field details"""
    details = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ())[1:]) or "request"
        details.append({"field": field, "message": err.get("msg", "Invalid value")})

    logger.warning(f"Validation error for {request.url.path}: {details}")
    message = "; ".join(f"{d['field']}: {d['message']}" for d in details) or "Invalid request"
    return error_response(400, message, "ValidationError", data=details)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"❌ Unhandled error on {request.method} {request.url.path}: {exc}")
    return error_response(500, "Internal server error", "Internal")


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()
    try:
        response = await call_next(request)
    except Exception as e:
        logger.error(f"{request.method} {request.url.path} - Error: {str(e)}")
        raise
    duration_ms = (time.time() - start_time) * 1000
    logger.debug(f"{request.method} {request.url.path} - {response.status_code} ({duration_ms:.1f}ms)")
    return response


# CORS Configuration
logger.info(f"CORS allowed origins: {config.ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

# Routes
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(providers_router)
app.include_router(service_requests_router)
app.include_router(quotes_router)
app.include_router(bookings_router)
app.include_router(calls_router)
app.include_router(categories_router)
app.include_router(products_router)


@app.get("/")
def root():
    return {"message": "Fixer API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}


@app.get("/health/redis")
async def redis_health_check():
    """Check Redis connectivity for monitoring"""
    try:
        from .rate_limiter import get_redis_client

        redis_client = get_redis_client()

        start_time = time.time()
        redis_client.ping()
        response_time = (time.time() - start_time) * 1000

        info = redis_client.info()
        return {
            "status": "healthy",
            "redis": {
                "connected": True,
                "response_time_ms": round(response_time, 2),
                "version": info.get("redis_version", "unknown"),
                "used_memory_human": info.get("used_memory_human", "unknown"),
                "connected_clients": info.get("connected_clients", 0),
            },
        }
    except Exception as e:
        logger.error(f"❌ Redis health check failed: {e}")
        return JSONResponse(
            status_code=503,
            content={"status": "unhealthy", "redis": {"connected": False, "error": str(e)}},
        )
