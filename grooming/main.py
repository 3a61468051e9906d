from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.gzip import GZipMiddleware
from contextlib import asynccontextmanager
from dotenv import load_dotenv
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
import logging

load_dotenv()

from .core.config import settings
from .database import create_db_and_tables, engine
from .middleware import RateLimitMiddleware, SecurityMiddleware, LoggingMiddleware, ErrorHandlingMiddleware
from .exceptions import http_exception_handler, validation_exception_handler
from .routers import auth_router, service_types_router, appointments_router, history_router
from .utils import utcnow

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format=settings.LOG_FORMAT
)
logger = logging.getLogger(__name__)


def build_rate_limiter():
    if settings.REDIS_URL:
        from .infrastructure.rate_limit.redis_rate_limiter import RedisRateLimiter
        logger.info("Using Redis rate limiter")
        return RedisRateLimiter(settings.REDIS_URL)
    from .infrastructure.rate_limit.memory_rate_limiter import InMemoryRateLimiter
    return InMemoryRateLimiter()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.APP_NAME} {settings.APP_VERSION}")
    app.state.schema_error = None
    try:
        create_db_and_tables()
    except SQLAlchemyError as e:
        # Keep serving; /health reports the failure
        app.state.schema_error = str(e)
        logger.exception("Could not create tables or seed the catalog")
    yield
    logger.info(f"{settings.APP_NAME} stopped")


def install_middleware(app: FastAPI) -> None:
    # Added last runs first: CORS, GZip, rate limit, headers, logging, errors
    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(SecurityMiddleware)
    app.add_middleware(RateLimitMiddleware, limiter=build_rate_limiter())
    app.add_middleware(GZipMiddleware, minimum_size=settings.GZIP_MIN_SIZE)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=settings.allowed_methods_list,
        allow_headers=settings.allowed_headers_list,
    )


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan,
    docs_url=("/docs" if settings.DOCS_ENABLED else None),
    redoc_url=("/redoc" if settings.DOCS_ENABLED else None),
    openapi_url=("/openapi.json" if settings.DOCS_ENABLED else None)
)

app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
install_middleware(app)

for module in (auth_router, service_types_router, appointments_router, history_router):
    app.include_router(module.router)


@app.get("/health")
def health_check():
    schema_error = getattr(app.state, "schema_error", None)
    database_ok = schema_error is None
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.warning(f"Health check could not reach the database: {e}")
        database_ok = False
    return {
        "status": "healthy" if database_ok else "degraded",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "timestamp": utcnow().isoformat(),
        "database": {"ok": database_ok, "error": schema_error},
        "pricing": {
            "loyalty_visit_threshold": settings.LOYALTY_VISIT_THRESHOLD,
            "loyalty_discount_percent": settings.LOYALTY_DISCOUNT_PERCENT,
        },
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("grooming.main:app", host=settings.HOST, port=settings.PORT)
