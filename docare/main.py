import logging
from contextlib import asynccontextmanager
from datetime import datetime

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.gzip import GZipMiddleware

# Load environment variables as early as possible
load_dotenv()

from .core.config import settings
from .core.logging_config import configure_logging
from .db.session import check_database_connection, create_db_and_tables
from .exceptions import register_exception_handlers
from .infrastructure.realtime.connection_manager import manager
from .middleware import (
    AuditMiddleware,
    ErrorHandlingMiddleware,
    LoggingMiddleware,
    RateLimitMiddleware,
    RequestSizeLimitMiddleware,
    SecurityMiddleware,
)
from .routers import (
    admin_router,
    appointments_router,
    auth_router,
    billing_router,
    devices_router,
    medications_router,
    messages_router,
    realtime_router,
    users_router,
)
from .schemas.common.common import HealthResponse
from .utils import uptime_seconds

configure_logging(settings)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION} ({settings.ENVIRONMENT})")
    if settings.is_production and settings.SECRET_KEY.startswith("change-me"):
        logger.warning("JWT_SECRET_KEY is using the development default")
    if not settings.ENCRYPTION_KEY:
        logger.warning("ENCRYPTION_KEY is not set; PHI encryption uses an ephemeral key")
    create_db_and_tables()
    yield
    logger.info("Shutting down")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Telehealth patient portal API",
    docs_url="/docs" if settings.DOCS_ENABLED else None,
    redoc_url="/redoc" if settings.DOCS_ENABLED else None,
    lifespan=lifespan,
)

register_exception_handlers(app)

# Middleware: the last one added runs first
app.add_middleware(ErrorHandlingMiddleware)
app.add_middleware(RequestSizeLimitMiddleware)
app.add_middleware(RateLimitMiddleware)
app.add_middleware(SecurityMiddleware)
app.add_middleware(LoggingMiddleware)
app.add_middleware(AuditMiddleware)
app.add_middleware(GZipMiddleware, minimum_size=settings.GZIP_MIN_SIZE)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=settings.allowed_methods_list,
    allow_headers=settings.allowed_headers_list,
)

for module in (
    auth_router,
    users_router,
    appointments_router,
    medications_router,
    messages_router,
    billing_router,
    devices_router,
    admin_router,
):
    app.include_router(module.router, prefix=settings.API_PREFIX)

if settings.ENABLE_WEBSOCKET:
    app.include_router(realtime_router.router)


@app.get("/health", response_model=HealthResponse, tags=["Health"])
def health_check():
    database_ok = check_database_connection()
    return {
        "status": "healthy" if database_ok else "degraded",
        "timestamp": datetime.utcnow().isoformat(),
        "environment": settings.ENVIRONMENT,
        "version": settings.APP_VERSION,
        "uptime_seconds": uptime_seconds(),
        "database": "connected" if database_ok else "unavailable",
        "realtime_connections": len(manager.online_users()),
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("docare.main:app", host=settings.HOST, port=settings.PORT, workers=settings.WORKERS, reload=settings.DEBUG)
