"""
FastAPI application entry point for the Teacha course platform.
"""

# Load environment variables FIRST before any other imports
from pathlib import Path
from dotenv import load_dotenv

project_root = Path(__file__).parent.parent.parent.parent  # src/teacha/api/main.py -> root
env_file = project_root / ".env"
if env_file.exists():
    load_dotenv(env_file)

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from teacha import __version__
from teacha.api.routes import auth, tenants, users, courses, lessons, enrollments, health
from teacha.api.middleware.auth import IdentityContextMiddleware
from teacha.api.middleware.error_handler import ErrorHandlerMiddleware, teacha_error_handler
from teacha.database.connection import dispose_engine
from teacha.monitoring import MetricsMiddleware, get_metrics, metrics_endpoint, setup_sentry
from teacha.utils.config import get_settings
from teacha.utils.exceptions import TeachaError
from teacha.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    setup_logging()
    logger.info(f"Starting Teacha API ({settings.environment})...")

    setup_sentry(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        traces_sample_rate=settings.sentry_traces_sample_rate,
    )
    get_metrics()

    logger.info("API started successfully")

    yield

    logger.info("Shutting down Teacha API...")
    dispose_engine()


# Create FastAPI application
app = FastAPI(
    title="Teacha API",
    description="Multi-tenant course platform",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# GZip compression
app.add_middleware(GZipMiddleware, minimum_size=1000)

# Custom middlewares (order matters: the last one added runs first)
app.add_middleware(ErrorHandlerMiddleware)
app.add_middleware(MetricsMiddleware)
app.add_middleware(IdentityContextMiddleware)

# Register routes
app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
app.include_router(tenants.router, prefix="/tenants", tags=["Tenants"])
app.include_router(users.router, prefix="/users", tags=["Users"])
app.include_router(courses.router, prefix="/courses", tags=["Courses"])
app.include_router(lessons.router, tags=["Lessons"])
app.include_router(enrollments.router, tags=["Enrollments"])
app.include_router(health.router, tags=["Health"])

app.add_api_route("/metrics", metrics_endpoint, methods=["GET"], tags=["Monitoring"])
app.add_exception_handler(TeachaError, teacha_error_handler)


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint."""
    return {
        "name": "Teacha API",
        "version": __version__,
        "status": "operational",
        "docs": "/docs"
    }


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies, paths and query strings answer 400 with field details."""
    details = [
        {
            "field": ".".join(str(part) for part in error["loc"][1:]) or str(error["loc"][0]),
            "message": error["msg"],
        }
        for error in exc.errors()
    ]
    logger.warning(f"{request.method} {request.url.path} validation failed: {details}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Validation failed", "details": details},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "teacha.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
    )
