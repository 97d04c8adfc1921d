from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.api.routes import assignments, attendance, auth, health, leaves, logs, notifications, staff, timetables
from app.core.config import get_settings
from app.core.exceptions import AppError
from app.core.middleware import RequestSizeLimitMiddleware, SecurityHeadersMiddleware
from app.db.bootstrap import ensure_runtime_schema_compatibility

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    try:
        ensure_runtime_schema_compatibility()
    except SQLAlchemyError:
        # Keep serving; /health/ready reports the degraded database.
        logger.exception("Runtime schema bootstrap failed")
    yield


async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message, "details": exc.details},
    )


app = FastAPI(title=settings.project_name, lifespan=lifespan)
app.add_exception_handler(AppError, app_error_handler)

app.add_middleware(RequestSizeLimitMiddleware, max_bytes=settings.max_request_size_bytes)
app.add_middleware(SecurityHeadersMiddleware, settings=settings)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, prefix=settings.api_prefix, tags=["health"])
app.include_router(auth.router, prefix=f"{settings.api_prefix}/auth", tags=["auth"])
app.include_router(staff.router, prefix=settings.api_prefix, tags=["staff"])
app.include_router(timetables.router, prefix=settings.api_prefix, tags=["timetables"])
app.include_router(leaves.router, prefix=settings.api_prefix, tags=["leaves"])
app.include_router(attendance.router, prefix=settings.api_prefix, tags=["attendance"])
app.include_router(assignments.router, prefix=settings.api_prefix, tags=["assignments"])
app.include_router(notifications.router, prefix=settings.api_prefix, tags=["notifications"])
app.include_router(logs.router, prefix=settings.api_prefix, tags=["logs"])
