import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.cors import CORSMiddleware

from core.config import settings, EnvironmentEnum
from core.exceptions import JobBoardError
from core.logging import setup_logging
from db.session import engine, init_db

from api import v1

logger = logging.getLogger(__name__)

description = """
Job board API: applications, status decisions and seen/unseen notifications 🚀
"""
version = "v0.1.0"


@asynccontextmanager
async def lifespan(_: FastAPI):
    setup_logging()
    if settings.ENVIRONMENT == EnvironmentEnum.DEVELOP:
        await init_db()

    yield

    await engine.dispose()


app = FastAPI(
    title=settings.PROJECT_NAME,
    description=description,
    version=version,
    lifespan=lifespan,
)

app.add_middleware(TrustedHostMiddleware, allowed_hosts=list(settings.TRUSTED_HOSTS))

# include routes here
app.include_router(v1.api_router)


@app.exception_handler(JobBoardError)
async def job_board_error_handler(_: Request, exc: JobBoardError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(_: Request, exc: RequestValidationError):
    # Report the first problem as a plain 400 message
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        error = errors[0]
        cause = (error.get("ctx") or {}).get("error")
        message = str(cause) if cause else error.get("msg", message)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": message})


@app.exception_handler(Exception)
async def unexpected_error_handler(_: Request, exc: Exception):
    logger.exception("Unhandled error")
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"detail": str(exc)})


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "PUT", "POST", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["Authorization", "Content-Type", "Accept-Language"],
)
