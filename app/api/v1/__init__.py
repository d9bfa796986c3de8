from fastapi import APIRouter
from core.config import settings

from .authentication import router as auth_router
from .job import router as job_router
from .application import router as application_router

api_router = APIRouter(prefix=settings.API_V1_STR)
api_router.include_router(auth_router)
api_router.include_router(job_router)
api_router.include_router(application_router)
