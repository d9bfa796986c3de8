from typing import List, Optional

from fastapi import APIRouter, Query, status

from api.dependencies.database import DbSessionDep
from api.dependencies.pagination import PaginationDep
from api.dependencies.user import EmployerDep, OptionalUserDep
from db.tables.job import JobType
from db.tables.user import UserRole
from schemas.job import (
    CreateJobSchema,
    UpdateJobSchema,
    ReopenJobSchema,
    OutJobSchema,
    JobListItemSchema,
    EmployerJobSchema,
    PaginatedJobSchema,
)
from services import jobs

router = APIRouter(
    prefix="/jobs",
    tags=["Jobs"],
)


@router.post("", response_model=OutJobSchema, status_code=status.HTTP_201_CREATED)
async def create_job(job_data: CreateJobSchema, db: DbSessionDep, current_user: EmployerDep):
    """Create a new job."""
    job = await jobs.create_job(db, job_data, owner_id=current_user.id)
    return OutJobSchema.model_validate(job)


@router.get("", response_model=PaginatedJobSchema)
async def list_jobs(
    pagination: PaginationDep,
    db: DbSessionDep,
    current_user: OptionalUserDep,
    search: Optional[str] = None,
    job_type: Optional[JobType] = Query(None, alias="type"),
    location: Optional[str] = None,
    include_application_status: bool = Query(False, alias="includeApplicationStatus"),
):
    """List jobs, newest first.

    Signed-in applicants may ask for their own latest application status on
    each job with ``includeApplicationStatus=true``.
    """
    applicant_id = None
    if include_application_status and current_user and current_user.role == UserRole.APPLICANT:
        applicant_id = current_user.id
    return await jobs.list_jobs(
        db,
        limit=pagination.limit,
        offset=pagination.offset,
        search=search,
        job_type=job_type,
        location=location,
        applicant_id=applicant_id,
    )


@router.get("/mine", response_model=List[EmployerJobSchema])
async def get_my_jobs(
    db: DbSessionDep,
    current_user: EmployerDep,
    include_expired: bool = Query(False, alias="includeExpired"),
):
    """Jobs posted by the current employer; expired ones only when asked for."""
    return await jobs.list_employer_jobs(db, current_user.id, include_expired=include_expired)


@router.get("/{job_id}", response_model=JobListItemSchema)
async def get_job(job_id: int, db: DbSessionDep):
    return await jobs.get_job(db, job_id)


@router.put("/{job_id}", response_model=OutJobSchema)
async def update_job(job_id: int, job_data: UpdateJobSchema, db: DbSessionDep, current_user: EmployerDep):
    job = await jobs.update_job(db, job_id, current_user.id, job_data)
    return OutJobSchema.model_validate(job)


@router.put("/{job_id}/reopen", response_model=EmployerJobSchema)
async def reopen_job(job_id: int, window: ReopenJobSchema, db: DbSessionDep, current_user: EmployerDep):
    """Repost a job with a new application window."""
    return await jobs.reopen_job(db, job_id, current_user.id, window)


@router.delete("/{job_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_job(job_id: int, db: DbSessionDep, current_user: EmployerDep):
    """Delete a job that has no applications."""
    await jobs.delete_job(db, job_id, current_user.id)
