"""Job listing with per-job application facts, ownership checks and window upkeep."""
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from db.crud.application import ApplicationCrud
from db.crud.job import JobCrud
from db.tables.job import Job, JobType
from schemas.job import (
    CreateJobSchema,
    EmployerJobSchema,
    JobListItemSchema,
    PaginatedJobSchema,
    ReopenJobSchema,
    UpdateJobSchema,
    INVALID_DATES_MESSAGE,
    WINDOW_ORDER_MESSAGE,
)
from services.lifecycle import is_window_open
from utils.clock import utcnow

logger = logging.getLogger(__name__)


async def _get_owned_job(db: AsyncSession, job_id: int, owner_id: int, action: str) -> Job:
    job = await JobCrud(db).get_by_id(job_id)
    if job is None:
        raise NotFoundError("Job not found")
    if job.created_by != owner_id:
        raise ForbiddenError(f"You can only {action} your own jobs")
    return job


def _employer_view(job: Job, applications_count: int, now: datetime) -> EmployerJobSchema:
    end = job.application_end_date
    return EmployerJobSchema.model_validate(job).model_copy(update={
        "is_open": is_window_open(job, now),
        "is_expired": end is not None and now > end,
        "applications_count": applications_count,
    })


async def list_jobs(
    db: AsyncSession,
    limit: int,
    offset: int,
    search: Optional[str] = None,
    job_type: Optional[JobType] = None,
    location: Optional[str] = None,
    applicant_id: Optional[int] = None,
) -> PaginatedJobSchema:
    """Newest jobs first. ``applicant_id`` attaches that applicant's latest status per job."""
    page = await JobCrud(db).get_paginated_list(
        limit, offset, *JobCrud.listing_filters(search, job_type, location)
    )
    job_ids = [item.id for item in page.items]
    application_crud = ApplicationCrud(db)
    counts = await application_crud.count_by_job_ids(job_ids)
    statuses = await application_crud.get_latest_statuses(applicant_id, job_ids) if applicant_id else {}

    now = utcnow()
    page.items = [
        item.model_copy(update={
            "is_open": is_window_open(item, now),
            "applications_count": counts.get(item.id, 0),
            "application_status": statuses.get(item.id),
        })
        for item in page.items
    ]
    return page


async def get_job(db: AsyncSession, job_id: int) -> JobListItemSchema:
    job = await JobCrud(db).get_by_id(job_id)
    if job is None:
        raise NotFoundError("Job not found")
    counts = await ApplicationCrud(db).count_by_job_ids([job.id])
    return JobListItemSchema.model_validate(job).model_copy(update={
        "is_open": is_window_open(job),
        "applications_count": counts.get(job.id, 0),
    })


async def list_employer_jobs(db: AsyncSession, employer_id: int, include_expired: bool = False) -> List[EmployerJobSchema]:
    """The employer's jobs; unless ``include_expired``, only those whose window has not ended."""
    now = utcnow()
    jobs = await JobCrud(db).get_jobs_by_owner(employer_id, include_expired=include_expired, now=now)
    counts = await ApplicationCrud(db).count_by_job_ids([job.id for job in jobs])
    return [_employer_view(job, counts.get(job.id, 0), now) for job in jobs]


async def create_job(db: AsyncSession, job_data: CreateJobSchema, owner_id: int) -> Job:
    job_crud = JobCrud(db)
    job = await job_crud.create_job(job_data, owner_id=owner_id)
    await job_crud.commit_session()
    logger.info("Employer %s posted job %s", owner_id, job.id)
    return job


async def update_job(db: AsyncSession, job_id: int, owner_id: int, job_data: UpdateJobSchema) -> Job:
    """Apply a partial update; window bounds are checked against the stored ones they are merged with."""
    job = await _get_owned_job(db, job_id, owner_id, "update")

    sent = job_data.model_fields_set
    if sent & {"application_start_date", "application_end_date"}:
        start = job_data.application_start_date if "application_start_date" in sent else job.application_start_date
        end = job_data.application_end_date if "application_end_date" in sent else job.application_end_date
        if start is None or end is None:
            raise ValidationError(INVALID_DATES_MESSAGE)
        if end < start:
            raise ValidationError(WINDOW_ORDER_MESSAGE)

    job_crud = JobCrud(db)
    job = await job_crud.update_by_id(job_id, job_data)
    await job_crud.commit_session()
    return job


async def reopen_job(db: AsyncSession, job_id: int, owner_id: int, window: ReopenJobSchema) -> EmployerJobSchema:
    """Repost a job by replacing both window bounds."""
    job = await _get_owned_job(db, job_id, owner_id, "reopen")
    job.application_start_date = window.application_start_date
    job.application_end_date = window.application_end_date

    job_crud = JobCrud(db)
    await job_crud.commit_session()
    await db.refresh(job)
    counts = await ApplicationCrud(db).count_by_job_ids([job.id])
    logger.info("Employer %s reopened job %s until %s", owner_id, job.id, job.application_end_date)
    return _employer_view(job, counts.get(job.id, 0), utcnow())


async def delete_job(db: AsyncSession, job_id: int, owner_id: int) -> None:
    job = await _get_owned_job(db, job_id, owner_id, "delete")
    job_crud = JobCrud(db)
    if await job_crud.has_applications(job.id):
        raise ConflictError("Jobs with applications cannot be deleted")
    await job_crud.delete_by_id(job_id)
    await job_crud.commit_session()
