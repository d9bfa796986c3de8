"""Application lifecycle: creation, re-apply eligibility and status decisions.

Status is write-once away from ``pending``. Rules are checked before any
write; the partial unique index on active applications and the conditional
status update cover the races the checks cannot see.
"""
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import (
    ApplicationWindowError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    StatusAlreadySetError,
    ValidationError,
)
from db.crud.application import ApplicationCrud
from db.crud.job import JobCrud
from db.tables.application import Application, ApplicationStatus, DECISION_STATUSES
from db.tables.job import Job
from utils.clock import to_naive_utc, utcnow

logger = logging.getLogger(__name__)


def _as_datetime(value) -> Optional[datetime]:
    if isinstance(value, datetime):
        return to_naive_utc(value)
    if isinstance(value, str):
        try:
            return _as_datetime(datetime.fromisoformat(value))
        except ValueError:
            return None
    return None


def check_application_window(job: Job, now: datetime) -> None:
    """Raise unless ``now`` is inside the job's inclusive application window."""
    now = to_naive_utc(now)
    start = _as_datetime(job.application_start_date)
    end = _as_datetime(job.application_end_date)
    if start is None or end is None:
        raise ApplicationWindowError("This job has invalid application dates")
    if now < start or now > end:
        raise ApplicationWindowError("This job is no longer accepting applications")


def is_window_open(job: Job, now: Optional[datetime] = None) -> bool:
    try:
        check_application_window(job, now or utcnow())
    except ApplicationWindowError:
        return False
    return True


def check_reapply_eligibility(latest: Optional[Application]) -> None:
    """Only a rejected (or absent) latest application allows a new one."""
    if latest is None or latest.status == ApplicationStatus.REJECTED:
        return
    if latest.status == ApplicationStatus.PENDING:
        raise ConflictError("Your application is still pending for this job")
    raise ConflictError("You have already been accepted for this job")


async def create_application(
    db: AsyncSession,
    job_id: int,
    applicant_id: int,
    cover_letter: Optional[str],
    now: Optional[datetime] = None,
) -> Application:
    if cover_letter is None or not cover_letter.strip():
        raise ValidationError("Please provide a cover letter")

    now = to_naive_utc(now) if now else utcnow()
    job = await JobCrud(db).get_by_id(job_id)
    if job is None:
        raise NotFoundError("Job not found")
    check_application_window(job, now)

    application_crud = ApplicationCrud(db)
    latest = await application_crud.get_latest_application(applicant_id, job_id)
    check_reapply_eligibility(latest)

    application = await application_crud.create_application({
        "job_id": job_id,
        "applicant_id": applicant_id,
        "cover_letter": cover_letter,
        "status": ApplicationStatus.PENDING,
        # The applicant knows about their own action, the employer has not seen it yet
        "is_seen_by_applicant": True,
        "is_seen_by_employer": False,
        "applied_at": now,
    })
    await application_crud.commit_session()
    logger.info("Applicant %s applied to job %s (application %s)", applicant_id, job_id, application.id)
    return await application_crud.get_with_relations(application.id)


async def update_status(
    db: AsyncSession,
    application_id: int,
    employer_id: int,
    new_status: ApplicationStatus | str,
    now: Optional[datetime] = None,
) -> Application:
    try:
        new_status = ApplicationStatus(new_status)
    except ValueError:
        new_status = None
    if new_status not in DECISION_STATUSES:
        raise ValidationError("Status must be either 'accepted' or 'rejected'")

    application_crud = ApplicationCrud(db)
    application = await application_crud.get_with_relations(application_id)
    if application is None:
        raise NotFoundError("Application not found")
    if application.job is None or application.job.created_by != employer_id:
        raise ForbiddenError("Not authorized to update this application")
    if application.status != ApplicationStatus.PENDING:
        raise StatusAlreadySetError()

    decided = await application_crud.decide_status(application_id, new_status, to_naive_utc(now) if now else utcnow())
    if not decided:
        # Another request decided it between our read and write
        await application_crud.rollback_session()
        raise StatusAlreadySetError()
    await application_crud.commit_session()
    logger.info("Employer %s set application %s to %s", employer_id, application_id, new_status.value)
    return await application_crud.get_with_relations(application_id)


async def list_job_applications(db: AsyncSession, job_id: int, employer_id: int) -> List[Application]:
    job = await JobCrud(db).get_by_id(job_id)
    if job is None:
        raise NotFoundError("Job not found")
    if job.created_by != employer_id:
        raise ForbiddenError("Not authorized to view applications for this job")
    return await ApplicationCrud(db).get_applications_by_job_id(job_id)
