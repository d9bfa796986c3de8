from typing import List

from fastapi import APIRouter, status

from api.dependencies.database import DbSessionDep
from api.dependencies.user import ApplicantDep, EmployerDep
from db.tables.user import UserRole
from schemas.application import (
    CreateApplicationSchema,
    OutApplicationSchema,
    ApplicationStatusUpdateSchema,
    UnseenCountSchema,
    ApplicantSeenSchema,
    EmployerSeenSchema,
)
from schemas.notification import ApplicantNotificationSchema, EmployerNotificationSchema
from services import lifecycle, notifications

router = APIRouter(
    prefix="/applications",
    tags=["Applications"],
)


@router.get("/my", response_model=List[OutApplicationSchema])
async def get_my_applications(db: DbSessionDep, current_user: ApplicantDep):
    """Get the current applicant's applications; decided ones are marked seen."""
    return await notifications.list_my_applications(db, current_user.id)


@router.get("/unseen-count", response_model=UnseenCountSchema)
async def get_unseen_count(db: DbSessionDep, current_user: ApplicantDep):
    """Badge counter for decided applications the applicant has not seen."""
    count = await notifications.count_applicant_unseen(db, current_user.id)
    return UnseenCountSchema(count=count)


@router.get("/unseen", response_model=List[ApplicantNotificationSchema])
async def get_unseen_applications(db: DbSessionDep, current_user: ApplicantDep):
    """Status updates for toast notifications."""
    return await notifications.get_applicant_feed(db, current_user.id)


@router.patch("/{application_id}/seen", response_model=ApplicantSeenSchema)
async def mark_application_seen(application_id: int, db: DbSessionDep, current_user: ApplicantDep):
    application = await notifications.mark_seen(db, application_id, current_user.id, UserRole.APPLICANT)
    return ApplicantSeenSchema.model_validate(application)


@router.get("/employer/unseen", response_model=List[EmployerNotificationSchema])
async def get_employer_unseen_applications(db: DbSessionDep, current_user: EmployerDep):
    """New applicants on the current employer's jobs."""
    return await notifications.get_employer_feed(db, current_user.id)


@router.patch("/{application_id}/employer-seen", response_model=EmployerSeenSchema)
async def mark_employer_seen(application_id: int, db: DbSessionDep, current_user: EmployerDep):
    application = await notifications.mark_seen(db, application_id, current_user.id, UserRole.EMPLOYER)
    return EmployerSeenSchema.model_validate(application)


@router.get("/job/{job_id}", response_model=List[OutApplicationSchema])
async def get_job_applications(job_id: int, db: DbSessionDep, current_user: EmployerDep):
    """Get all applications for a job owned by the current employer."""
    applications = await lifecycle.list_job_applications(db, job_id, current_user.id)
    return [OutApplicationSchema.model_validate(a) for a in applications]


@router.post("/{job_id}", response_model=OutApplicationSchema, status_code=status.HTTP_201_CREATED)
async def apply_for_job(
    job_id: int,
    application_data: CreateApplicationSchema,
    db: DbSessionDep,
    current_user: ApplicantDep,
):
    """Apply for a job."""
    application = await lifecycle.create_application(
        db, job_id, current_user.id, application_data.cover_letter
    )
    return OutApplicationSchema.model_validate(application)


@router.put("/{application_id}/status", response_model=OutApplicationSchema)
async def update_application_status(
    application_id: int,
    status_data: ApplicationStatusUpdateSchema,
    db: DbSessionDep,
    current_user: EmployerDep,
):
    """Accept or reject a pending application."""
    application = await lifecycle.update_status(
        db, application_id, current_user.id, status_data.status
    )
    return OutApplicationSchema.model_validate(application)
