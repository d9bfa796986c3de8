"""Unseen feeds, counts and seen-marking for applicants and employers."""
import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.exceptions import ForbiddenError, NotFoundError, ValidationError
from db.crud.application import ApplicationCrud
from db.tables.application import Application
from db.tables.user import UserRole
from schemas.application import OutApplicationSchema
from schemas.notification import ApplicantNotificationSchema, EmployerNotificationSchema

logger = logging.getLogger(__name__)


async def get_applicant_feed(
    db: AsyncSession, applicant_id: int, limit: Optional[int] = None
) -> List[ApplicantNotificationSchema]:
    """Decided applications the applicant has not seen, newest decision first."""
    applications = await ApplicationCrud(db).get_unseen_by_applicant(
        applicant_id, limit or settings.NOTIFICATION_FEED_LIMIT
    )
    return [ApplicantNotificationSchema.model_validate(a) for a in applications]


async def count_applicant_unseen(db: AsyncSession, applicant_id: int) -> int:
    return await ApplicationCrud(db).count_unseen_by_applicant(applicant_id)


async def get_employer_feed(
    db: AsyncSession, employer_id: int, limit: Optional[int] = None
) -> List[EmployerNotificationSchema]:
    """New applications on the employer's own jobs, newest first."""
    applications = await ApplicationCrud(db).get_unseen_by_employer(
        employer_id, limit or settings.NOTIFICATION_FEED_LIMIT
    )
    return [EmployerNotificationSchema.model_validate(a) for a in applications]


async def mark_seen(db: AsyncSession, application_id: int, user_id: int, role: UserRole) -> Application:
    """Set the caller's seen flag. Setting an already-set flag is a no-op."""
    application_crud = ApplicationCrud(db)
    application = await application_crud.get_with_relations(application_id)
    if application is None:
        raise NotFoundError("Application not found")

    if role == UserRole.APPLICANT:
        if application.applicant_id != user_id:
            raise ForbiddenError()
        if not application.is_seen_by_applicant:
            application.is_seen_by_applicant = True
            await application_crud.commit_session()
    elif role == UserRole.EMPLOYER:
        if application.job is None or application.job.created_by != user_id:
            raise ForbiddenError()
        if not application.is_seen_by_employer:
            application.is_seen_by_employer = True
            await application_crud.commit_session()
    else:
        raise ValidationError(f"Unknown role {role!r}")
    return application


async def auto_mark_decided_seen(db: AsyncSession, applicant_id: int) -> int:
    """Mark every decided, unseen application of the applicant as seen.

    This is the write half of ``list_my_applications``; keep callers going
    through that function so the read and the write can be split later.
    """
    marked = await ApplicationCrud(db).mark_all_decided_seen_by_applicant(applicant_id)
    if marked:
        logger.debug("Auto-marked %s application(s) seen for applicant %s", marked, applicant_id)
    return marked


async def list_my_applications(db: AsyncSession, applicant_id: int) -> List[OutApplicationSchema]:
    """All of the applicant's applications, newest first, then auto-mark decisions seen.

    The returned rows carry the seen flags as they were before the auto-mark.
    """
    application_crud = ApplicationCrud(db)
    applications = await application_crud.get_applications_by_applicant_id(applicant_id)
    result = [OutApplicationSchema.model_validate(a) for a in applications]
    await auto_mark_decided_seen(db, applicant_id)
    await application_crud.commit_session()
    return result
