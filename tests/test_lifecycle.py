"""Tests for application creation, re-apply eligibility and status decisions."""
from datetime import timedelta

import pytest
from sqlalchemy import func, select

from core.exceptions import (
    ApplicationWindowError,
    ConflictError,
    DuplicateApplicationError,
    ForbiddenError,
    NotFoundError,
    StatusAlreadySetError,
    ValidationError,
)
from db.crud.application import ApplicationCrud
from db.tables.application import Application, ApplicationStatus
from db.tables.user import UserRole
from services import lifecycle
from utils.clock import utcnow


@pytest.fixture
async def employer(user_factory):
    return await user_factory(UserRole.EMPLOYER, name="Erin Employer")


@pytest.fixture
async def applicant(user_factory):
    return await user_factory(UserRole.APPLICANT, name="Alex Applicant")


@pytest.fixture
async def job(job_factory, employer):
    return await job_factory(employer)


async def count_applications(db) -> int:
    return await db.scalar(select(func.count(Application.id)))


async def test_create_application_starts_pending_and_seen_by_applicant_only(db, job, applicant):
    application = await lifecycle.create_application(db, job.id, applicant.id, "I love backend work")

    assert application.status == ApplicationStatus.PENDING
    assert application.is_seen_by_applicant is True
    assert application.is_seen_by_employer is False
    assert application.status_updated_at is None
    assert application.applied_at is not None
    assert application.job.title == "Backend Engineer"
    assert application.applicant.name == "Alex Applicant"


@pytest.mark.parametrize("cover_letter", [None, "", "   "])
async def test_create_application_requires_cover_letter(db, job, applicant, cover_letter):
    with pytest.raises(ValidationError, match="Please provide a cover letter"):
        await lifecycle.create_application(db, job.id, applicant.id, cover_letter)
    assert await count_applications(db) == 0


async def test_create_application_unknown_job(db, applicant):
    with pytest.raises(NotFoundError, match="Job not found"):
        await lifecycle.create_application(db, 999, applicant.id, "Hello")


async def test_create_application_outside_window_creates_nothing(db, job, applicant):
    with pytest.raises(ApplicationWindowError, match="no longer accepting applications"):
        await lifecycle.create_application(db, job.id, applicant.id, "Late", now=utcnow() + timedelta(days=2))
    with pytest.raises(ApplicationWindowError, match="no longer accepting applications"):
        await lifecycle.create_application(db, job.id, applicant.id, "Early", now=utcnow() - timedelta(days=2))
    assert await count_applications(db) == 0


async def test_window_bounds_are_inclusive(db, job, applicant):
    application = await lifecycle.create_application(
        db, job.id, applicant.id, "Just in time", now=job.application_end_date
    )
    assert application.status == ApplicationStatus.PENDING


async def test_create_application_with_missing_window_bound(db, job_factory, employer, applicant):
    job = await job_factory(employer, application_end_date=None)
    with pytest.raises(ApplicationWindowError, match="invalid application dates"):
        await lifecycle.create_application(db, job.id, applicant.id, "Hello")


async def test_pending_application_blocks_reapply(db, job, applicant):
    await lifecycle.create_application(db, job.id, applicant.id, "First")
    with pytest.raises(ConflictError, match="still pending"):
        await lifecycle.create_application(db, job.id, applicant.id, "Second")
    assert await count_applications(db) == 1


async def test_accepted_application_blocks_reapply(db, job, employer, applicant):
    application = await lifecycle.create_application(db, job.id, applicant.id, "First")
    await lifecycle.update_status(db, application.id, employer.id, "accepted")
    with pytest.raises(ConflictError, match="already been accepted"):
        await lifecycle.create_application(db, job.id, applicant.id, "Again")


async def test_rejected_applicant_can_reapply_exactly_once(db, job, employer, applicant):
    first = await lifecycle.create_application(db, job.id, applicant.id, "First")
    await lifecycle.update_status(db, first.id, employer.id, ApplicationStatus.REJECTED)

    second = await lifecycle.create_application(db, job.id, applicant.id, "Second try")
    assert second.id != first.id
    assert second.status == ApplicationStatus.PENDING
    assert second.is_seen_by_applicant is True
    assert second.is_seen_by_employer is False

    with pytest.raises(ConflictError, match="still pending"):
        await lifecycle.create_application(db, job.id, applicant.id, "Third")
    # rejected row is kept as history
    assert await count_applications(db) == 2


async def test_store_rejects_second_active_application(db, job, applicant, monkeypatch):
    """Two creates racing past the eligibility check: the index decides."""
    await lifecycle.create_application(db, job.id, applicant.id, "First")

    async def no_previous_application(self, applicant_id, job_id):
        return None

    monkeypatch.setattr(ApplicationCrud, "get_latest_application", no_previous_application)
    with pytest.raises(DuplicateApplicationError):
        await lifecycle.create_application(db, job.id, applicant.id, "Racing duplicate")
    assert await count_applications(db) == 1


async def test_update_status_sets_decision_fields(db, job, employer, applicant):
    application = await lifecycle.create_application(db, job.id, applicant.id, "Hi")

    updated = await lifecycle.update_status(db, application.id, employer.id, "accepted")

    assert updated.status == ApplicationStatus.ACCEPTED
    assert updated.status_updated_at is not None
    assert updated.is_seen_by_applicant is False
    assert updated.is_seen_by_employer is False


@pytest.mark.parametrize("first", ["accepted", "rejected"])
@pytest.mark.parametrize("second", ["accepted", "rejected"])
async def test_status_is_write_once(db, job, employer, applicant, first, second):
    application = await lifecycle.create_application(db, job.id, applicant.id, "Hi")
    await lifecycle.update_status(db, application.id, employer.id, first)

    with pytest.raises(StatusAlreadySetError):
        await lifecycle.update_status(db, application.id, employer.id, second)

    reloaded = await ApplicationCrud(db).get_with_relations(application.id)
    assert reloaded.status == ApplicationStatus(first)


async def test_update_status_requires_job_owner(db, job, applicant, user_factory):
    other_employer = await user_factory(UserRole.EMPLOYER)
    application = await lifecycle.create_application(db, job.id, applicant.id, "Hi")

    with pytest.raises(ForbiddenError):
        await lifecycle.update_status(db, application.id, other_employer.id, "accepted")

    reloaded = await ApplicationCrud(db).get_with_relations(application.id)
    assert reloaded.status == ApplicationStatus.PENDING


@pytest.mark.parametrize("status", ["pending", "withdrawn", "", None])
async def test_update_status_rejects_invalid_targets(db, job, employer, applicant, status):
    application = await lifecycle.create_application(db, job.id, applicant.id, "Hi")
    with pytest.raises(ValidationError, match="either 'accepted' or 'rejected'"):
        await lifecycle.update_status(db, application.id, employer.id, status)


async def test_update_status_unknown_application(db, employer):
    with pytest.raises(NotFoundError, match="Application not found"):
        await lifecycle.update_status(db, 12345, employer.id, "accepted")


async def test_conditional_decision_only_applies_to_pending(db, job, employer, applicant):
    application = await lifecycle.create_application(db, job.id, applicant.id, "Hi")
    crud = ApplicationCrud(db)

    assert await crud.decide_status(application.id, ApplicationStatus.ACCEPTED, utcnow()) is True
    assert await crud.decide_status(application.id, ApplicationStatus.REJECTED, utcnow()) is False


async def test_list_job_applications_is_owner_only(db, job, employer, applicant, user_factory):
    await lifecycle.create_application(db, job.id, applicant.id, "Hi")
    other_employer = await user_factory(UserRole.EMPLOYER)

    applications = await lifecycle.list_job_applications(db, job.id, employer.id)
    assert [a.applicant_id for a in applications] == [applicant.id]

    with pytest.raises(ForbiddenError):
        await lifecycle.list_job_applications(db, job.id, other_employer.id)
    with pytest.raises(NotFoundError):
        await lifecycle.list_job_applications(db, 999, employer.id)
