import logging
from datetime import datetime
from typing import Optional, List, Type, Any

from sqlalchemy import select, update, func, and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload, InstrumentedAttribute

from core.exceptions import DuplicateApplicationError
from db.crud.base import BaseCrud
from db.tables.application import Application, ApplicationStatus
from db.tables.job import Job
from schemas.application import (
    CreateApplicationSchema,
    ApplicationStatusUpdateSchema,
    OutApplicationSchema,
    PaginatedApplicationSchema,
)

logger = logging.getLogger(__name__)


class ApplicationCrud(BaseCrud[CreateApplicationSchema, ApplicationStatusUpdateSchema, OutApplicationSchema, PaginatedApplicationSchema, Application]):
    @property
    def _table(self) -> Type[Application]:
        return Application

    @property
    def _out_schema(self) -> Type[OutApplicationSchema]:
        return OutApplicationSchema

    @property
    def default_ordering(self) -> InstrumentedAttribute:
        return self._table.created_at.desc()

    @property
    def _paginated_schema(self) -> Type[PaginatedApplicationSchema]:
        return PaginatedApplicationSchema

    @property
    def _load_options(self) -> tuple:
        return selectinload(Application.job), selectinload(Application.applicant)

    async def create_application(self, values: dict[str, Any]) -> Application:
        """Insert a new application; the active-application index rejects duplicates."""
        try:
            return await self.create(values)
        except IntegrityError as exc:
            await self._db_session.rollback()
            logger.info(
                "Rejected duplicate active application job=%s applicant=%s: %s",
                values.get("job_id"), values.get("applicant_id"), exc.orig,
            )
            raise DuplicateApplicationError() from exc

    async def get_with_relations(self, application_id: int) -> Optional[Application]:
        query = select(Application).where(Application.id == application_id).options(
            selectinload(Application.job),
            selectinload(Application.applicant),
        ).execution_options(populate_existing=True)
        result = await self._db_session.execute(query)
        return result.scalars().first()

    async def get_latest_application(self, applicant_id: int, job_id: int) -> Optional[Application]:
        """Most recent application of an applicant for a job, by creation order."""
        query = select(Application).where(
            and_(
                Application.applicant_id == applicant_id,
                Application.job_id == job_id
            )
        ).order_by(Application.created_at.desc(), Application.id.desc()).limit(1)
        result = await self._db_session.execute(query)
        return result.scalars().first()

    async def get_applications_by_applicant_id(self, applicant_id: int) -> List[Application]:
        query = select(Application).where(Application.applicant_id == applicant_id).options(
            selectinload(Application.job),
            selectinload(Application.applicant),
        ).order_by(Application.created_at.desc(), Application.id.desc())
        result = await self._db_session.execute(query)
        return list(result.scalars().all())

    async def get_applications_by_job_id(self, job_id: int) -> List[Application]:
        query = select(Application).where(Application.job_id == job_id).options(
            selectinload(Application.job),
            selectinload(Application.applicant),
        ).order_by(Application.created_at.desc(), Application.id.desc())
        result = await self._db_session.execute(query)
        return list(result.scalars().all())

    async def decide_status(self, application_id: int, status: ApplicationStatus, decided_at: datetime) -> bool:
        """Move a pending application to a decision. Returns False if it was no longer pending."""
        stmt = update(Application).where(
            and_(
                Application.id == application_id,
                Application.status == ApplicationStatus.PENDING
            )
        ).values(
            status=status,
            status_updated_at=decided_at,
            is_seen_by_applicant=False,
        ).execution_options(synchronize_session=False)
        result = await self._db_session.execute(stmt)
        return result.rowcount == 1

    def _unseen_by_applicant(self, applicant_id: int):
        return and_(
            Application.applicant_id == applicant_id,
            Application.status != ApplicationStatus.PENDING,
            Application.is_seen_by_applicant == False
        )

    async def count_unseen_by_applicant(self, applicant_id: int) -> int:
        query = select(func.count(Application.id)).where(self._unseen_by_applicant(applicant_id))
        return await self._db_session.scalar(query) or 0

    async def get_unseen_by_applicant(self, applicant_id: int, limit: int) -> List[Application]:
        query = select(Application).where(self._unseen_by_applicant(applicant_id)).options(
            selectinload(Application.job)
        ).order_by(
            Application.status_updated_at.desc(),
            Application.created_at.desc(),
            Application.id.desc(),
        ).limit(limit)
        result = await self._db_session.execute(query)
        return list(result.scalars().all())

    async def get_unseen_by_employer(self, employer_id: int, limit: int) -> List[Application]:
        """Unseen applications on jobs owned by the employer, scoped before the limit applies."""
        owned_job_ids = select(Job.id).where(Job.created_by == employer_id)
        query = select(Application).where(
            and_(
                Application.job_id.in_(owned_job_ids),
                Application.is_seen_by_employer == False
            )
        ).options(
            selectinload(Application.job),
            selectinload(Application.applicant),
        ).order_by(
            Application.applied_at.desc(),
            Application.created_at.desc(),
            Application.id.desc(),
        ).limit(limit)
        result = await self._db_session.execute(query)
        return list(result.scalars().all())

    async def mark_all_decided_seen_by_applicant(self, applicant_id: int) -> int:
        stmt = update(Application).where(
            self._unseen_by_applicant(applicant_id)
        ).values(is_seen_by_applicant=True).execution_options(synchronize_session="fetch")
        result = await self._db_session.execute(stmt)
        return result.rowcount

    async def count_by_job_ids(self, job_ids: List[int]) -> dict[int, int]:
        if not job_ids:
            return {}
        query = select(Application.job_id, func.count(Application.id)).where(
            Application.job_id.in_(job_ids)
        ).group_by(Application.job_id)
        result = await self._db_session.execute(query)
        return {job_id: count for job_id, count in result.all()}

    async def get_latest_statuses(self, applicant_id: int, job_ids: List[int]) -> dict[int, ApplicationStatus]:
        """Status of the applicant's most recent application per job; jobs never applied to are absent."""
        if not job_ids:
            return {}
        query = select(Application.job_id, Application.status).where(
            and_(
                Application.applicant_id == applicant_id,
                Application.job_id.in_(job_ids)
            )
        ).order_by(Application.created_at.desc(), Application.id.desc())
        result = await self._db_session.execute(query)
        statuses: dict[int, ApplicationStatus] = {}
        for job_id, status in result.all():
            statuses.setdefault(job_id, status)
        return statuses
