from datetime import datetime
from typing import Any, List, Optional, Type

from sqlalchemy import select, or_
from sqlalchemy.orm import InstrumentedAttribute

from db.crud.base import BaseCrud
from db.tables.application import Application
from db.tables.job import Job, JobType
from schemas.job import CreateJobSchema, UpdateJobSchema, JobListItemSchema, PaginatedJobSchema
from utils.clock import utcnow


class JobCrud(BaseCrud[CreateJobSchema, UpdateJobSchema, JobListItemSchema, PaginatedJobSchema, Job]):
    @property
    def _table(self) -> Type[Job]:
        return Job

    @property
    def _out_schema(self) -> Type[JobListItemSchema]:
        return JobListItemSchema

    @property
    def default_ordering(self) -> InstrumentedAttribute:
        return self._table.created_at.desc()

    @property
    def _paginated_schema(self) -> Type[PaginatedJobSchema]:
        return PaginatedJobSchema

    @staticmethod
    def listing_filters(
        search: Optional[str] = None,
        job_type: Optional[JobType] = None,
        location: Optional[str] = None,
    ) -> List[Any]:
        """WHERE criteria for the public job listing."""
        criteria = []
        if search:
            criteria.append(or_(
                Job.title.icontains(search, autoescape=True),
                Job.description.icontains(search, autoescape=True),
                Job.company.icontains(search, autoescape=True),
            ))
        if job_type:
            criteria.append(Job.type == job_type)
        if location:
            criteria.append(Job.location.icontains(location, autoescape=True))
        return criteria

    async def create_job(self, in_schema: CreateJobSchema, owner_id: int) -> Job:
        """Create a new job owned by an employer."""
        return await self.create({**in_schema.model_dump(), "created_by": owner_id})

    async def get_jobs_by_owner(
        self, owner_id: int, include_expired: bool = True, now: Optional[datetime] = None
    ) -> List[Job]:
        query = select(Job).where(Job.created_by == owner_id)
        if not include_expired:
            query = query.where(Job.application_end_date >= (now or utcnow()))
        query = query.order_by(self.default_ordering, Job.id.desc())
        result = await self._db_session.execute(query)
        return list(result.scalars().all())

    async def has_applications(self, job_id: int) -> bool:
        """Applications are never deleted, so a job that has any must stay."""
        found = await self._db_session.scalar(
            select(Application.id).where(Application.job_id == job_id).limit(1)
        )
        return found is not None
