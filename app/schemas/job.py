from typing import Optional
from datetime import datetime

from pydantic import ValidationInfo, field_validator, model_validator

from schemas.base import BaseSchema, BasePaginatedSchema
from db.tables.application import ApplicationStatus
from db.tables.job import JobType
from utils.clock import to_naive_utc

WINDOW_ORDER_MESSAGE = "Application end date must be after the start date"
INVALID_DATES_MESSAGE = "Invalid application date(s)"


class JobSchemaBase(BaseSchema):
    title: str
    description: str
    company: str
    location: str
    salary: str
    type: JobType


class JobWindowSchema(BaseSchema):
    application_start_date: datetime
    application_end_date: datetime

    @field_validator("application_start_date", "application_end_date")
    @classmethod
    def to_utc(cls, value: datetime) -> datetime:
        return to_naive_utc(value)

    @model_validator(mode="after")
    def check_window(self):
        if self.application_end_date < self.application_start_date:
            raise ValueError(WINDOW_ORDER_MESSAGE)
        return self


class CreateJobSchema(JobSchemaBase, JobWindowSchema):
    pass


class ReopenJobSchema(JobWindowSchema):
    pass


class UpdateJobSchema(BaseSchema):
    title: Optional[str] = None
    description: Optional[str] = None
    company: Optional[str] = None
    location: Optional[str] = None
    salary: Optional[str] = None
    type: Optional[JobType] = None
    application_start_date: Optional[datetime] = None
    application_end_date: Optional[datetime] = None

    # Only explicitly sent values reach these validators
    @field_validator("title", "description", "company", "location", "salary", "type")
    @classmethod
    def not_cleared(cls, value, info: ValidationInfo):
        if value is None:
            raise ValueError(f"{info.field_name} cannot be empty")
        return value

    @field_validator("application_start_date", "application_end_date")
    @classmethod
    def to_utc(cls, value: Optional[datetime]) -> datetime:
        if value is None:
            raise ValueError(INVALID_DATES_MESSAGE)
        return to_naive_utc(value)


class OutJobSchema(JobSchemaBase):
    id: int
    application_start_date: Optional[datetime] = None
    application_end_date: Optional[datetime] = None
    created_by: int
    created_at: datetime
    updated_at: datetime


class JobListItemSchema(OutJobSchema):
    is_open: bool = False
    applications_count: int = 0
    # Latest status of the caller's own application, only when asked for by an applicant
    application_status: Optional[ApplicationStatus] = None


class EmployerJobSchema(OutJobSchema):
    is_open: bool = False
    is_expired: bool = False
    applications_count: int = 0


class PaginatedJobSchema(BasePaginatedSchema[JobListItemSchema]):
    items: list[JobListItemSchema]


class JobSummarySchema(BaseSchema):
    id: int
    title: str
    company: Optional[str] = None
    location: Optional[str] = None
    type: Optional[JobType] = None
    salary: Optional[str] = None
    created_by: Optional[int] = None
