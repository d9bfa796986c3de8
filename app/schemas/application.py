from typing import Optional
from datetime import datetime

from pydantic import Field, field_validator

from schemas.base import BaseSchema, BasePaginatedSchema
from schemas.job import JobSummarySchema
from db.tables.application import ApplicationStatus, DECISION_STATUSES


class CreateApplicationSchema(BaseSchema):
    cover_letter: Optional[str] = Field(default=None, validate_default=True)

    @field_validator("cover_letter")
    @classmethod
    def require_cover_letter(cls, v: Optional[str]) -> str:
        if v is None or not v.strip():
            raise ValueError("Please provide a cover letter")
        return v


class ApplicationStatusUpdateSchema(BaseSchema):
    status: Optional[str] = Field(default=None, validate_default=True)

    @field_validator("status")
    @classmethod
    def validate_decision(cls, v: Optional[str]) -> ApplicationStatus:
        if v not in {s.value for s in DECISION_STATUSES}:
            raise ValueError("Status must be either 'accepted' or 'rejected'")
        return ApplicationStatus(v)


class ApplicantSummarySchema(BaseSchema):
    id: int
    name: str
    email: Optional[str] = None


class OutApplicationSchema(BaseSchema):
    id: int
    job_id: int
    applicant_id: int
    cover_letter: str
    status: ApplicationStatus
    is_seen_by_applicant: bool
    is_seen_by_employer: bool
    status_updated_at: Optional[datetime] = None
    applied_at: datetime
    created_at: datetime
    updated_at: datetime
    job: Optional[JobSummarySchema] = None
    applicant: Optional[ApplicantSummarySchema] = None


class PaginatedApplicationSchema(BasePaginatedSchema[OutApplicationSchema]):
    items: list[OutApplicationSchema]


class UnseenCountSchema(BaseSchema):
    count: int


class ApplicantSeenSchema(BaseSchema):
    id: int
    is_seen_by_applicant: bool


class EmployerSeenSchema(BaseSchema):
    id: int
    is_seen_by_employer: bool
