from typing import Optional
from datetime import datetime

from schemas.base import BaseSchema
from db.tables.application import ApplicationStatus


class NotificationJobSchema(BaseSchema):
    id: int
    title: str
    company: Optional[str] = None


class NotificationApplicantSchema(BaseSchema):
    id: int
    name: str


class ApplicantNotificationSchema(BaseSchema):
    """Status decision on one of the applicant's applications."""
    id: int
    status: ApplicationStatus
    status_updated_at: Optional[datetime] = None
    job: Optional[NotificationJobSchema] = None


class EmployerNotificationSchema(BaseSchema):
    """New application on one of the employer's jobs."""
    id: int
    job: Optional[NotificationJobSchema] = None
    applicant: Optional[NotificationApplicantSchema] = None
    applied_at: datetime
    created_at: datetime
