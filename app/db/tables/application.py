import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import Enum as SQLEnum, Text, ForeignKey, Index, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base_class import TimestampedBase
from utils.clock import utcnow


class ApplicationStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


ACTIVE_STATUSES = (ApplicationStatus.PENDING, ApplicationStatus.ACCEPTED)
DECISION_STATUSES = (ApplicationStatus.ACCEPTED, ApplicationStatus.REJECTED)

# Enum members are stored by name
_ACTIVE_ONLY = text("status IN ('PENDING', 'ACCEPTED')")


class Application(TimestampedBase):
    __table_args__ = (
        # One active (pending/accepted) application per job and applicant; rejected rows are history
        Index(
            "uq_application_active_job_applicant",
            "job_id",
            "applicant_id",
            unique=True,
            postgresql_where=_ACTIVE_ONLY,
            sqlite_where=_ACTIVE_ONLY,
        ),
    )

    job_id: Mapped[int] = mapped_column(ForeignKey("job.id"), index=True)
    applicant_id: Mapped[int] = mapped_column(ForeignKey("user.id"), index=True)
    cover_letter: Mapped[str] = mapped_column(type_=Text())
    status: Mapped[ApplicationStatus] = mapped_column(SQLEnum(ApplicationStatus), default=ApplicationStatus.PENDING)
    is_seen_by_applicant: Mapped[bool] = mapped_column(default=False)
    is_seen_by_employer: Mapped[bool] = mapped_column(default=False)
    status_updated_at: Mapped[Optional[datetime]] = mapped_column(default=None)
    applied_at: Mapped[datetime] = mapped_column(default=utcnow)

    # Relationships
    job = relationship("Job", back_populates="applications")
    applicant = relationship("User", back_populates="applications")
