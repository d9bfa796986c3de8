import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import Enum as SQLEnum, String, Text, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base_class import TimestampedBase


class JobType(str, enum.Enum):
    FULL_TIME = "Full-time"
    PART_TIME = "Part-time"
    REMOTE = "Remote"


class Job(TimestampedBase):
    title: Mapped[str] = mapped_column(type_=String(255))
    description: Mapped[str] = mapped_column(type_=Text())
    company: Mapped[str] = mapped_column(type_=String(255))
    location: Mapped[str] = mapped_column(type_=String(255))
    salary: Mapped[str] = mapped_column(type_=String(100))
    type: Mapped[JobType] = mapped_column(SQLEnum(JobType))
    # Nullable so rows imported without a window stay loadable; they never accept applications
    application_start_date: Mapped[Optional[datetime]] = mapped_column(default=None)
    application_end_date: Mapped[Optional[datetime]] = mapped_column(default=None)

    # Foreign Keys
    created_by: Mapped[int] = mapped_column(ForeignKey("user.id"), index=True)

    # Relationships
    owner = relationship("User", back_populates="jobs")
    applications = relationship("Application", back_populates="job")
