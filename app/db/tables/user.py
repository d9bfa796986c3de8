import enum

from sqlalchemy import Enum as SQLEnum, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base_class import TimestampedBase


class UserRole(str, enum.Enum):
    APPLICANT = "applicant"
    EMPLOYER = "employer"


class User(TimestampedBase):
    name: Mapped[str] = mapped_column(type_=String(255))
    email: Mapped[str] = mapped_column(type_=String(255), unique=True, index=True)
    hashed_password: Mapped[str] = mapped_column(type_=String(255))
    role: Mapped[UserRole] = mapped_column(SQLEnum(UserRole), default=UserRole.APPLICANT)
    is_active: Mapped[bool] = mapped_column(default=True)

    # Relationships
    applications = relationship("Application", back_populates="applicant")
    jobs = relationship("Job", back_populates="owner")
