"""Notification items as a tagged union on ``kind``.

Each variant carries only what its toast needs. Message text, visual
variant, detail route and seen-marking all dispatch on the tag.
"""
from datetime import datetime
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel

APPLICANT_STATUS = "applicant_status"
EMPLOYER_APPLY = "employer_apply"


class _Item(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class JobRef(_Item):
    id: int
    title: Optional[str] = None
    company: Optional[str] = None


class ApplicantRef(_Item):
    id: int
    name: Optional[str] = None


class ApplicantStatusNotification(_Item):
    kind: Literal["applicant_status"] = APPLICANT_STATUS
    id: int
    status: str
    status_updated_at: Optional[datetime] = None
    job: Optional[JobRef] = None

    @property
    def key(self) -> str:
        return f"{self.kind}:{self.id}"


class EmployerApplyNotification(_Item):
    kind: Literal["employer_apply"] = EMPLOYER_APPLY
    id: int
    applied_at: Optional[datetime] = None
    job: Optional[JobRef] = None
    applicant: Optional[ApplicantRef] = None

    @property
    def key(self) -> str:
        return f"{self.kind}:{self.id}"


Notification = Annotated[
    Union[ApplicantStatusNotification, EmployerApplyNotification],
    Field(discriminator="kind"),
]

_notification_adapter = TypeAdapter(Notification)


def parse_notification(payload: dict, kind: str) -> Notification:
    """Tag a raw feed item with its kind and validate it."""
    return _notification_adapter.validate_python({**payload, "kind": kind})


def _job_title(item: Notification) -> str:
    if item.job and item.job.title:
        return f'"{item.job.title}"'
    return "your job"


def build_message(item: Notification) -> str:
    if isinstance(item, EmployerApplyNotification):
        applicant_name = (item.applicant.name if item.applicant else None) or "Someone"
        return f"👤 {applicant_name} applied for {_job_title(item)}"

    title = _job_title(item)
    if item.status == "accepted":
        return f"🎉 Your application for {title} was ACCEPTED"
    if item.status == "rejected":
        return f"❌ Your application for {title} was REJECTED"
    return f"Update on {title}"


def toast_variant(item: Notification) -> str:
    if isinstance(item, ApplicantStatusNotification):
        if item.status == "accepted":
            return "success"
        if item.status == "rejected":
            return "error"
    return "info"


def detail_path(item: Notification) -> Optional[str]:
    """Where acknowledging the toast takes the user."""
    if isinstance(item, EmployerApplyNotification):
        return f"/jobs/{item.job.id}/applicants" if item.job else None
    return "/my-applications"
