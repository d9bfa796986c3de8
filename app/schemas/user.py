from datetime import datetime

from pydantic import EmailStr, field_validator

from schemas.base import BaseSchema, BasePaginatedSchema
from db.tables.user import UserRole


class UserSchemaBase(BaseSchema):
    name: str
    email: EmailStr
    role: UserRole

    @field_validator("role", mode="before")
    @classmethod
    def normalize_role(cls, v):
        if isinstance(v, str):
            return v.lower()
        return v


class UserRegistrationSchema(UserSchemaBase):
    password: str

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Password is required")
        return v


class OutUserSchema(UserSchemaBase):
    id: int
    is_active: bool
    created_at: datetime
    updated_at: datetime


class PaginatedUserSchema(BasePaginatedSchema[OutUserSchema]):
    items: list[OutUserSchema]
