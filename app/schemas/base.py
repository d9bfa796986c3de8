from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class BaseSchema(BaseModel):
    # JSON uses camelCase, Python code keeps snake_case
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=False,
    )


class BasePaginatedSchema(BaseSchema, Generic[T]):
    total: int
    limit: int
    offset: int
    items: list[T]
