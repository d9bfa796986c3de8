import abc
from typing import Any, Generic, Optional, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from db.base_class import TimestampedBase

IN_SCHEMA = TypeVar("IN_SCHEMA", bound=BaseModel)
UPDATE_SCHEMA = TypeVar("UPDATE_SCHEMA", bound=BaseModel)
OUT_SCHEMA = TypeVar("OUT_SCHEMA", bound=BaseModel)
PAGINATED_SCHEMA = TypeVar("PAGINATED_SCHEMA", bound=BaseModel)
TABLE = TypeVar("TABLE", bound=TimestampedBase)


class BaseCrud(Generic[IN_SCHEMA, UPDATE_SCHEMA, OUT_SCHEMA, PAGINATED_SCHEMA, TABLE], metaclass=abc.ABCMeta):
    def __init__(self, db_session: AsyncSession):
        self._db_session = db_session

    @property
    @abc.abstractmethod
    def _table(self) -> Type[TABLE]:
        ...

    @property
    @abc.abstractmethod
    def _out_schema(self) -> Type[OUT_SCHEMA]:
        ...

    @property
    @abc.abstractmethod
    def default_ordering(self) -> InstrumentedAttribute:
        ...

    @property
    @abc.abstractmethod
    def _paginated_schema(self) -> Type[PAGINATED_SCHEMA]:
        ...

    @property
    def _load_options(self) -> tuple:
        """Loader options applied to listings, e.g. eager-loaded relationships."""
        return ()

    async def create(self, in_data: IN_SCHEMA | dict[str, Any]) -> TABLE:
        values = in_data if isinstance(in_data, dict) else in_data.model_dump()
        entry = self._table(**values)
        self._db_session.add(entry)
        await self._db_session.flush()
        await self._db_session.refresh(entry)
        return entry

    async def get_by_id(self, entry_id: int) -> Optional[TABLE]:
        return await self._db_session.get(self._table, entry_id)

    async def get_paginated_list(self, limit: int, offset: int, *criteria: Any) -> PAGINATED_SCHEMA:
        query = select(self._table).options(*self._load_options).where(*criteria).order_by(self.default_ordering).limit(limit).offset(offset)
        result = await self._db_session.execute(query)
        total = await self._db_session.scalar(
            select(func.count()).select_from(self._table).where(*criteria)
        )
        return self._paginated_schema(
            items=[self._out_schema.model_validate(entry) for entry in result.scalars().all()],
            total=total,
            limit=limit,
            offset=offset,
        )

    async def update_by_id(self, entry_id: int, in_data: UPDATE_SCHEMA) -> Optional[TABLE]:
        entry = await self.get_by_id(entry_id)
        if entry is None:
            return None
        for field, value in in_data.model_dump(exclude_unset=True).items():
            setattr(entry, field, value)
        await self._db_session.flush()
        await self._db_session.refresh(entry)
        return entry

    async def delete_by_id(self, entry_id: int) -> None:
        entry = await self.get_by_id(entry_id)
        if entry is not None:
            await self._db_session.delete(entry)
            await self._db_session.flush()

    async def commit_session(self) -> None:
        await self._db_session.commit()

    async def rollback_session(self) -> None:
        await self._db_session.rollback()
