from typing import Type, Optional, Any

from sqlalchemy import select
from sqlalchemy.sql.elements import UnaryExpression

from db.crud.base import BaseCrud
from db.tables.user import User as UserTable
from schemas.user import UserRegistrationSchema, OutUserSchema, PaginatedUserSchema


class UsersCrud(BaseCrud[UserRegistrationSchema, Any, OutUserSchema, PaginatedUserSchema, UserTable]):
    @property
    def _table(self) -> Type[UserTable]:
        return UserTable

    @property
    def _out_schema(self) -> Type[OutUserSchema]:
        return OutUserSchema

    @property
    def default_ordering(self) -> UnaryExpression:
        return UserTable.created_at.desc()

    @property
    def _paginated_schema(self) -> Type[PaginatedUserSchema]:
        return PaginatedUserSchema

    async def get_by_email(self, email: str) -> Optional[UserTable]:
        """Get user by email."""
        stmt = select(self._table).where(self._table.email == email)
        result = await self._db_session.execute(stmt)
        return result.scalar_one_or_none()
