"""Base store with the session handling shared by every entity store."""

from typing import Generic, Optional, Type, TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from festival_scheduling.core.database import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseStore(Generic[ModelT]):
    """
    Persistence access for one entity type.

    Stores never commit; the calling service owns the unit of work and
    decides when it ends.
    """

    model: Type[ModelT]

    def __init__(self, session: AsyncSession):
        self.session = session

    @property
    def dialect_name(self) -> str:
        return self.session.get_bind().dialect.name

    async def get(self, record_id: UUID) -> Optional[ModelT]:
        """Fetch a live record by id; soft-deleted rows count as missing."""
        query = select(self.model).where(self.model.id == record_id)
        if hasattr(self.model, "is_deleted"):
            query = query.where(self.model.is_deleted.is_(False))
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def add(self, instance: ModelT) -> ModelT:
        """Stage a new record and flush so constraint violations surface here."""
        self.session.add(instance)
        await self.session.flush()
        return instance
