"""Unit-of-work handling shared by the services."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from .errors import InfrastructureError, ServiceError, translate_integrity_error

logger = logging.getLogger(__name__)


class BaseService:
    """
    A service call is one transaction on ``self.db``.

    Writes are staged through the stores and made durable by a single commit
    at the end. Constraint violations raised while flushing or committing
    become domain conflicts; any other database failure becomes an
    ``InfrastructureError``. Both roll the transaction back first.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    @asynccontextmanager
    async def _writing(self) -> AsyncIterator[None]:
        try:
            yield
        except ServiceError:
            await self.db.rollback()
            raise
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(f"Constraint violation: {e.orig}")
            raise translate_integrity_error(e) from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Database error: {e}")
            raise InfrastructureError("The data store rejected the transaction") from e

    async def _commit(self) -> None:
        async with self._writing():
            await self.db.commit()
