"""Read-mostly stores for entities owned by the catalog side of the platform."""

from typing import Optional

from sqlalchemy import select

from festival_scheduling.models.festival import Artist, Festival, FestivalEdition
from festival_scheduling.models.user import User

from .base import BaseStore


class FestivalStore(BaseStore[Festival]):
    model = Festival


class EditionStore(BaseStore[FestivalEdition]):
    model = FestivalEdition


class ArtistStore(BaseStore[Artist]):
    model = Artist


class UserStore(BaseStore[User]):
    model = User

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.session.execute(
            select(User).where(
                User.email_normalized == User.normalize_email(email),
                User.is_deleted.is_(False),
            )
        )
        return result.scalar_one_or_none()
