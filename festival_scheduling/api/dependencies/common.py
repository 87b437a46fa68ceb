"""Common FastAPI dependencies."""

from uuid import UUID

from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from festival_scheduling.core.database import get_db_session
from festival_scheduling.services.events import get_event_publisher
from festival_scheduling.services.invitation_service import InvitationService
from festival_scheduling.services.publishing_service import PublishingService
from festival_scheduling.services.scheduling_service import SchedulingService


def get_current_user_id(request: Request) -> UUID:
    """Get the acting user's ID, as set by the authentication middleware."""
    user_id = getattr(request.state, "user_id", None)
    if not user_id:
        raise HTTPException(
            status_code=401,
            detail={
                "code": "AUTHENTICATION_REQUIRED",
                "message": "User not authenticated",
            },
        )
    return UUID(str(user_id))


def get_invitation_service(session: AsyncSession = Depends(get_db_session)) -> InvitationService:
    """Get invitation service instance."""
    return InvitationService(session)


def get_scheduling_service(session: AsyncSession = Depends(get_db_session)) -> SchedulingService:
    """Get scheduling service instance."""
    return SchedulingService(session)


def get_publishing_service(session: AsyncSession = Depends(get_db_session)) -> PublishingService:
    """Get publishing service instance."""
    return PublishingService(session, notifier=get_event_publisher())
