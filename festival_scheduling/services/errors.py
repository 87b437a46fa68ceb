"""Service error taxonomy.

Every failure a service can report is one of four kinds: not found,
forbidden, validation (with conflict as a refinement), or infrastructure.
The API layer maps the kind to a status code; the code enum travels to
clients unchanged.
"""

from enum import Enum
from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError

from .business_rules import ValidationError


class ErrorCode(Enum):
    """Machine-readable error codes."""

    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    FESTIVAL_NOT_FOUND = "FESTIVAL_NOT_FOUND"
    EDITION_NOT_FOUND = "EDITION_NOT_FOUND"
    STAGE_NOT_FOUND = "STAGE_NOT_FOUND"
    TIME_SLOT_NOT_FOUND = "TIME_SLOT_NOT_FOUND"
    ENGAGEMENT_NOT_FOUND = "ENGAGEMENT_NOT_FOUND"
    ARTIST_NOT_FOUND = "ARTIST_NOT_FOUND"
    PERMISSION_NOT_FOUND = "PERMISSION_NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    CONFLICT = "CONFLICT"
    TIME_SLOT_OVERLAP = "TIME_SLOT_OVERLAP"
    TIME_SLOT_ALREADY_ENGAGED = "TIME_SLOT_ALREADY_ENGAGED"
    PERMISSION_ALREADY_EXISTS = "PERMISSION_ALREADY_EXISTS"
    INVITATION_ALREADY_PROCESSED = "INVITATION_ALREADY_PROCESSED"
    STORE_FAILURE = "STORE_FAILURE"


class ServiceError(Exception):
    """Base exception for service errors."""

    code = ErrorCode.VALIDATION_FAILED

    def __init__(self, message: str, code: Optional[ErrorCode] = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


# Not found


class NotFoundError(ServiceError):
    """Raised when a referenced resource does not exist or is soft-deleted."""

    code = ErrorCode.RESOURCE_NOT_FOUND
    resource = "Resource"

    def __init__(self, resource_id):
        super().__init__(f"{self.resource} {resource_id} not found")
        self.resource_id = resource_id


class FestivalNotFoundError(NotFoundError):
    code = ErrorCode.FESTIVAL_NOT_FOUND
    resource = "Festival"


class EditionNotFoundError(NotFoundError):
    code = ErrorCode.EDITION_NOT_FOUND
    resource = "Edition"


class StageNotFoundError(NotFoundError):
    code = ErrorCode.STAGE_NOT_FOUND
    resource = "Stage"


class TimeSlotNotFoundError(NotFoundError):
    code = ErrorCode.TIME_SLOT_NOT_FOUND
    resource = "Time slot"


class EngagementNotFoundError(NotFoundError):
    code = ErrorCode.ENGAGEMENT_NOT_FOUND
    resource = "Engagement"


class ArtistNotFoundError(NotFoundError):
    code = ErrorCode.ARTIST_NOT_FOUND
    resource = "Artist"


class PermissionNotFoundError(NotFoundError):
    code = ErrorCode.PERMISSION_NOT_FOUND
    resource = "Permission"


class UserNotFoundError(NotFoundError):
    code = ErrorCode.USER_NOT_FOUND
    resource = "User"


# Authorization


class ForbiddenError(ServiceError):
    """Raised when the acting user lacks the role or scope for an action."""

    code = ErrorCode.FORBIDDEN


# Validation and conflicts


class DomainValidationError(ServiceError):
    """Raised when a request breaks a domain rule."""

    code = ErrorCode.VALIDATION_FAILED

    def __init__(
        self,
        message: str,
        validation_errors: Optional[List[ValidationError]] = None,
        code: Optional[ErrorCode] = None,
    ):
        super().__init__(message, code)
        self.validation_errors = validation_errors or []


class ConflictError(DomainValidationError):
    """Raised when a request collides with existing state."""

    code = ErrorCode.CONFLICT


class TimeSlotOverlapError(ConflictError):
    code = ErrorCode.TIME_SLOT_OVERLAP

    def __init__(self, stage_id: Optional[UUID] = None, edition_id: Optional[UUID] = None):
        super().__init__("Time slot overlaps with an existing slot on this stage")
        self.stage_id = stage_id
        self.edition_id = edition_id


class TimeSlotAlreadyEngagedError(ConflictError):
    code = ErrorCode.TIME_SLOT_ALREADY_ENGAGED

    def __init__(self, time_slot_id: Optional[UUID] = None):
        super().__init__("Time slot already has an engagement")
        self.time_slot_id = time_slot_id


class PermissionAlreadyExistsError(ConflictError):
    code = ErrorCode.PERMISSION_ALREADY_EXISTS

    def __init__(self, message: str = "User already has a permission or pending invitation for this festival"):
        super().__init__(message)


class InvitationAlreadyProcessedError(ConflictError):
    code = ErrorCode.INVITATION_ALREADY_PROCESSED


# Infrastructure


class InfrastructureError(ServiceError):
    """Raised when the store fails; never retried by the services."""

    code = ErrorCode.STORE_FAILURE


def translate_integrity_error(exc: IntegrityError) -> ServiceError:
    """Map a constraint violation raised at flush/commit to the matching domain error."""
    message = str(exc.orig) if exc.orig is not None else str(exc)

    if "ck_time_slots_valid_range" in message:
        return DomainValidationError("Time slot must end after it starts")
    if "ex_time_slots_no_overlap" in message:
        return TimeSlotOverlapError()
    if "uq_engagements_active_time_slot" in message or "engagements.time_slot_id" in message:
        return TimeSlotAlreadyEngagedError()
    if "uq_festival_permissions_owner" in message:
        return ConflictError("Festival already has an owner")
    if "uq_festival_permissions_user_festival" in message or "festival_permissions.user_id" in message:
        return PermissionAlreadyExistsError()
    # SQLite names the indexed columns rather than the index.
    if "festival_permissions.festival_id" in message:
        return ConflictError("Festival already has an owner")
    return ConflictError("Request conflicts with existing data")
