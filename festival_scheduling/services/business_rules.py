"""Business rules and validation logic for scheduling and permissions."""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional

from festival_scheduling.models.enums import FestivalRole, PermissionScope, SlotType

logger = logging.getLogger(__name__)

MAX_SLOT_DURATION = timedelta(hours=24)


@dataclass
class ValidationError:
    """Validation error."""
    field: str
    code: str
    message: str


@dataclass
class ValidationResult:
    """Validation result."""
    is_valid: bool
    errors: List[ValidationError] = field(default_factory=list)

    @classmethod
    def from_errors(cls, errors: List[ValidationError]) -> "ValidationResult":
        return cls(is_valid=len(errors) == 0, errors=errors)


class TimeSlotRules:
    """Business rules for time slot intervals."""

    @staticmethod
    def validate_interval(
        start_utc: datetime,
        end_utc: datetime,
        slot_type: Optional[str] = None,
    ) -> ValidationResult:
        """Validate a half-open ``[start_utc, end_utc)`` interval."""
        errors = []

        for name, value in (("start_utc", start_utc), ("end_utc", end_utc)):
            if value.tzinfo is None:
                errors.append(ValidationError(
                    field=name,
                    code="TIMEZONE_REQUIRED",
                    message="Times must carry a UTC offset"
                ))
        if errors:
            return ValidationResult.from_errors(errors)

        if end_utc <= start_utc:
            errors.append(ValidationError(
                field="end_utc",
                code="INVALID_TIME_RANGE",
                message="End time must be after start time"
            ))
        elif end_utc - start_utc > MAX_SLOT_DURATION:
            errors.append(ValidationError(
                field="end_utc",
                code="SLOT_TOO_LONG",
                message="A time slot cannot exceed 24 hours"
            ))

        if slot_type is not None and slot_type not in {t.value for t in SlotType}:
            errors.append(ValidationError(
                field="slot_type",
                code="INVALID_SLOT_TYPE",
                message="Slot type must be 'performance' or 'changeover'"
            ))

        return ValidationResult.from_errors(errors)


class PermissionRules:
    """Business rules for granting and changing festival roles."""

    @staticmethod
    def validate_invitation(role: FestivalRole) -> ValidationResult:
        """Validate the role requested for an invitation."""
        errors = []
        if role == FestivalRole.OWNER:
            errors.append(ValidationError(
                field="role",
                code="OWNER_NOT_INVITABLE",
                message="Ownership is transferred, never granted by invitation"
            ))
        return ValidationResult.from_errors(errors)

    @staticmethod
    def validate_role_change(
        current_role: FestivalRole,
        new_role: Optional[FestivalRole],
        new_scope: Optional[PermissionScope],
    ) -> ValidationResult:
        """Validate a role/scope update on an existing permission."""
        errors = []
        if new_role is None and new_scope is None:
            errors.append(ValidationError(
                field="role",
                code="NOTHING_TO_UPDATE",
                message="Provide a role or a scope to update"
            ))
        if current_role == FestivalRole.OWNER:
            errors.append(ValidationError(
                field="role",
                code="OWNER_IMMUTABLE",
                message="The owner's permission can only change through an ownership transfer"
            ))
        if new_role == FestivalRole.OWNER:
            errors.append(ValidationError(
                field="role",
                code="OWNER_NOT_ASSIGNABLE",
                message="Use an ownership transfer to make someone the owner"
            ))
        return ValidationResult.from_errors(errors)

    @staticmethod
    def effective_scope(role: FestivalRole, requested: PermissionScope) -> PermissionScope:
        """Administrators and owners always hold the All scope."""
        if role.has_full_access:
            if requested != PermissionScope.ALL:
                logger.info(
                    f"Scope {requested.name} discarded for role {role.name}; stored as ALL"
                )
            return PermissionScope.ALL
        return requested
