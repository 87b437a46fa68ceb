"""Permission and invitation schemas."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import EmailStr, Field, field_validator, model_validator

from festival_scheduling.models.enums import FestivalRole, PermissionScope
from festival_scheduling.models.permission import FestivalPermission

from .base import BaseSchema, JSONAPICollectionResponse, JSONAPIResponse


def _parse_enum(enum_class, value):
    if value is None or isinstance(value, enum_class):
        return value
    if isinstance(value, bool):
        raise ValueError("Must be a name or number, not a boolean")
    if isinstance(value, int):
        return enum_class(value)
    try:
        return enum_class[str(value).upper()]
    except KeyError:
        valid = [member.name.lower() for member in enum_class]
        raise ValueError(f"Must be one of: {valid}")


class InvitationCreateRequest(BaseSchema):
    """Request schema for inviting a collaborator to a festival."""

    user_id: Optional[UUID] = Field(None, description="Invitee user UUID")
    email: Optional[EmailStr] = Field(None, description="Invitee email address")
    role: FestivalRole = Field(description="viewer, manager, or administrator")
    scope: PermissionScope = Field(
        PermissionScope.ALL,
        description="all, venues, schedule, artists, editions, or integrations",
    )

    @field_validator("role", mode="before")
    @classmethod
    def validate_role(cls, v):
        return _parse_enum(FestivalRole, v)

    @field_validator("scope", mode="before")
    @classmethod
    def validate_scope(cls, v):
        return _parse_enum(PermissionScope, v)

    @model_validator(mode="after")
    def validate_invitee(self) -> "InvitationCreateRequest":
        if (self.user_id is None) == (self.email is None):
            raise ValueError("Provide exactly one of user_id or email")
        return self

    @property
    def invitee(self):
        return self.user_id if self.user_id is not None else str(self.email)


class PermissionUpdateRequest(BaseSchema):
    """Request schema for changing a collaborator's role or scope."""

    role: Optional[FestivalRole] = Field(None, description="New role")
    scope: Optional[PermissionScope] = Field(None, description="New scope")

    @field_validator("role", mode="before")
    @classmethod
    def validate_role(cls, v):
        return _parse_enum(FestivalRole, v)

    @field_validator("scope", mode="before")
    @classmethod
    def validate_scope(cls, v):
        return _parse_enum(PermissionScope, v)


class OwnershipTransferRequest(BaseSchema):
    """Request schema for handing a festival to a new owner."""

    new_owner_id: UUID = Field(description="User UUID of the new owner")


class PermissionAttributes(BaseSchema):
    """Attributes for festival permission resource."""

    festival_id: UUID
    user_id: UUID
    role: str = Field(description="viewer, manager, administrator, or owner")
    scope: str = Field(description="Functional area the permission covers")
    status: str = Field(description="pending, active, or revoked")
    invited_by_user_id: Optional[UUID] = None
    accepted_at: Optional[datetime] = None
    revoked_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, permission: FestivalPermission) -> "PermissionAttributes":
        return cls(
            festival_id=permission.festival_id,
            user_id=permission.user_id,
            role=permission.role.name.lower(),
            scope=permission.scope.name.lower(),
            status=permission.status,
            invited_by_user_id=permission.invited_by_user_id,
            accepted_at=permission.accepted_at,
            revoked_at=permission.revoked_at,
            created_at=permission.created_at,
        )


class PermissionResource(BaseSchema):
    """JSON:API resource for festival permission."""

    type: str = Field("festival_permission", description="Resource type")
    id: UUID = Field(description="Permission UUID")
    attributes: PermissionAttributes

    @classmethod
    def from_model(cls, permission: FestivalPermission) -> "PermissionResource":
        return cls(id=permission.id, attributes=PermissionAttributes.from_model(permission))


class PermissionResponse(JSONAPIResponse):
    """Response schema for single permission."""

    data: PermissionResource


class PermissionCollectionResponse(JSONAPICollectionResponse):
    """Response schema for permission collection."""

    data: List[PermissionResource]
