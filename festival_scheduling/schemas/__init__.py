"""Pydantic schemas for request/response validation."""

from .base import *
from .permission import *
from .schedule import *

__all__ = [
    # Base schemas
    "BaseSchema",
    "JSONAPIResponse",
    "JSONAPICollectionResponse",
    "JSONAPIError",
    "JSONAPIErrorResponse",
    "HealthCheckResponse",

    # Permission schemas
    "InvitationCreateRequest",
    "PermissionUpdateRequest",
    "OwnershipTransferRequest",
    "PermissionAttributes",
    "PermissionResource",
    "PermissionResponse",
    "PermissionCollectionResponse",

    # Schedule schemas
    "TimeSlotCreateRequest",
    "TimeSlotUpdateRequest",
    "TimeSlotAttributes",
    "TimeSlotResource",
    "TimeSlotResponse",
    "TimeSlotCollectionResponse",
    "EngagementCreateRequest",
    "EngagementUpdateRequest",
    "EngagementAttributes",
    "EngagementResource",
    "EngagementResponse",
    "ScheduleAttributes",
    "ScheduleResource",
    "ScheduleResponse",
    "ScheduleItemSchema",
    "ScheduleDetailAttributes",
    "ScheduleDetailResource",
    "ScheduleDetailResponse",
]
