"""Time slot, engagement, and schedule schemas."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import Field, field_validator

from festival_scheduling.models.engagement import Engagement
from festival_scheduling.models.schedule import Schedule
from festival_scheduling.models.time_slot import TimeSlot
from festival_scheduling.services.publishing_service import ScheduleDetail

from .base import BaseSchema, JSONAPICollectionResponse, JSONAPIResponse


def _require_offset(v: Optional[datetime]) -> Optional[datetime]:
    if v is not None and v.tzinfo is None:
        raise ValueError("Timestamp must include a UTC offset")
    return v


# Time slots

class TimeSlotCreateRequest(BaseSchema):
    """Request schema for booking a time slot on a stage."""

    edition_id: UUID = Field(description="Edition the slot belongs to")
    start_utc: datetime = Field(description="Inclusive start, with offset")
    end_utc: datetime = Field(description="Exclusive end, with offset")
    slot_type: str = Field("performance", description="performance or changeover")

    @field_validator("start_utc", "end_utc")
    @classmethod
    def validate_offset(cls, v):
        return _require_offset(v)


class TimeSlotUpdateRequest(BaseSchema):
    """Request schema for moving or resizing a time slot."""

    start_utc: Optional[datetime] = None
    end_utc: Optional[datetime] = None
    slot_type: Optional[str] = None

    @field_validator("start_utc", "end_utc")
    @classmethod
    def validate_offset(cls, v):
        return _require_offset(v)


class TimeSlotAttributes(BaseSchema):
    stage_id: UUID
    edition_id: UUID
    start_utc: datetime
    end_utc: datetime
    slot_type: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TimeSlotResource(BaseSchema):
    """JSON:API resource for time slot."""

    type: str = Field("time_slot", description="Resource type")
    id: UUID
    attributes: TimeSlotAttributes

    @classmethod
    def from_model(cls, time_slot: TimeSlot) -> "TimeSlotResource":
        return cls(id=time_slot.id, attributes=TimeSlotAttributes.model_validate(time_slot))


class TimeSlotResponse(JSONAPIResponse):
    data: TimeSlotResource


class TimeSlotCollectionResponse(JSONAPICollectionResponse):
    data: List[TimeSlotResource]


# Engagements

class EngagementCreateRequest(BaseSchema):
    """Request schema for booking an artist into a slot."""

    artist_id: UUID = Field(description="Artist UUID")
    notes: Optional[str] = Field(None, max_length=4000, description="Organizer notes")


class EngagementUpdateRequest(BaseSchema):
    """Request schema for changing the artist or notes of an engagement."""

    artist_id: Optional[UUID] = None
    notes: Optional[str] = Field(None, max_length=4000)


class EngagementAttributes(BaseSchema):
    time_slot_id: UUID
    artist_id: UUID
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class EngagementResource(BaseSchema):
    """JSON:API resource for engagement."""

    type: str = Field("engagement", description="Resource type")
    id: UUID
    attributes: EngagementAttributes

    @classmethod
    def from_model(cls, engagement: Engagement) -> "EngagementResource":
        return cls(id=engagement.id, attributes=EngagementAttributes.model_validate(engagement))


class EngagementResponse(JSONAPIResponse):
    data: EngagementResource


# Schedules

class ScheduleAttributes(BaseSchema):
    edition_id: UUID
    version: int
    is_published: bool
    published_at: Optional[datetime] = None
    published_by: Optional[UUID] = None


class ScheduleResource(BaseSchema):
    """JSON:API resource for an edition's schedule."""

    type: str = Field("schedule", description="Resource type")
    id: Optional[UUID] = Field(None, description="Schedule UUID; null until first publish")
    attributes: ScheduleAttributes

    @classmethod
    def from_model(cls, schedule: Schedule) -> "ScheduleResource":
        return cls(id=schedule.id, attributes=ScheduleAttributes.model_validate(schedule))


class ScheduleResponse(JSONAPIResponse):
    data: ScheduleResource


class ScheduleItemSchema(BaseSchema):
    time_slot_id: UUID
    stage_id: UUID
    stage_name: str
    start_utc: datetime
    end_utc: datetime
    slot_type: str
    engagement_id: Optional[UUID] = None
    artist_id: Optional[UUID] = None
    artist_name: Optional[str] = None
    notes: Optional[str] = None


class ScheduleDetailAttributes(ScheduleAttributes):
    items: List[ScheduleItemSchema]


class ScheduleDetailResource(BaseSchema):
    type: str = Field("schedule_detail", description="Resource type")
    id: UUID = Field(description="Edition UUID")
    attributes: ScheduleDetailAttributes

    @classmethod
    def from_detail(cls, detail: ScheduleDetail) -> "ScheduleDetailResource":
        return cls(id=detail.edition_id, attributes=ScheduleDetailAttributes.model_validate(detail))


class ScheduleDetailResponse(JSONAPIResponse):
    data: ScheduleDetailResource
