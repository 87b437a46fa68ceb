"""Time slot, engagement, and schedule endpoints."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from festival_scheduling.api.dependencies.common import (
    get_current_user_id,
    get_publishing_service,
    get_scheduling_service,
)
from festival_scheduling.schemas.schedule import (
    EngagementCreateRequest,
    EngagementResource,
    EngagementResponse,
    EngagementUpdateRequest,
    ScheduleDetailResource,
    ScheduleDetailResponse,
    ScheduleResource,
    ScheduleResponse,
    TimeSlotCollectionResponse,
    TimeSlotCreateRequest,
    TimeSlotResource,
    TimeSlotResponse,
    TimeSlotUpdateRequest,
)
from festival_scheduling.services.publishing_service import PublishingService
from festival_scheduling.services.scheduling_service import SchedulingService

logger = logging.getLogger(__name__)
router = APIRouter()


# Time slots

@router.post(
    "/stages/{stage_id}/time-slots",
    response_model=TimeSlotResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_time_slot(
    stage_id: UUID,
    request: TimeSlotCreateRequest,
    user_id: UUID = Depends(get_current_user_id),
    service: SchedulingService = Depends(get_scheduling_service),
):
    """
    Book a time slot on a stage.

    Returns 409 when the interval overlaps an active slot on the same stage
    and edition.
    """
    time_slot = await service.create_time_slot(
        stage_id=stage_id,
        actor_id=user_id,
        edition_id=request.edition_id,
        start_utc=request.start_utc,
        end_utc=request.end_utc,
        slot_type=request.slot_type,
    )
    return TimeSlotResponse(data=TimeSlotResource.from_model(time_slot))


@router.get("/stages/{stage_id}/time-slots", response_model=TimeSlotCollectionResponse)
async def list_time_slots(
    stage_id: UUID,
    edition_id: UUID = Query(..., description="Edition UUID"),
    service: SchedulingService = Depends(get_scheduling_service),
):
    time_slots = await service.list_time_slots(stage_id, edition_id)
    return TimeSlotCollectionResponse(
        data=[TimeSlotResource.from_model(t) for t in time_slots],
        meta={"total": len(time_slots)},
    )


@router.get("/time-slots/{time_slot_id}", response_model=TimeSlotResponse)
async def get_time_slot(
    time_slot_id: UUID,
    service: SchedulingService = Depends(get_scheduling_service),
):
    time_slot = await service.get_time_slot(time_slot_id)
    return TimeSlotResponse(data=TimeSlotResource.from_model(time_slot))


@router.patch("/time-slots/{time_slot_id}", response_model=TimeSlotResponse)
async def update_time_slot(
    time_slot_id: UUID,
    request: TimeSlotUpdateRequest,
    user_id: UUID = Depends(get_current_user_id),
    service: SchedulingService = Depends(get_scheduling_service),
):
    time_slot = await service.update_time_slot(
        time_slot_id,
        user_id,
        start_utc=request.start_utc,
        end_utc=request.end_utc,
        slot_type=request.slot_type,
    )
    return TimeSlotResponse(data=TimeSlotResource.from_model(time_slot))


@router.delete("/time-slots/{time_slot_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_time_slot(
    time_slot_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Delete a time slot and its engagement."""
    await service.delete_time_slot(time_slot_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Engagements

@router.post(
    "/time-slots/{time_slot_id}/engagement",
    response_model=EngagementResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_engagement(
    time_slot_id: UUID,
    request: EngagementCreateRequest,
    user_id: UUID = Depends(get_current_user_id),
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Book an artist into a time slot. A slot holds at most one engagement."""
    engagement = await service.create_engagement(
        time_slot_id, user_id, request.artist_id, notes=request.notes
    )
    return EngagementResponse(data=EngagementResource.from_model(engagement))


@router.get("/engagements/{engagement_id}", response_model=EngagementResponse)
async def get_engagement(
    engagement_id: UUID,
    service: SchedulingService = Depends(get_scheduling_service),
):
    engagement = await service.get_engagement(engagement_id)
    return EngagementResponse(data=EngagementResource.from_model(engagement))


@router.patch("/engagements/{engagement_id}", response_model=EngagementResponse)
async def update_engagement(
    engagement_id: UUID,
    request: EngagementUpdateRequest,
    user_id: UUID = Depends(get_current_user_id),
    service: SchedulingService = Depends(get_scheduling_service),
):
    engagement = await service.update_engagement(
        engagement_id, user_id, artist_id=request.artist_id, notes=request.notes
    )
    return EngagementResponse(data=EngagementResource.from_model(engagement))


@router.delete("/engagements/{engagement_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_engagement(
    engagement_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    service: SchedulingService = Depends(get_scheduling_service),
):
    await service.delete_engagement(engagement_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Schedules

@router.get("/editions/{edition_id}/schedule", response_model=ScheduleResponse)
async def get_schedule(
    edition_id: UUID,
    service: PublishingService = Depends(get_publishing_service),
):
    schedule = await service.get_schedule(edition_id)
    return ScheduleResponse(data=ScheduleResource.from_model(schedule))


@router.get("/editions/{edition_id}/schedule/detail", response_model=ScheduleDetailResponse)
async def get_schedule_detail(
    edition_id: UUID,
    service: PublishingService = Depends(get_publishing_service),
):
    """Every active slot of the edition with its stage and engaged artist."""
    detail = await service.get_schedule_detail(edition_id)
    return ScheduleDetailResponse(data=ScheduleDetailResource.from_detail(detail))


@router.post("/editions/{edition_id}/schedule/publish", response_model=ScheduleResponse)
async def publish_schedule(
    edition_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    service: PublishingService = Depends(get_publishing_service),
):
    """Publish the edition's schedule, bumping its version on every republish."""
    schedule = await service.publish_schedule(edition_id, user_id)
    return ScheduleResponse(data=ScheduleResource.from_model(schedule))
