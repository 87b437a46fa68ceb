"""Tests for resolving resources up to their festival."""

import uuid

import pytest
from sqlalchemy import update

from festival_scheduling.models import Stage, Venue
from festival_scheduling.services.scheduling_service import SchedulingService
from festival_scheduling.stores.resolvers import ResourceResolver

from .conftest import utc


@pytest.fixture
def resolver(db_session):
    return ResourceResolver(db_session)


@pytest.mark.asyncio
async def test_resolves_every_resource_kind(db_session, resolver, seed):
    service = SchedulingService(db_session)
    slot = await service.create_time_slot(
        seed.main_stage_id, seed.manager_schedule_id, seed.edition_id, utc(18), utc(19)
    )
    engagement = await service.create_engagement(
        slot.id, seed.manager_schedule_id, seed.headliner_id
    )

    assert await resolver.festival_for_stage(seed.main_stage_id) == seed.festival_id
    assert await resolver.festival_for_edition(seed.edition_id) == seed.festival_id
    assert await resolver.festival_for_time_slot(slot.id) == seed.festival_id
    assert await resolver.festival_for_engagement(engagement.id) == seed.festival_id


@pytest.mark.asyncio
async def test_unknown_ids_resolve_to_none(resolver, seed):
    unknown = uuid.uuid4()

    assert await resolver.festival_for_stage(unknown) is None
    assert await resolver.festival_for_edition(unknown) is None
    assert await resolver.festival_for_time_slot(unknown) is None
    assert await resolver.festival_for_engagement(unknown) is None


@pytest.mark.asyncio
async def test_deleted_link_breaks_the_chain(db_session, resolver, seed):
    await db_session.execute(
        update(Venue).where(Venue.id == seed.venue_id).values(is_deleted=True)
    )
    await db_session.commit()

    assert await resolver.festival_for_stage(seed.main_stage_id) is None


@pytest.mark.asyncio
async def test_deleted_stage_resolves_to_none(db_session, resolver, seed):
    await db_session.execute(
        update(Stage).where(Stage.id == seed.tent_stage_id).values(is_deleted=True)
    )
    await db_session.commit()

    assert await resolver.festival_for_stage(seed.tent_stage_id) is None
    assert await resolver.festival_for_stage(seed.main_stage_id) == seed.festival_id
