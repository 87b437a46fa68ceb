"""Schedule change notifications for downstream fan-out."""

import asyncio
import json
import logging
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Protocol
from uuid import UUID

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from festival_scheduling.core.settings import get_settings

logger = logging.getLogger(__name__)


class ChangeType(Enum):
    """Schedule change types."""
    SCHEDULE_PUBLISHED = "schedule_published"


@dataclass
class ScheduleChange:
    """What changed on an edition's schedule."""
    change_type: ChangeType
    version: int
    message: str
    published_by: Optional[UUID] = None
    time_slot_id: Optional[UUID] = None
    engagement_id: Optional[UUID] = None


@dataclass
class ScheduleChangedEvent:
    """Wire structure sent to the notification queue."""
    edition_id: str
    change_type: str
    version: int
    message: str
    data: Dict[str, Any] = field(default_factory=dict)

    # Auto-generated fields
    event_id: str = None
    timestamp: str = None
    schema_version: str = "1.0"

    def __post_init__(self):
        if self.event_id is None:
            self.event_id = str(uuid.uuid4())
        if self.timestamp is None:
            self.timestamp = datetime.now(timezone.utc).isoformat()

    @classmethod
    def from_change(cls, edition_id: UUID, change: ScheduleChange) -> "ScheduleChangedEvent":
        data = {
            key: str(value)
            for key, value in (
                ("published_by", change.published_by),
                ("time_slot_id", change.time_slot_id),
                ("engagement_id", change.engagement_id),
            )
            if value is not None
        }
        return cls(
            edition_id=str(edition_id),
            change_type=change.change_type.value,
            version=change.version,
            message=change.message,
            data=data,
        )


class ScheduleNotifier(Protocol):
    """Anything that can be told an edition's schedule changed."""

    async def notify_schedule_changed(self, edition_id: UUID, change: ScheduleChange) -> bool:
        ...


class ScheduleEventPublisher:
    """Publishes schedule change events to SQS, or logs them in mock mode."""

    def __init__(self):
        settings = get_settings()
        self.event_bus_type = settings.event_bus_type
        self.queue_url = settings.sqs_event_queue_url
        self.sqs_client = None

        if self.event_bus_type == "sqs":
            self._initialize_sqs()

    def _initialize_sqs(self):
        settings = get_settings()
        try:
            self.sqs_client = boto3.client(
                "sqs",
                region_name=settings.aws_region,
                aws_access_key_id=settings.aws_access_key_id,
                aws_secret_access_key=settings.aws_secret_access_key,
            )
            logger.info("SQS client initialized for schedule notifications")
        except (BotoCoreError, ValueError) as e:
            logger.error(f"Failed to initialize SQS client: {e}")
            self.sqs_client = None

    async def notify_schedule_changed(self, edition_id: UUID, change: ScheduleChange) -> bool:
        event = ScheduleChangedEvent.from_change(edition_id, change)
        if self.event_bus_type == "sqs":
            return await self._publish_to_sqs(event)
        return await self._publish_mock(event)

    async def _publish_to_sqs(self, event: ScheduleChangedEvent) -> bool:
        if not self.sqs_client or not self.queue_url:
            logger.warning("SQS not properly configured, skipping schedule notification")
            return False

        try:
            response = await asyncio.to_thread(
                self.sqs_client.send_message,
                QueueUrl=self.queue_url,
                MessageBody=json.dumps(asdict(event), default=str),
                MessageAttributes={
                    "change_type": {
                        "StringValue": event.change_type,
                        "DataType": "String",
                    },
                    "edition_id": {
                        "StringValue": event.edition_id,
                        "DataType": "String",
                    },
                },
                MessageGroupId=event.edition_id,  # For FIFO queues
                MessageDeduplicationId=event.event_id,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"SQS error publishing event {event.event_id}: {e}")
            return False

        logger.info(f"Published event {event.event_id} to SQS: {response['MessageId']}")
        return True

    async def _publish_mock(self, event: ScheduleChangedEvent) -> bool:
        logger.info(f"MOCK EVENT: {event.change_type} - {event.event_id}")
        logger.debug(f"Event data: {json.dumps(asdict(event), indent=2, default=str)}")
        return True


_event_publisher: Optional[ScheduleEventPublisher] = None


def get_event_publisher() -> ScheduleEventPublisher:
    """Get the process-wide schedule event publisher."""
    global _event_publisher
    if _event_publisher is None:
        _event_publisher = ScheduleEventPublisher()
    return _event_publisher
