"""
RabbitMQ event publisher.

pika is blocking, so each publish runs in the default thread-pool executor
with its own short-lived connection.
"""
import asyncio
import json
from functools import partial

import pika
import structlog

from src.application.interfaces.event_publisher import EventPublisher
from src.config import settings
from src.domain.events.domain_events import (
    DomainEvent,
    UploadSessionCreatedEvent,
    VideoDeletedEvent,
    VideoUploadCompletedEvent,
)

logger = structlog.get_logger(__name__)

EXCHANGE_NAME = "uploads.events"


def event_routing_key(event: DomainEvent) -> str:
    if isinstance(event, UploadSessionCreatedEvent):
        return "video.upload.session_created"
    if isinstance(event, VideoUploadCompletedEvent):
        return "video.upload.completed"
    if isinstance(event, VideoDeletedEvent):
        return "video.deleted"
    return "event.unknown"


def serialise_event(event: DomainEvent) -> str:
    payload: dict = {  # type: ignore[type-arg]
        "event_type": event_routing_key(event),
        "event_id": str(event.event_id),
        "occurred_at": event.occurred_at.isoformat(),
    }

    if isinstance(event, UploadSessionCreatedEvent):
        payload.update(
            {
                "video_id": str(event.video_id),
                "user_id": event.user_id,
                "product_id": event.product_id,
                "filename": event.filename,
                "file_size": event.file_size,
            }
        )
    elif isinstance(event, VideoUploadCompletedEvent):
        payload.update(
            {
                "video_id": str(event.video_id),
                "user_id": event.user_id,
                "product_id": event.product_id,
                "onedrive_file_id": event.onedrive_file_id,
                "onedrive_path": event.onedrive_path,
            }
        )
    elif isinstance(event, VideoDeletedEvent):
        payload.update(
            {
                "video_id": str(event.video_id),
                "user_id": event.user_id,
                "deleted_from_drive": event.deleted_from_drive,
            }
        )

    return json.dumps(payload, default=str)


def _blocking_publish(rabbitmq_url: str, routing_key: str, body: str) -> None:
    connection = pika.BlockingConnection(pika.URLParameters(rabbitmq_url))
    try:
        channel = connection.channel()
        channel.exchange_declare(exchange=EXCHANGE_NAME, exchange_type="topic", durable=True)
        channel.basic_publish(
            exchange=EXCHANGE_NAME,
            routing_key=routing_key,
            body=body.encode(),
            properties=pika.BasicProperties(
                delivery_mode=pika.DeliveryMode.Persistent,
                content_type="application/json",
            ),
        )
    finally:
        connection.close()


class RabbitMQPublisher(EventPublisher):
    """Publishes video upload events to a RabbitMQ topic exchange."""

    def __init__(self, rabbitmq_url: str = settings.rabbitmq_url) -> None:
        self._url = rabbitmq_url

    async def publish(self, event: DomainEvent) -> None:
        routing_key = event_routing_key(event)
        body = serialise_event(event)
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(
                None,
                partial(_blocking_publish, self._url, routing_key, body),
            )
            logger.debug("event_published", routing_key=routing_key, event_id=str(event.event_id))
        except Exception as exc:
            # Never re-raise: a lost event must not fail the request.
            logger.error(
                "failed_to_publish_event",
                routing_key=routing_key,
                event_id=str(event.event_id),
                error=str(exc),
            )
