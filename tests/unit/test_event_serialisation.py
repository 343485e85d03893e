"""Unit tests for RabbitMQ routing keys and event payloads."""
import json
from unittest.mock import patch
from uuid import uuid4

import pytest

from src.domain.events.domain_events import (
    UploadSessionCreatedEvent,
    VideoDeletedEvent,
    VideoUploadCompletedEvent,
)
from src.infrastructure.messaging.noop_publisher import NoOpEventPublisher
from src.infrastructure.messaging.rabbitmq_publisher import (
    RabbitMQPublisher,
    event_routing_key,
    serialise_event,
)


class TestSerialisation:
    def test_session_created(self) -> None:
        video_id = uuid4()
        event = UploadSessionCreatedEvent(
            video_id=video_id, user_id="user-1", product_id="prod-1", filename="a.mp4", file_size=10
        )

        payload = json.loads(serialise_event(event))

        assert event_routing_key(event) == "video.upload.session_created"
        assert payload["event_type"] == "video.upload.session_created"
        assert payload["video_id"] == str(video_id)
        assert payload["file_size"] == 10

    def test_upload_completed(self) -> None:
        event = VideoUploadCompletedEvent(user_id="u", onedrive_file_id="01ABC", onedrive_path="/V/a.mp4")

        payload = json.loads(serialise_event(event))

        assert payload["event_type"] == "video.upload.completed"
        assert payload["onedrive_path"] == "/V/a.mp4"

    def test_deleted(self) -> None:
        event = VideoDeletedEvent(user_id="u", deleted_from_drive=True)

        assert json.loads(serialise_event(event))["deleted_from_drive"] is True
        assert event_routing_key(event) == "video.deleted"


class TestPublishers:
    @pytest.mark.asyncio
    async def test_broker_failure_is_logged_not_raised(self) -> None:
        with patch(
            "src.infrastructure.messaging.rabbitmq_publisher._blocking_publish",
            side_effect=ConnectionError("broker down"),
        ):
            await RabbitMQPublisher("amqp://nowhere").publish(VideoDeletedEvent(user_id="u"))

    @pytest.mark.asyncio
    async def test_noop_publisher_keeps_events(self) -> None:
        publisher = NoOpEventPublisher()
        event = VideoDeletedEvent(user_id="u")

        await publisher.publish_many([event])

        assert publisher.published == [event]
