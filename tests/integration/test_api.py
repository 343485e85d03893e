"""
Integration tests for the API layer.

Repositories, the Graph client and the identity resolver are replaced through
dependency_overrides so no database, broker or network is needed.
"""
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient

from src.api.dependencies import (
    get_cloud_drive,
    get_connection_repo,
    get_event_publisher,
    get_identity_resolver,
    get_video_repo,
)
from src.api.main import app
from src.application.interfaces.cloud_drive import CloudDriveError, DriveUploadSession
from src.application.interfaces.drive_connection_repository import DriveConnection
from src.application.interfaces.identity import AuthenticationError
from src.application.interfaces.video_repository import VideoRepository
from src.domain.entities.product_video import ProductVideo
from src.domain.enums.upload_status import UploadStatus
from src.infrastructure.messaging.noop_publisher import NoOpEventPublisher

AUTH = {"Authorization": "Bearer good-token"}


class InMemoryVideoRepository(VideoRepository):
    def __init__(self) -> None:
        self.videos: dict[UUID, ProductVideo] = {}

    async def save(self, video: ProductVideo) -> None:
        self.videos[video.id] = video

    async def get_for_user(self, video_id: UUID, user_id: str) -> ProductVideo | None:
        video = self.videos.get(video_id)
        return video if video is not None and video.user_id == user_id else None

    async def list_for_user(self, user_id, *, product_id=None, status=None):  # type: ignore[no-untyped-def]
        videos = [
            v
            for v in self.videos.values()
            if v.user_id == user_id
            and (product_id is None or v.product_id == product_id)
            and (status is None or v.upload_status == status)
        ]
        return sorted(videos, key=lambda v: v.created_at, reverse=True)

    async def delete(self, video_id: UUID) -> None:
        self.videos.pop(video_id, None)


def _make_identity(user_id: str = "user-1") -> MagicMock:
    identity = MagicMock()

    async def resolve(token: str) -> str:
        if token != "good-token":
            raise AuthenticationError("Invalid or expired token")
        return user_id

    identity.resolve_user_id = AsyncMock(side_effect=resolve)
    return identity


def _make_connection_repo(connected: bool = True) -> MagicMock:
    repo = MagicMock()
    repo.get_for_user = AsyncMock(
        return_value=DriveConnection(user_id="user-1", access_token="graph-token", default_folder_id="FOLDER123")
        if connected
        else None
    )
    return repo


def _make_drive() -> MagicMock:
    drive = MagicMock()
    drive.create_upload_session = AsyncMock(
        return_value=DriveUploadSession(
            upload_url="https://graph.example.com/upload/1",
            expires_at=datetime(2030, 1, 1, tzinfo=timezone.utc),
        )
    )
    drive.delete_item = AsyncMock()
    return drive


@pytest.fixture()
def video_repo() -> InMemoryVideoRepository:
    return InMemoryVideoRepository()


@pytest.fixture()
def drive() -> MagicMock:
    return _make_drive()


@pytest.fixture()
def client(video_repo: InMemoryVideoRepository, drive: MagicMock):  # type: ignore[no-untyped-def]
    app.dependency_overrides[get_video_repo] = lambda: video_repo
    app.dependency_overrides[get_connection_repo] = lambda: _make_connection_repo()
    app.dependency_overrides[get_cloud_drive] = lambda: drive
    app.dependency_overrides[get_event_publisher] = NoOpEventPublisher
    app.dependency_overrides[get_identity_resolver] = lambda: _make_identity()
    yield TestClient(app)
    app.dependency_overrides.clear()


def _complete_video(user_id: str = "user-1", product_id: str = "prod-1") -> ProductVideo:
    video = ProductVideo.create_complete(
        user_id=user_id,
        product_id=product_id,
        onedrive_file_id="01ABC",
        onedrive_path="/Videos/B0X.mp4",
        filename="B0X.mp4",
        file_size=10,
    )
    video.collect_events()
    return video


class TestAuthentication:
    def test_missing_token_is_401(self, client: TestClient) -> None:
        response = client.get("/videos")

        assert response.status_code == 401
        assert "error" in response.json()

    def test_invalid_token_is_401(self, client: TestClient) -> None:
        response = client.get("/videos", headers={"Authorization": "Bearer expired"})

        assert response.status_code == 401
        assert response.json() == {"error": "Invalid or expired token"}


class TestUploadSessionEndpoint:
    def test_creates_session_and_pending_record(
        self, client: TestClient, video_repo: InMemoryVideoRepository, drive: MagicMock
    ) -> None:
        response = client.post(
            "/onedrive-upload-session",
            json={"productId": "prod-1", "filename": "B0X.mp4", "fileSize": 26214400, "mimeType": "video/mp4"},
            headers=AUTH,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["uploadUrl"] == "https://graph.example.com/upload/1"
        assert data["expirationDateTime"].startswith("2030-01-01")
        pending = video_repo.videos[UUID(data["sessionId"])]
        assert pending.onedrive_file_id == "pending"
        assert pending.upload_status == UploadStatus.PENDING
        assert pending.user_id == "user-1"
        assert drive.create_upload_session.call_args.kwargs["folder_id"] == "FOLDER123"

    def test_not_connected_is_400(self, client: TestClient) -> None:
        app.dependency_overrides[get_connection_repo] = lambda: _make_connection_repo(connected=False)

        response = client.post(
            "/onedrive-upload-session", json={"filename": "a.mp4", "fileSize": 10}, headers=AUTH
        )

        assert response.status_code == 400
        assert response.json() == {"error": "OneDrive not connected"}

    def test_zero_size_is_rejected(self, client: TestClient) -> None:
        response = client.post(
            "/onedrive-upload-session", json={"filename": "a.mp4", "fileSize": 0}, headers=AUTH
        )

        assert response.status_code == 422

    def test_graph_failure_is_502(self, client: TestClient, drive: MagicMock) -> None:
        drive.create_upload_session.side_effect = CloudDriveError("Failed to create upload session")

        response = client.post(
            "/onedrive-upload-session", json={"filename": "a.mp4", "fileSize": 10}, headers=AUTH
        )

        assert response.status_code == 502


class TestVideosEndpoints:
    def test_post_with_session_completes_pending_record(
        self, client: TestClient, video_repo: InMemoryVideoRepository
    ) -> None:
        session = client.post(
            "/onedrive-upload-session",
            json={"productId": "prod-1", "filename": "B0X.mp4", "fileSize": 10},
            headers=AUTH,
        ).json()

        response = client.post(
            "/videos",
            json={
                "sessionId": session["sessionId"],
                "productId": "prod-1",
                "onedrive_file_id": "01ABC",
                "onedrive_path": "/Videos/B0X.mp4",
                "filename": "B0X.mp4",
                "file_size": 10,
                "mime_type": "video/mp4",
            },
            headers=AUTH,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == session["sessionId"]
        assert data["upload_status"] == "complete"
        assert data["onedrive_path"] == "/Videos/B0X.mp4"
        assert len(video_repo.videos) == 1

    def test_post_without_session_creates_record(
        self, client: TestClient, video_repo: InMemoryVideoRepository
    ) -> None:
        response = client.post(
            "/videos", json={"onedrive_file_id": "01ABC", "filename": "clip.mp4"}, headers=AUTH
        )

        assert response.status_code == 200
        assert response.json()["onedrive_path"] == "/clip.mp4"
        assert len(video_repo.videos) == 1

    def test_post_with_foreign_session_is_404(
        self, client: TestClient, video_repo: InMemoryVideoRepository
    ) -> None:
        foreign = _complete_video(user_id="user-2")
        video_repo.videos[foreign.id] = foreign

        response = client.post(
            "/videos",
            json={"sessionId": str(foreign.id), "onedrive_file_id": "01X", "filename": "x.mp4"},
            headers=AUTH,
        )

        assert response.status_code == 404

    def test_list_filters_and_counts(self, client: TestClient, video_repo: InMemoryVideoRepository) -> None:
        for video in (_complete_video(), _complete_video(product_id="prod-2"), _complete_video(user_id="user-2")):
            video_repo.videos[video.id] = video

        response = client.get("/videos", params={"productId": "prod-1", "status": "complete"}, headers=AUTH)

        assert response.status_code == 200
        data = response.json()
        assert data["totalCount"] == 1
        assert data["videos"][0]["product_id"] == "prod-1"

    def test_patch_updates_allowed_fields_only(
        self, client: TestClient, video_repo: InMemoryVideoRepository
    ) -> None:
        video = _complete_video()
        video_repo.videos[video.id] = video

        response = client.patch(
            f"/videos/{video.id}",
            json={"duration_seconds": 42, "onedrive_file_id": "hijack"},
            headers=AUTH,
        )

        assert response.status_code == 200
        assert response.json()["duration_seconds"] == 42
        assert video_repo.videos[video.id].onedrive_file_id == "01ABC"

    def test_patch_with_no_fields_is_400(self, client: TestClient, video_repo: InMemoryVideoRepository) -> None:
        video = _complete_video()
        video_repo.videos[video.id] = video

        response = client.patch(f"/videos/{video.id}", json={"filename": "ignored"}, headers=AUTH)

        assert response.status_code == 400
        assert response.json() == {"error": "No valid fields to update"}

    def test_delete_with_drive_removal(
        self, client: TestClient, video_repo: InMemoryVideoRepository, drive: MagicMock
    ) -> None:
        video = _complete_video()
        video_repo.videos[video.id] = video

        response = client.delete(f"/videos/{video.id}", params={"deleteFromOneDrive": "true"}, headers=AUTH)

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Video deleted", "deletedFromOneDrive": True}
        drive.delete_item.assert_awaited_once_with(access_token="graph-token", item_id="01ABC")
        assert video.id not in video_repo.videos

    def test_delete_survives_drive_failure(
        self, client: TestClient, video_repo: InMemoryVideoRepository, drive: MagicMock
    ) -> None:
        drive.delete_item.side_effect = CloudDriveError("Graph 500")
        video = _complete_video()
        video_repo.videos[video.id] = video

        response = client.delete(f"/videos/{video.id}", params={"deleteFromOneDrive": "true"}, headers=AUTH)

        assert response.status_code == 200
        assert response.json()["deletedFromOneDrive"] is False
        assert video.id not in video_repo.videos

    def test_delete_unknown_video_is_404(self, client: TestClient) -> None:
        response = client.delete(f"/videos/{uuid4()}", headers=AUTH)

        assert response.status_code == 404
