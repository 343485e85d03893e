from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.application.interfaces.video_repository import VideoRepository
from src.domain.entities.product_video import ProductVideo
from src.domain.enums.upload_status import UploadStatus
from src.infrastructure.database.models import ProductVideoModel


def _to_domain(model: ProductVideoModel) -> ProductVideo:
    return ProductVideo(
        id=model.id,
        user_id=model.user_id,
        product_id=model.product_id,
        onedrive_file_id=model.onedrive_file_id,
        onedrive_path=model.onedrive_path,
        filename=model.filename,
        file_size=model.file_size,
        mime_type=model.mime_type,
        thumbnail_url=model.thumbnail_url,
        duration_seconds=model.duration_seconds,
        upload_status=UploadStatus(model.upload_status),
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def _to_model(video: ProductVideo) -> ProductVideoModel:
    return ProductVideoModel(
        id=video.id,
        user_id=video.user_id,
        product_id=video.product_id,
        onedrive_file_id=video.onedrive_file_id,
        onedrive_path=video.onedrive_path,
        filename=video.filename,
        file_size=video.file_size,
        mime_type=video.mime_type,
        thumbnail_url=video.thumbnail_url,
        duration_seconds=video.duration_seconds,
        upload_status=video.upload_status.value,
        created_at=video.created_at,
        updated_at=video.updated_at,
    )


class SqlAlchemyVideoRepository(VideoRepository):
    """SQLAlchemy implementation for product video persistence."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def save(self, video: ProductVideo) -> None:
        model = await self._session.get(ProductVideoModel, video.id)
        if model is None:
            self._session.add(_to_model(video))
        else:
            model.product_id = video.product_id
            model.onedrive_file_id = video.onedrive_file_id
            model.onedrive_path = video.onedrive_path
            model.filename = video.filename
            model.file_size = video.file_size
            model.mime_type = video.mime_type
            model.thumbnail_url = video.thumbnail_url
            model.duration_seconds = video.duration_seconds
            model.upload_status = video.upload_status.value
            model.updated_at = video.updated_at
        await self._session.flush()

    async def get_for_user(self, video_id: UUID, user_id: str) -> ProductVideo | None:
        result = await self._session.execute(
            select(ProductVideoModel).where(
                ProductVideoModel.id == video_id,
                ProductVideoModel.user_id == user_id,
            )
        )
        model = result.scalar_one_or_none()
        return _to_domain(model) if model is not None else None

    async def list_for_user(
        self,
        user_id: str,
        *,
        product_id: str | None = None,
        status: UploadStatus | None = None,
    ) -> list[ProductVideo]:
        query = select(ProductVideoModel).where(ProductVideoModel.user_id == user_id)
        if product_id is not None:
            query = query.where(ProductVideoModel.product_id == product_id)
        if status is not None:
            query = query.where(ProductVideoModel.upload_status == status.value)

        result = await self._session.execute(query.order_by(ProductVideoModel.created_at.desc()))
        return [_to_domain(m) for m in result.scalars().all()]

    async def delete(self, video_id: UUID) -> None:
        await self._session.execute(delete(ProductVideoModel).where(ProductVideoModel.id == video_id))
        await self._session.flush()
