"""
SQLAlchemy ORM models.

Domain entities are mapped to/from these models inside the repository
implementations.
"""
import uuid
from datetime import datetime

from sqlalchemy import (
    BigInteger,
    DateTime,
    Enum as SAEnum,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from src.domain.enums.upload_status import UploadStatus
from src.infrastructure.database.connection import Base

_upload_status_enum = SAEnum(
    UploadStatus,
    name="upload_status",
    values_callable=lambda obj: [e.value for e in obj],
)


class DriveConnectionModel(Base):
    """One linked OneDrive account per user. Written by the OAuth callback."""

    __tablename__ = "user_onedrive_connections"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    access_token: Mapped[str] = mapped_column(Text, nullable=False)
    refresh_token: Mapped[str | None] = mapped_column(Text, nullable=True)
    token_expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    default_folder_id: Mapped[str | None] = mapped_column(String(256), nullable=True)
    default_folder_path: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    account_email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    connected_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


class ProductVideoModel(Base):
    __tablename__ = "product_videos"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    product_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)

    # Drive item
    onedrive_file_id: Mapped[str] = mapped_column(String(256), nullable=False)
    onedrive_path: Mapped[str] = mapped_column(String(2048), nullable=False)
    filename: Mapped[str] = mapped_column(String(512), nullable=False)
    file_size: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    mime_type: Mapped[str | None] = mapped_column(String(128), nullable=True)
    thumbnail_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    duration_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)

    upload_status: Mapped[str] = mapped_column(_upload_status_enum, nullable=False, index=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        Index("ix_product_videos_user_created", "user_id", "created_at"),
    )
