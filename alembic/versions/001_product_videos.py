"""product videos and onedrive connections

Revision ID: 001_product_videos
Revises:
Create Date: 2024-01-01 00:00:00.000000
"""
from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

from alembic import op

revision: str = "001_product_videos"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    upload_status = sa.Enum("pending", "complete", "failed", name="upload_status")
    upload_status.create(op.get_bind(), checkfirst=True)

    # One linked drive per user, written by the OAuth callback
    op.create_table(
        "user_onedrive_connections",
        sa.Column("user_id", sa.String(64), primary_key=True),
        sa.Column("access_token", sa.Text(), nullable=False),
        sa.Column("refresh_token", sa.Text(), nullable=True),
        sa.Column("token_expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("default_folder_id", sa.String(256), nullable=True),
        sa.Column("default_folder_path", sa.String(1024), nullable=True),
        sa.Column("account_email", sa.String(320), nullable=True),
        sa.Column(
            "connected_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    )

    op.create_table(
        "product_videos",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("product_id", sa.String(64), nullable=True),
        # Drive item; "pending" until the client reports the uploaded file
        sa.Column("onedrive_file_id", sa.String(256), nullable=False),
        sa.Column("onedrive_path", sa.String(2048), nullable=False),
        sa.Column("filename", sa.String(512), nullable=False),
        sa.Column("file_size", sa.BigInteger(), nullable=True),
        sa.Column("mime_type", sa.String(128), nullable=True),
        sa.Column("thumbnail_url", sa.String(2048), nullable=True),
        sa.Column("duration_seconds", sa.Integer(), nullable=True),
        sa.Column("upload_status", upload_status, nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    )

    op.create_index("ix_product_videos_user_id", "product_videos", ["user_id"])
    op.create_index("ix_product_videos_product_id", "product_videos", ["product_id"])
    op.create_index("ix_product_videos_upload_status", "product_videos", ["upload_status"])
    op.create_index("ix_product_videos_user_created", "product_videos", ["user_id", "created_at"])


def downgrade() -> None:
    op.drop_table("product_videos")
    op.drop_table("user_onedrive_connections")
    sa.Enum(name="upload_status").drop(op.get_bind(), checkfirst=True)
