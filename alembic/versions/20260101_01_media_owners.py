"""
Media-owning records: stream highlights, reels, coaching centres.

- Soft-delete column `deleted_at` (indexed, plus (deleted_at, id) for the retention sweep).
- Media URL columns and JSONB media lists.
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# Revision identifiers, used by Alembic.
revision = "20260101_01_media_owners"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    status = postgresql.ENUM(
        "NOT_STARTED", "PROCESSING", "COMPLETED", "FAILED",
        name="video_processing_status", create_type=False,
    )
    status.create(op.get_bind(), checkfirst=True)

    for table, video_col, thumb_col, owner_col in (
        ("stream_highlights", "video_url", "thumbnail_url", "stream_id"),
        ("reels", "original_path", "thumbnail_path", "created_by"),
    ):
        op.create_table(
            table,
            sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
            sa.Column("title", sa.String(length=255), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column(owner_col, sa.String(length=36), nullable=True),
            sa.Column(video_col, sa.Text(), nullable=True),
            sa.Column(thumb_col, sa.Text(), nullable=True),
            sa.Column("preview_url", sa.Text(), nullable=True),
            sa.Column("master_m3u8_url", sa.Text(), nullable=True),
            sa.Column("hls_urls", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
            sa.Column("video_processing_status", status, nullable=False, server_default=sa.text("'NOT_STARTED'")),
            *_timestamps(),
        )
        op.create_index(f"ix_{table}_{owner_col}", table, [owner_col], unique=False)
        op.create_index(f"ix_{table}_deleted_at", table, ["deleted_at"], unique=False)
        op.create_index(f"ix_{table}_deleted_at_id", table, ["deleted_at", "id"], unique=False)

    op.create_table(
        "coaching_centers",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("owner_id", sa.String(length=36), nullable=True),
        sa.Column("logo", sa.Text(), nullable=True),
        sa.Column("documents", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("sport_details", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_coaching_centers_owner_id", "coaching_centers", ["owner_id"], unique=False)
    op.create_index("ix_coaching_centers_deleted_at", "coaching_centers", ["deleted_at"], unique=False)
    op.create_index("ix_coaching_centers_deleted_at_id", "coaching_centers", ["deleted_at", "id"], unique=False)


def downgrade() -> None:
    op.drop_table("coaching_centers")
    op.drop_table("reels")
    op.drop_table("stream_highlights")
    sa.Enum(name="video_processing_status").drop(op.get_bind(), checkfirst=True)
