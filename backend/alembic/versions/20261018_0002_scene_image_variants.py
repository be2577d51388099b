"""Scene image variants: candidate stills per scene

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-18 15:30:00
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "0002"
down_revision: Union[str, None] = "0001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "scene_image_variants",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "scene_id", sa.String(36),
            sa.ForeignKey("scenes.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("image_url", sa.String(2048), nullable=False, server_default=""),
        sa.Column("storage_path", sa.String(1024), nullable=False, server_default=""),
        sa.Column("model", sa.String(100), nullable=False),
        sa.Column("prompt", sa.Text, nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="generating"),
        sa.Column("is_selected", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("parent_variant_id", sa.String(36), nullable=True),
        sa.Column("generation_order", sa.Integer, nullable=False, server_default="0"),
        sa.Column("n8n_job_id", sa.String(255), nullable=True),
        sa.Column("error_message", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime, server_default=sa.func.now()),
        mysql_charset="utf8mb4",
        mysql_collate="utf8mb4_unicode_ci",
    )
    op.create_index("ix_scene_image_variants_scene_id", "scene_image_variants", ["scene_id"])
    op.create_index("ix_scene_image_variants_status", "scene_image_variants", ["status"])


def downgrade() -> None:
    op.drop_table("scene_image_variants")
