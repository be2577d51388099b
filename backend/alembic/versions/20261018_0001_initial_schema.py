"""Initial schema: projects, Bible assets and variants, scenes, shots, scene media

Revision ID: 0001
Revises: None
Create Date: 2026-10-18 09:00:00
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_TABLE_OPTS = {"mysql_charset": "utf8mb4", "mysql_collate": "utf8mb4_unicode_ci"}


def _id() -> sa.Column:
    return sa.Column("id", sa.String(36), primary_key=True)


def _fk(name: str, target: str) -> sa.Column:
    return sa.Column(name, sa.String(36), sa.ForeignKey(target, ondelete="CASCADE"), nullable=False)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime, server_default=sa.func.now()),
    ]


def _bible_image_columns() -> list[sa.Column]:
    return [
        sa.Column("approved_image_url", sa.String(2048), nullable=True),
        sa.Column("approved_image_storage_path", sa.String(1024), nullable=True),
        sa.Column("image_status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("selected_model", sa.String(100), nullable=True),
        sa.Column("n8n_job_id", sa.String(255), nullable=True),
        sa.Column("error_message", sa.Text, nullable=True),
        sa.Column("raw_data", sa.JSON, nullable=True),
        sa.Column("approved_at", sa.DateTime, nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "projects",
        _id(),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("visual_style", sa.String(50), nullable=False, server_default="classic-noir"),
        sa.Column("status", sa.String(50), nullable=False, server_default="parsing"),
        *_timestamps(),
        **_TABLE_OPTS,
    )
    op.create_index("ix_projects_status", "projects", ["status"])

    op.create_table(
        "project_characters",
        _id(),
        _fk("project_id", "projects.id"),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="supporting"),
        sa.Column("tier", sa.String(20), nullable=False, server_default="supporting"),
        sa.Column("scene_count", sa.Integer, nullable=False, server_default="1"),
        sa.Column("visual_dna", sa.Text, nullable=False),
        sa.Column("backstory", sa.Text, nullable=True),
        sa.Column("portrait_prompt_seedream", sa.Text, nullable=True),
        sa.Column("portrait_prompt_nano_banana", sa.Text, nullable=True),
        *_bible_image_columns(),
        *_timestamps(),
        **_TABLE_OPTS,
    )
    op.create_index("ix_project_characters_project_id", "project_characters", ["project_id"])
    op.create_index("ix_project_characters_image_status", "project_characters", ["image_status"])

    op.create_table(
        "project_locations",
        _id(),
        _fk("project_id", "projects.id"),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("type", sa.String(20), nullable=False, server_default="interior"),
        sa.Column("visual_description", sa.Text, nullable=False),
        sa.Column("prompt_seedream", sa.Text, nullable=True),
        sa.Column("prompt_nano_banana", sa.Text, nullable=True),
        sa.Column("time_variants", sa.JSON, nullable=True),
        *_bible_image_columns(),
        *_timestamps(),
        **_TABLE_OPTS,
    )
    op.create_index("ix_project_locations_project_id", "project_locations", ["project_id"])
    op.create_index("ix_project_locations_image_status", "project_locations", ["image_status"])

    op.create_table(
        "bible_image_variants",
        _id(),
        _fk("project_id", "projects.id"),
        sa.Column("asset_type", sa.String(20), nullable=False),
        sa.Column("asset_id", sa.String(36), nullable=False),
        sa.Column("shot_type", sa.String(20), nullable=True),
        sa.Column("image_url", sa.String(2048), nullable=False, server_default=""),
        sa.Column("storage_path", sa.String(1024), nullable=False, server_default=""),
        sa.Column("model", sa.String(100), nullable=False),
        sa.Column("prompt", sa.Text, nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="generating"),
        sa.Column("is_selected", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("generation_order", sa.Integer, nullable=False, server_default="0"),
        sa.Column("n8n_job_id", sa.String(255), nullable=True),
        sa.Column("error_message", sa.Text, nullable=True),
        *_timestamps(),
        **_TABLE_OPTS,
    )
    op.create_index("ix_bible_image_variants_project_id", "bible_image_variants", ["project_id"])
    op.create_index("ix_bible_image_variants_asset_id", "bible_image_variants", ["asset_id"])
    op.create_index("ix_bible_image_variants_status", "bible_image_variants", ["status"])

    op.create_table(
        "scenes",
        _id(),
        _fk("project_id", "projects.id"),
        sa.Column("scene_number", sa.Integer, nullable=False, server_default="1"),
        sa.Column("slugline", sa.String(500), nullable=False, server_default=""),
        sa.Column("time_of_day", sa.String(50), nullable=True),
        sa.Column("interior_exterior", sa.String(10), nullable=True),
        sa.Column("action_text", sa.Text, nullable=True),
        sa.Column("raw_scene_data", sa.JSON, nullable=True),
        *_timestamps(),
        **_TABLE_OPTS,
    )
    op.create_index("ix_scenes_project_id", "scenes", ["project_id"])

    op.create_table(
        "scene_shots",
        _id(),
        _fk("scene_id", "scenes.id"),
        sa.Column("shot_number", sa.Integer, nullable=False, server_default="1"),
        sa.Column("shot_type", sa.String(100), nullable=True),
        sa.Column("shot_duration_seconds", sa.Integer, nullable=False, server_default="8"),
        sa.Column("action_prompt", sa.Text, nullable=True),
        sa.Column("dialogue_segment", sa.Text, nullable=True),
        sa.Column("composition_instruction", sa.Text, nullable=True),
        sa.Column("approved_image_url", sa.String(2048), nullable=True),
        sa.Column("created_at", sa.DateTime, server_default=sa.func.now()),
        **_TABLE_OPTS,
    )
    op.create_index("ix_scene_shots_scene_id", "scene_shots", ["scene_id"])

    op.create_table(
        "scene_images",
        _id(),
        _fk("scene_id", "scenes.id"),
        sa.Column("image_url", sa.String(2048), nullable=True),
        sa.Column("image_storage_path", sa.String(1024), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="generating"),
        sa.Column("generation_prompt", sa.Text, nullable=True),
        sa.Column("n8n_job_id", sa.String(255), nullable=True),
        sa.Column("error_message", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime, server_default=sa.func.now()),
        **_TABLE_OPTS,
    )
    op.create_index("ix_scene_images_scene_id", "scene_images", ["scene_id"])

    op.create_table(
        "scene_videos",
        _id(),
        _fk("scene_id", "scenes.id"),
        sa.Column(
            "shot_id", sa.String(36),
            sa.ForeignKey("scene_shots.id", ondelete="CASCADE"),
            nullable=False, unique=True,
        ),
        sa.Column("status", sa.String(20), nullable=False, server_default="queued"),
        sa.Column("dispatch_status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("video_url", sa.String(2048), nullable=True),
        sa.Column("duration_seconds", sa.Integer, nullable=True),
        sa.Column("n8n_job_id", sa.String(255), nullable=True),
        sa.Column("error_message", sa.Text, nullable=True),
        *_timestamps(),
        **_TABLE_OPTS,
    )
    op.create_index("ix_scene_videos_scene_id", "scene_videos", ["scene_id"])
    op.create_index("ix_scene_videos_status", "scene_videos", ["status"])


def downgrade() -> None:
    for table in (
        "scene_videos",
        "scene_images",
        "scene_shots",
        "scenes",
        "bible_image_variants",
        "project_locations",
        "project_characters",
        "projects",
    ):
        op.drop_table(table)
