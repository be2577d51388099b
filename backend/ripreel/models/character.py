from __future__ import annotations
"""Bible asset ORM models: characters and locations with approved reference images."""

import enum
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ripreel.database import Base


class BibleAssetStatus(str, enum.Enum):
    """Image status of a Bible asset."""

    PENDING = "pending"
    GENERATING = "generating"
    READY = "ready"
    APPROVED = "approved"
    FAILED = "failed"


class CharacterTier(str, enum.Enum):
    """How much Bible coverage a character gets.

    main: full Bible, supporting: portrait only, extra: inline scene description.
    """

    MAIN = "main"
    SUPPORTING = "supporting"
    EXTRA = "extra"


class Character(Base):
    """A character with a visual identity used across scenes."""

    __tablename__ = "project_characters"
    __table_args__ = {
        "mysql_charset": "utf8mb4",
        "mysql_collate": "utf8mb4_unicode_ci",
    }

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    project_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="supporting")
    tier: Mapped[str] = mapped_column(
        String(20), nullable=False, default=CharacterTier.SUPPORTING.value
    )
    scene_count: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    visual_dna: Mapped[str] = mapped_column(Text, nullable=False, default="")
    backstory: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    portrait_prompt_seedream: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    portrait_prompt_nano_banana: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    approved_image_url: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)
    approved_image_storage_path: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    image_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=BibleAssetStatus.PENDING.value, index=True
    )
    selected_model: Mapped[Optional[str]] = mapped_column(
        String(100), nullable=True, default="seedream-4.5-text-to-image"
    )
    n8n_job_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    raw_data: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)

    approved_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[Optional[datetime]] = mapped_column(
        nullable=True, server_default=func.now()
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        nullable=True, server_default=func.now(), onupdate=func.now()
    )

    project = relationship("Project", back_populates="characters")


class Location(Base):
    """A recurring location with its approved establishing image."""

    __tablename__ = "project_locations"
    __table_args__ = {
        "mysql_charset": "utf8mb4",
        "mysql_collate": "utf8mb4_unicode_ci",
    }

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    project_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False, default="interior")
    visual_description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    prompt_seedream: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    prompt_nano_banana: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    time_variants: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)

    approved_image_url: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)
    approved_image_storage_path: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    image_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=BibleAssetStatus.PENDING.value, index=True
    )
    selected_model: Mapped[Optional[str]] = mapped_column(
        String(100), nullable=True, default="seedream-4.5-text-to-image"
    )
    n8n_job_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    raw_data: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)

    approved_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[Optional[datetime]] = mapped_column(
        nullable=True, server_default=func.now()
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        nullable=True, server_default=func.now(), onupdate=func.now()
    )

    project = relationship("Project", back_populates="locations")
