from __future__ import annotations
"""Scene still ORM models: Nano Banana scene images and per-scene image variants."""

import enum
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ripreel.database import Base


class AssetStatus(str, enum.Enum):
    """Generation status shared by scene images."""

    GENERATING = "generating"
    READY = "ready"
    APPROVED = "approved"
    FAILED = "failed"


class SceneVariantStatus(str, enum.Enum):
    GENERATING = "generating"
    READY = "ready"
    FAILED = "failed"
    SELECTED = "selected"


class SceneImage(Base):
    __tablename__ = "scene_images"
    __table_args__ = {
        "mysql_charset": "utf8mb4",
        "mysql_collate": "utf8mb4_unicode_ci",
    }

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    scene_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("scenes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    image_url: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)
    image_storage_path: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=AssetStatus.GENERATING.value
    )
    generation_prompt: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    n8n_job_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[Optional[datetime]] = mapped_column(
        nullable=True, server_default=func.now()
    )

    scene = relationship("Scene", back_populates="images")


class SceneImageVariant(Base):
    """One candidate still for a scene; the user selects the best one."""

    __tablename__ = "scene_image_variants"
    __table_args__ = {
        "mysql_charset": "utf8mb4",
        "mysql_collate": "utf8mb4_unicode_ci",
    }

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    scene_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("scenes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    image_url: Mapped[str] = mapped_column(String(2048), nullable=False, default="")
    storage_path: Mapped[str] = mapped_column(String(1024), nullable=False, default="")
    model: Mapped[str] = mapped_column(String(100), nullable=False)
    prompt: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=SceneVariantStatus.GENERATING.value, index=True
    )
    is_selected: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # image-to-image refinements point at the variant they started from
    parent_variant_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    generation_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    n8n_job_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[Optional[datetime]] = mapped_column(
        nullable=True, server_default=func.now()
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        nullable=True, server_default=func.now(), onupdate=func.now()
    )

    scene = relationship("Scene", back_populates="image_variants")
