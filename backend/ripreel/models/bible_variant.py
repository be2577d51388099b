from __future__ import annotations
"""BibleImageVariant ORM model: candidate generated images for a Bible asset."""

import enum
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ripreel.database import Base


class VariantStatus(str, enum.Enum):
    GENERATING = "generating"
    READY = "ready"
    FAILED = "failed"


class BibleAssetType(str, enum.Enum):
    CHARACTER = "character"
    LOCATION = "location"


class BibleImageVariant(Base):
    """One candidate image for a character or location.

    ``asset_id`` points into project_characters or project_locations depending
    on ``asset_type``. At most one variant per asset is selected.
    """

    __tablename__ = "bible_image_variants"
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
    asset_type: Mapped[str] = mapped_column(String(20), nullable=False)
    asset_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    shot_type: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    image_url: Mapped[str] = mapped_column(String(2048), nullable=False, default="")
    storage_path: Mapped[str] = mapped_column(String(1024), nullable=False, default="")
    model: Mapped[str] = mapped_column(String(100), nullable=False)
    prompt: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=VariantStatus.GENERATING.value, index=True
    )
    is_selected: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    generation_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    n8n_job_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[Optional[datetime]] = mapped_column(
        nullable=True, server_default=func.now()
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        nullable=True, server_default=func.now(), onupdate=func.now()
    )

    project = relationship("Project", back_populates="variants")
