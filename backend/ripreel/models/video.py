from __future__ import annotations
"""SceneVideo ORM model: one video-generation job for a shot."""

import enum
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ripreel.database import Base


class VideoStatus(str, enum.Enum):
    """Generation state of a SceneVideo.

    queued → generating (claimed by the queue reconciler)
    generating → ready | failed (webhook, or failed dispatch)
    """

    QUEUED = "queued"
    GENERATING = "generating"
    READY = "ready"
    FAILED = "failed"


class DispatchStatus(str, enum.Enum):
    """Outcome of the outbound request that starts the job."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    FAILED = "failed"


class SceneVideo(Base):
    __tablename__ = "scene_videos"
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
    shot_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("scene_shots.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=VideoStatus.QUEUED.value, index=True
    )
    dispatch_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=DispatchStatus.PENDING.value
    )
    video_url: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)
    duration_seconds: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    n8n_job_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[Optional[datetime]] = mapped_column(
        nullable=True, server_default=func.now()
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        nullable=True, server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    scene = relationship("Scene", back_populates="videos")
    shot = relationship("Shot", back_populates="video")
