from __future__ import annotations
"""Scene and Shot ORM models: a scene is split into shots, the unit of video generation."""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ripreel.database import Base


class Scene(Base):
    """A screenplay scene as parsed by the n8n Bible workflow."""

    __tablename__ = "scenes"
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
    scene_number: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    slugline: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    time_of_day: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    interior_exterior: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    action_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    raw_scene_data: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)

    created_at: Mapped[Optional[datetime]] = mapped_column(
        nullable=True, server_default=func.now()
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        nullable=True, server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    project = relationship("Project", back_populates="scenes")
    shots = relationship(
        "Shot",
        back_populates="scene",
        cascade="all, delete-orphan",
        order_by="Shot.shot_number",
    )
    images = relationship(
        "SceneImage", back_populates="scene", cascade="all, delete-orphan"
    )
    image_variants = relationship(
        "SceneImageVariant", back_populates="scene", cascade="all, delete-orphan"
    )
    videos = relationship(
        "SceneVideo", back_populates="scene", cascade="all, delete-orphan"
    )


class Shot(Base):
    """A sub-division of a scene; owns at most one SceneVideo."""

    __tablename__ = "scene_shots"
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
    shot_number: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    shot_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    shot_duration_seconds: Mapped[int] = mapped_column(Integer, nullable=False, default=8)

    # Prompts from the n8n breakdown
    action_prompt: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    dialogue_segment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    composition_instruction: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Approved start frame, source image for video generation
    approved_image_url: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)

    created_at: Mapped[Optional[datetime]] = mapped_column(
        nullable=True, server_default=func.now()
    )

    # Relationships
    scene = relationship("Scene", back_populates="shots")
    video = relationship(
        "SceneVideo", back_populates="shot", uselist=False, cascade="all, delete-orphan"
    )
