from __future__ import annotations
"""Project ORM model: top-level container for a film production."""

import enum
import uuid
from datetime import datetime

from sqlalchemy import String, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ripreel.database import Base


class ProjectStatus(str, enum.Enum):
    """Project workflow statuses, in pipeline order."""

    PARSING = "parsing"
    BIBLE_REVIEW = "bible_review"
    SCENE_VALIDATION = "scene_validation"
    ASSET_GENERATION = "asset_generation"
    TIMELINE_REVIEW = "timeline_review"
    FINAL_REVIEW = "final_review"
    ASSEMBLING = "assembling"
    COMPLETED = "completed"
    FAILED = "failed"


class VisualStyle(str, enum.Enum):
    """Visual style presets offered at project creation."""

    WES_ANDERSON = "wes-anderson"
    CLASSIC_NOIR = "classic-noir"
    SEVENTIES_CRIME_DRAMA = "70s-crime-drama"


class Project(Base):
    """A film project with its Bible, scenes and generated media."""

    __tablename__ = "projects"
    __table_args__ = {
        "mysql_charset": "utf8mb4",
        "mysql_collate": "utf8mb4_unicode_ci",
    }

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    visual_style: Mapped[str] = mapped_column(
        String(50), nullable=False, default=VisualStyle.CLASSIC_NOIR.value
    )
    status: Mapped[str] = mapped_column(
        String(50), nullable=False, default=ProjectStatus.PARSING.value, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    characters = relationship(
        "Character", back_populates="project", cascade="all, delete-orphan"
    )
    locations = relationship(
        "Location", back_populates="project", cascade="all, delete-orphan"
    )
    variants = relationship(
        "BibleImageVariant", back_populates="project", cascade="all, delete-orphan"
    )
    scenes = relationship(
        "Scene",
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="Scene.scene_number",
    )
