"""ORM model package: registers all models with Base.metadata."""

from ripreel.models.project import Project, ProjectStatus, VisualStyle
from ripreel.models.character import BibleAssetStatus, Character, CharacterTier, Location
from ripreel.models.bible_variant import BibleAssetType, BibleImageVariant, VariantStatus
from ripreel.models.scene import Scene, Shot
from ripreel.models.scene_image import (
    AssetStatus,
    SceneImage,
    SceneImageVariant,
    SceneVariantStatus,
)
from ripreel.models.video import DispatchStatus, SceneVideo, VideoStatus

__all__ = [
    "Project",
    "ProjectStatus",
    "VisualStyle",
    "Character",
    "CharacterTier",
    "Location",
    "BibleAssetStatus",
    "BibleImageVariant",
    "BibleAssetType",
    "VariantStatus",
    "Scene",
    "Shot",
    "SceneImage",
    "SceneImageVariant",
    "SceneVariantStatus",
    "AssetStatus",
    "SceneVideo",
    "VideoStatus",
    "DispatchStatus",
]
