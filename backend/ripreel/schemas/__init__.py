"""Pydantic v2 schemas package."""

from ripreel.schemas.project import (
    ProjectCreate,
    ProjectRead,
    ProjectStatusRead,
    ProjectUpdate,
)
from ripreel.schemas.scene import (
    SceneBulkCreate,
    SceneCreate,
    SceneRead,
    ShotCreate,
    ShotRead,
    ShotUpdate,
)
from ripreel.schemas.bible import (
    BibleProjectRequest,
    BibleRead,
    CharacterRead,
    LocationRead,
    VariantRead,
)
from ripreel.schemas.video import QueueResult, VideoRead, VideoStats

__all__ = [
    "ProjectCreate",
    "ProjectRead",
    "ProjectStatusRead",
    "ProjectUpdate",
    "SceneBulkCreate",
    "SceneCreate",
    "SceneRead",
    "ShotCreate",
    "ShotRead",
    "ShotUpdate",
    "BibleProjectRequest",
    "BibleRead",
    "CharacterRead",
    "LocationRead",
    "VariantRead",
    "QueueResult",
    "VideoRead",
    "VideoStats",
]
