from __future__ import annotations
"""Inbound n8n webhook payloads.

n8n sends camelCase for some workflows and snake_case for others. Every
receiver normalizes its body into one of the models below before touching
the database; when both spellings are present the snake_case value wins.
"""

import math
from typing import Any, Literal, Optional, TypeVar, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from ripreel.errors import WebhookValidationError

FAILED = "failed"


def _either(snake: str, camel: str) -> AliasChoices:
    return AliasChoices(snake, camel)


class _ResultPayload(BaseModel):
    """Common shape of a generation-finished callback."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    status: Optional[str] = None
    error_message: Optional[str] = Field(
        None, validation_alias=_either("error_message", "errorMessage")
    )

    @property
    def is_failed(self) -> bool:
        return self.status == FAILED


class LocationImageResult(_ResultPayload):
    location_id: str = Field(..., min_length=1, validation_alias=_either("location_id", "locationId"))
    variant_id: Optional[str] = Field(None, validation_alias=_either("variant_id", "variantId"))
    image_url: Optional[str] = Field(None, validation_alias=_either("image_url", "imageUrl"))
    storage_path: Optional[str] = Field(None, validation_alias=_either("storage_path", "storagePath"))


class CharacterImageResult(_ResultPayload):
    character_id: str = Field(..., min_length=1, validation_alias=_either("character_id", "characterId"))
    shot_type: Literal["portrait", "three_quarter", "full_body"] = Field(
        ..., validation_alias=_either("shot_type", "shotType")
    )
    variant_id: Optional[str] = Field(None, validation_alias=_either("variant_id", "variantId"))
    image_url: Optional[str] = Field(None, validation_alias=_either("image_url", "imageUrl"))
    storage_path: Optional[str] = Field(None, validation_alias=_either("storage_path", "storagePath"))


class SceneImageResult(_ResultPayload):
    """Nano Banana scene still. This workflow only ever sends snake_case."""

    scene_image_id: str = Field(..., min_length=1)
    image_url: Optional[str] = None
    error_message: Optional[str] = None


class SceneImageVariantResult(_ResultPayload):
    variant_id: str = Field(..., min_length=1, validation_alias=_either("variant_id", "variantId"))
    image_url: Optional[str] = Field(None, validation_alias=_either("image_url", "imageUrl"))


class VideoGeneratedResult(_ResultPayload):
    scene_video_id: str = Field(..., min_length=1, validation_alias=_either("scene_video_id", "sceneVideoId"))
    video_url: Optional[str] = Field(None, validation_alias=_either("video_url", "videoUrl"))
    duration_seconds: Optional[int] = Field(
        None, validation_alias=_either("duration_seconds", "durationSeconds")
    )

    @field_validator("duration_seconds", mode="before")
    @classmethod
    def _whole_seconds(cls, value: Any) -> Any:
        # providers report fractional lengths such as 8.5
        if isinstance(value, float) and math.isfinite(value):
            return round(value)
        return value


# ---------------------------------------------------------------------------
# Bible parse (Stage 1 output)
# ---------------------------------------------------------------------------

class ParsedCharacter(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    tier: Union[str, int] = "TIER_2"
    scene_count: Optional[int] = None
    visual_dna_reference: Optional[str] = None
    visual_dna: Optional[str] = None
    backstory: Optional[str] = None
    portrait_prompt_seedream: Optional[str] = None
    portrait_prompt_nano_banana: Optional[str] = None


class ParsedLocation(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    type: Optional[str] = None
    visual_dna: Optional[str] = None
    visual_description: Optional[str] = None
    prompt_seedream: Optional[str] = None
    prompt_nano_banana: Optional[str] = None
    time_variants: Optional[dict[str, Any]] = None


class ParsedBible(BaseModel):
    model_config = ConfigDict(extra="allow")

    characters: list[ParsedCharacter] = Field(default_factory=list)
    locations: list[ParsedLocation] = Field(default_factory=list)


class ParsedShot(BaseModel):
    model_config = ConfigDict(extra="ignore")

    shot_number: Optional[int] = None
    shot_type: Optional[str] = None
    shot_duration_seconds: int = 8
    action_prompt: Optional[str] = None
    dialogue_segment: Optional[str] = None
    composition_instruction: Optional[str] = None


class ParsedScene(BaseModel):
    """One raw scene; unknown keys are kept and stored as raw_scene_data."""

    model_config = ConfigDict(extra="allow")

    scene_number: int = 0
    slugline: str = ""
    time_of_day: Optional[str] = None
    interior_exterior: Optional[str] = None
    action_description: Optional[str] = None
    action_summary: Optional[str] = None
    shots: list[ParsedShot] = Field(default_factory=list)


class BibleParsedPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    project_id: str = Field(..., min_length=1)
    bible: ParsedBible = Field(default_factory=ParsedBible)
    raw_scenes: list[ParsedScene]


# ---------------------------------------------------------------------------
# Boundary parsing
# ---------------------------------------------------------------------------

P = TypeVar("P", bound=BaseModel)


def parse_payload(model: type[P], body: Any) -> P:
    """Validate a decoded JSON body into ``model``.

    Raises WebhookValidationError naming the first offending field.
    """
    if not isinstance(body, dict):
        raise WebhookValidationError("Request body must be a JSON object")
    try:
        return model.model_validate(body)
    except ValidationError as exc:
        err = exc.errors()[0]
        field = ".".join(str(part) for part in err["loc"]) or "payload"
        if err["type"] == "missing":
            raise WebhookValidationError(f"{field} is required") from exc
        raise WebhookValidationError(f"{field} is invalid: {err['msg']}") from exc
