"""Declarative image model capability registry for Bible image generation.

Single source of truth for every model offered in the model selector:
provider, generation type, supported aspect ratios, resolution ceiling and
the model name the n8n image orchestrator expects.

Usage:
    from ripreel.services.model_registry import get_model_by_value
    cap = get_model_by_value("seedream-4.5-text-to-image")
    is_aspect_ratio_supported("flux-2-image-to-image", "3:4")
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------

MODEL_TYPE_T2I = "text-to-image"
MODEL_TYPE_I2I = "image-to-image"

DEFAULT_N8N_MODEL = "seedream/4.5-text-to-image"


class ShotType(str, enum.Enum):
    """Character reference framings."""

    PORTRAIT = "portrait"
    THREE_QUARTER = "three_quarter"
    FULL_BODY = "full_body"


SHOT_TYPE_LABELS: dict[ShotType, str] = {
    ShotType.PORTRAIT: "Portrait",
    ShotType.THREE_QUARTER: "3/4 View",
    ShotType.FULL_BODY: "Full Body",
}

_DEFAULT_ASPECT_RATIOS: dict[ShotType, str] = {
    ShotType.PORTRAIT: "1:1",
    ShotType.THREE_QUARTER: "4:3",
    ShotType.FULL_BODY: "9:16",
}


@dataclass(frozen=True)
class ImageModelCapability:
    """Capability descriptor for a single image model."""
    value: str
    label: str
    type: str
    provider: str
    aspect_ratios: tuple[str, ...]
    max_resolution: str
    n8n_name: str
    description: str = ""


# ---------------------------------------------------------------------------
# Registry class
# ---------------------------------------------------------------------------

class ImageModelRegistry:
    """In-memory registry of all supported Bible image models."""

    def __init__(self) -> None:
        self._models: dict[str, ImageModelCapability] = {}

    def register(self, cap: ImageModelCapability) -> None:
        self._models[cap.value] = cap

    def get(self, value: str) -> ImageModelCapability | None:
        return self._models.get(value)

    def list_models(self, model_type: str | None = None) -> list[ImageModelCapability]:
        if model_type:
            return [m for m in self._models.values() if m.type == model_type]
        return list(self._models.values())

    def list_providers(self) -> list[str]:
        return sorted({m.provider for m in self._models.values()})

    def to_dict_list(self, model_type: str | None = None) -> list[dict[str, Any]]:
        return [capability_to_dict(cap) for cap in self.list_models(model_type)]


def capability_to_dict(cap: ImageModelCapability) -> dict[str, Any]:
    return {
        "value": cap.value,
        "label": cap.label,
        "type": cap.type,
        "provider": cap.provider,
        "description": cap.description,
        "aspect_ratios": list(cap.aspect_ratios),
        "max_resolution": cap.max_resolution,
    }


# ---------------------------------------------------------------------------
# Build the global registry
# ---------------------------------------------------------------------------

MODEL_REGISTRY = ImageModelRegistry()

_ALL_RATIOS = ("1:1", "16:9", "9:16", "4:3", "3:4")
_NANO_RATIOS = ("1:1", "16:9", "9:16", "4:3")

# ByteDance
MODEL_REGISTRY.register(ImageModelCapability(
    "seedream-4.5-text-to-image", "Seedream 4.5 (Text-to-Image)", MODEL_TYPE_T2I,
    "ByteDance", _ALL_RATIOS, "4096x4096", "seedream/4.5-text-to-image",
    "4K image generation with sharp realism and cinematic quality",
))
MODEL_REGISTRY.register(ImageModelCapability(
    "seedream-4.5-image-to-image", "Seedream 4.5 (Image-to-Image)", MODEL_TYPE_I2I,
    "ByteDance", _ALL_RATIOS, "4096x4096", "seedream/4.5-edit",
    "Refine existing images, up to 14 reference images",
))

# Google DeepMind
MODEL_REGISTRY.register(ImageModelCapability(
    "nano-banana-pro-text-to-image", "Nano Banana Pro (Text-to-Image)", MODEL_TYPE_T2I,
    "Google DeepMind", _NANO_RATIOS, "2048x2048", "nano-banana-pro",
    "Gemini 3 Pro Image with advanced text rendering",
))
MODEL_REGISTRY.register(ImageModelCapability(
    "nano-banana-pro-image-to-image", "Nano Banana Pro (Image-to-Image)", MODEL_TYPE_I2I,
    "Google DeepMind", _NANO_RATIOS, "2048x2048", "nano-banana-pro",
    "Camera angle, focus, color and lighting refinement",
))

# Black Forest Labs
MODEL_REGISTRY.register(ImageModelCapability(
    "flux-2-text-to-image", "Flux.2 (Text-to-Image)", MODEL_TYPE_T2I,
    "Black Forest Labs", _ALL_RATIOS, "4096x4096", "flux-2/pro-text-to-image",
    "Open-weight model with 4MP resolution and structured prompt following",
))
MODEL_REGISTRY.register(ImageModelCapability(
    "flux-2-image-to-image", "Flux.2 (Image-to-Image)", MODEL_TYPE_I2I,
    "Black Forest Labs", _ALL_RATIOS, "4096x4096", "flux-2/pro-image-to-image",
    "Multi-image editing, up to 10 reference images",
))

logger.debug("Model registry initialized: %d models", len(MODEL_REGISTRY._models))


# ---------------------------------------------------------------------------
# Accessors
# ---------------------------------------------------------------------------

def get_model_by_value(value: str) -> ImageModelCapability | None:
    """Return the capability record for a model id, or None if unknown."""
    return MODEL_REGISTRY.get(value)


def get_models_by_type(model_type: str) -> list[ImageModelCapability]:
    return MODEL_REGISTRY.list_models(model_type)


def get_text_to_image_models() -> list[ImageModelCapability]:
    return get_models_by_type(MODEL_TYPE_T2I)


def get_image_to_image_models() -> list[ImageModelCapability]:
    return get_models_by_type(MODEL_TYPE_I2I)


def is_aspect_ratio_supported(model: str, aspect_ratio: str) -> bool:
    """False for an unknown model or an unsupported ratio. Never raises."""
    cap = get_model_by_value(model)
    if cap is None:
        return False
    return aspect_ratio in cap.aspect_ratios


def get_supported_aspect_ratios(model: str) -> list[str]:
    cap = get_model_by_value(model)
    if cap is None:
        return ["1:1"]
    return list(cap.aspect_ratios)


def get_default_aspect_ratio(shot_type: ShotType | str) -> str:
    """Default aspect ratio for a character shot type.

    Raises ValueError for anything that is not a known shot type.
    """
    return _DEFAULT_ASPECT_RATIOS[ShotType(shot_type)]


def map_model_to_n8n_name(model: str) -> str:
    """Model name understood by the n8n image orchestrator."""
    cap = get_model_by_value(model)
    return cap.n8n_name if cap else DEFAULT_N8N_MODEL
