"""Model registry API: image models offered for Bible generation."""

from __future__ import annotations

from typing import Any, Literal

from fastapi import APIRouter, HTTPException, Query

from ripreel.services.model_registry import (
    MODEL_REGISTRY,
    capability_to_dict,
    get_model_by_value,
)

router = APIRouter()


@router.get("/image")
async def list_image_models(
    model_type: Literal["text-to-image", "image-to-image"] | None = Query(None, alias="type"),
) -> dict[str, Any]:
    """List image models, optionally filtered by generation type."""
    models = MODEL_REGISTRY.to_dict_list(model_type)
    return {
        "models": models,
        "providers": MODEL_REGISTRY.list_providers(),
        "total": len(models),
    }


@router.get("/image/{value}")
async def get_image_model(value: str) -> dict[str, Any]:
    cap = get_model_by_value(value)
    if cap is None:
        raise HTTPException(status_code=404, detail=f"Unknown model: {value}")
    return capability_to_dict(cap)
