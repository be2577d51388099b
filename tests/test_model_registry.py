"""Image model capability registry."""
import pytest

from ripreel.services.model_registry import (
    MODEL_REGISTRY,
    ShotType,
    get_default_aspect_ratio,
    get_image_to_image_models,
    get_model_by_value,
    get_supported_aspect_ratios,
    get_text_to_image_models,
    is_aspect_ratio_supported,
    map_model_to_n8n_name,
)


def test_registry_has_all_models():
    assert len(MODEL_REGISTRY.list_models()) == 6
    assert len(get_text_to_image_models()) == 3
    assert len(get_image_to_image_models()) == 3
    assert MODEL_REGISTRY.list_providers() == sorted(["ByteDance", "Google DeepMind", "Black Forest Labs"])


def test_lookup():
    cap = get_model_by_value("seedream-4.5-text-to-image")
    assert cap.provider == "ByteDance"
    assert cap.max_resolution == "4096x4096"
    assert get_model_by_value("dall-e-3") is None


def test_aspect_ratio_support():
    assert is_aspect_ratio_supported("flux-2-image-to-image", "3:4")
    assert not is_aspect_ratio_supported("nano-banana-pro-text-to-image", "3:4")
    assert not is_aspect_ratio_supported("unknown-model", "1:1")
    assert get_supported_aspect_ratios("unknown-model") == ["1:1"]


def test_default_aspect_ratio_per_shot_type():
    assert get_default_aspect_ratio(ShotType.PORTRAIT) == "1:1"
    assert get_default_aspect_ratio("three_quarter") == "4:3"
    assert get_default_aspect_ratio("full_body") == "9:16"
    with pytest.raises(ValueError):
        get_default_aspect_ratio("close_up")


def test_n8n_name_mapping():
    assert map_model_to_n8n_name("seedream-4.5-image-to-image") == "seedream/4.5-edit"
    assert map_model_to_n8n_name("nano-banana-pro-image-to-image") == "nano-banana-pro"
    assert map_model_to_n8n_name("something-else") == "seedream/4.5-text-to-image"
