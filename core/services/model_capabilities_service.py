"""Model capability lookup for multimodal support."""

from __future__ import annotations

from typing import Optional


# Projector families Ollama reports for image-capable models
VISION_FAMILIES = ("clip", "mllama")


class ModelCapabilitiesService:
    """Resolve vision support from server metadata with heuristic fallbacks."""

    def __init__(self) -> None:
        self._model_supports_images: dict[str, bool] = {}

    def supports_images(
        self,
        model_name: str,
        families: Optional[list[str]] = None,
        capabilities: object = None,
    ) -> bool:
        model_name = (model_name or "").strip()
        if not model_name:
            return False

        reported = self._extract_supports_images(families, capabilities)
        if reported is not None:
            # Server metadata always wins over earlier guesses
            self._model_supports_images[model_name] = reported
            return reported

        cached = self._model_supports_images.get(model_name)
        if cached is not None:
            return cached

        heuristic = self._heuristic_supports_images(model_name)
        self._model_supports_images[model_name] = heuristic
        return heuristic

    @staticmethod
    def _extract_supports_images(
        families: Optional[list[str]], capabilities: object
    ) -> Optional[bool]:
        normalized = ModelCapabilitiesService._normalize_modalities(capabilities)
        if normalized:
            return any(item in normalized for item in ("vision", "image", "multimodal"))

        if families:
            lowered = [str(family).lower() for family in families]
            if any(family in lowered for family in VISION_FAMILIES):
                return True

        return None

    @staticmethod
    def _normalize_modalities(value: object) -> list[str]:
        if isinstance(value, list):
            return [str(item).lower() for item in value]
        if isinstance(value, dict):
            return [
                str(key).lower()
                for key, enabled in value.items()
                if bool(enabled)
            ]
        if isinstance(value, str):
            return [value.lower()]
        return []

    @staticmethod
    def _heuristic_supports_images(model_name: str) -> bool:
        lowered = model_name.lower()
        keywords = (
            "vision",
            "llava",
            "bakllava",
            "moondream",
            "minicpm-v",
            "qwen2.5vl",
            "qwen2-vl",
            "qwen-vl",
            "gemma3",
            "mistral-small3.1",
            "mistral-small3.2",
            "llama4",
            "pixtral",
            "idefics",
            "granite3.2-vision",
        )
        return any(keyword in lowered for keyword in keywords)
