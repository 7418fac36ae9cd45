"""Build the configured vision backend."""

from __future__ import annotations

import logging

from src.config import Config
from src.errors import VisionServiceError
from src.vision.similarity import VisualSimilarity

logger = logging.getLogger(__name__)

VISION_BACKENDS = ("openai", "clip", "none")


def create_visual_similarity(config: Config) -> VisualSimilarity | None:
    """Create the image similarity adapter selected by ``config.vision_backend``.

    An OpenAI backend without an API key disables image analysis instead of
    failing startup.

    Args:
        config: Application configuration.

    Returns:
        Adapter wrapping the backend, or None when image analysis is off.

    Raises:
        VisionServiceError: If the backend name is not recognized.
    """
    backend = config.vision_backend.lower()

    if backend == "none":
        logger.info("Image analysis disabled")
        return None

    if backend == "openai":
        if not config.openai_api_key:
            logger.warning("OPENAI_API_KEY is not set; image analysis disabled")
            return None
        from src.vision.openai_service import OpenAIVisionService

        service = OpenAIVisionService(
            api_key=config.openai_api_key,
            model=config.openai_vision_model,
        )
    elif backend == "clip":
        from src.embeddings.clip_encoder import CLIPEncoder
        from src.vision.clip_service import ClipVisionService

        service = ClipVisionService(
            CLIPEncoder(
                model_name=config.clip_model_name,
                pretrained=config.clip_pretrained,
            )
        )
    else:
        raise VisionServiceError(
            f"Unknown vision backend '{config.vision_backend}', expected one of {VISION_BACKENDS}"
        )

    logger.info("Image analysis enabled with %s backend", backend)
    return VisualSimilarity(
        service,
        placeholder=config.image_placeholder,
        timeout=config.vision_timeout_seconds,
    )
