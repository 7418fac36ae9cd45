"""Central application configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, field


@dataclass(frozen=True)
class Config:
    """Central application configuration.

    Reads from environment variables with sensible defaults.
    """

    # Elasticsearch
    elasticsearch_url: str = field(
        default_factory=lambda: os.getenv("ELASTICSEARCH_URL", "http://localhost:9200")
    )
    elasticsearch_api_key: str | None = field(
        default_factory=lambda: os.getenv("ELASTICSEARCH_API_KEY")
    )
    elasticsearch_wait_seconds: int = field(
        default_factory=lambda: int(os.getenv("ELASTICSEARCH_WAIT_SECONDS", "0"))
    )
    index_name: str = "pets"

    # Pet repository: "elasticsearch" or "memory"
    repository_backend: str = field(
        default_factory=lambda: os.getenv("REPOSITORY_BACKEND", "elasticsearch")
    )

    # Vision service
    vision_backend: str = field(
        default_factory=lambda: os.getenv("VISION_BACKEND", "openai")
    )
    openai_api_key: str | None = field(
        default_factory=lambda: os.getenv("OPENAI_API_KEY")
    )
    openai_vision_model: str = field(
        default_factory=lambda: os.getenv("OPENAI_VISION_MODEL", "gpt-4o")
    )
    vision_timeout_seconds: float = field(
        default_factory=lambda: float(os.getenv("VISION_TIMEOUT_SECONDS", "30"))
    )
    image_placeholder: str = field(
        default_factory=lambda: os.getenv("IMAGE_PLACEHOLDER", "placeholder")
    )

    # CLIP model
    clip_model_name: str = "ViT-B-32"
    clip_pretrained: str = "laion2b_s34b_b79k"

    # Matching
    default_threshold: int = 50
    default_limit: int = 5
    candidate_pool_size: int = 100
    prefilter_ratio: float = 0.7
    max_detailed_candidates: int = 10

    # Server
    host: str = field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "8000")))


def get_config() -> Config:
    """Get application configuration.

    Returns:
        Config instance with values from environment or defaults.
    """
    return Config()
