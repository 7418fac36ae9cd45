"""Tests for src/vision/factory.py and the repository factory."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from src.api.app import create_repository
from src.config import Config
from src.errors import VisionServiceError
from src.search.repository import ElasticsearchPetRepository, InMemoryPetRepository
from src.vision.factory import create_visual_similarity
from src.vision.openai_service import OpenAIVisionService


class TestCreateVisualSimilarity:
    """Tests for create_visual_similarity."""

    def test_none_backend(self) -> None:
        """The none backend disables image analysis."""
        assert create_visual_similarity(Config(vision_backend="none")) is None

    def test_openai_without_key(self) -> None:
        """OpenAI without an API key disables image analysis."""
        config = Config(vision_backend="openai", openai_api_key=None)
        assert create_visual_similarity(config) is None

    def test_openai_backend(self) -> None:
        """OpenAI with a key wraps an OpenAIVisionService."""
        config = Config(
            vision_backend="openai",
            openai_api_key="sk-test",
            openai_vision_model="gpt-4o-mini",
            image_placeholder="no-photo",
            vision_timeout_seconds=5.0,
        )
        visual = create_visual_similarity(config)
        assert visual is not None
        assert isinstance(visual.service, OpenAIVisionService)
        assert visual.service.model == "gpt-4o-mini"
        assert visual.placeholder == "no-photo"
        assert visual.timeout == 5.0

    @patch("src.embeddings.clip_encoder.CLIPEncoder")
    def test_clip_backend(self, mock_encoder_cls: MagicMock) -> None:
        """The clip backend loads the configured CLIP model."""
        from src.vision.clip_service import ClipVisionService

        visual = create_visual_similarity(Config(vision_backend="CLIP"))
        assert visual is not None
        assert isinstance(visual.service, ClipVisionService)
        mock_encoder_cls.assert_called_once_with(
            model_name="ViT-B-32", pretrained="laion2b_s34b_b79k"
        )

    def test_unknown_backend(self) -> None:
        """Unknown backends are rejected."""
        with pytest.raises(VisionServiceError, match="Unknown vision backend"):
            create_visual_similarity(Config(vision_backend="tesseract"))


class TestCreateRepository:
    """Tests for create_repository."""

    def test_memory_backend(self) -> None:
        """The memory backend needs no cluster."""
        repo = create_repository(Config(repository_backend="memory"))
        assert isinstance(repo, InMemoryPetRepository)

    @patch("src.search.indexer.create_index")
    @patch("src.search.es_client.create_es_client")
    def test_elasticsearch_backend(
        self, mock_create_client: MagicMock, mock_create_index: MagicMock
    ) -> None:
        """The elasticsearch backend connects and ensures the index."""
        config = Config(
            repository_backend="elasticsearch",
            elasticsearch_url="http://es:9200",
            elasticsearch_api_key=None,
            elasticsearch_wait_seconds=0,
        )
        repo = create_repository(config)
        assert isinstance(repo, ElasticsearchPetRepository)
        assert repo.es is mock_create_client.return_value
        mock_create_client.assert_called_once_with("http://es:9200", None, wait_timeout=0)
        mock_create_index.assert_called_once_with(mock_create_client.return_value, "pets")

    def test_unknown_backend(self) -> None:
        """Unknown backends are rejected."""
        with pytest.raises(ValueError, match="Unknown repository backend"):
            create_repository(Config(repository_backend="sqlite"))
