"""Tests for src/embeddings/clip_encoder.py and src/vision/clip_service.py."""

from __future__ import annotations

import asyncio
import json
import sys
import time
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import requests
import torch
from PIL import Image

from src.errors import VisionServiceError


@pytest.fixture
def mock_clip_encoder():
    """Create a CLIPEncoder with mocked open_clip module."""
    mock_oc = MagicMock()
    mock_model = MagicMock()
    mock_preprocess = MagicMock()
    mock_tokenizer = MagicMock()

    fake_features = torch.randn(1, 512)
    mock_model.encode_text.return_value = fake_features
    mock_model.encode_image.return_value = fake_features
    mock_model.to.return_value = mock_model
    mock_model.eval.return_value = mock_model

    mock_preprocess.return_value = torch.randn(3, 224, 224)

    mock_oc.create_model_and_transforms.return_value = (
        mock_model,
        None,
        mock_preprocess,
    )
    mock_oc.get_tokenizer.return_value = mock_tokenizer
    mock_tokenizer.return_value = torch.zeros(1, 77, dtype=torch.long)

    with patch.dict(sys.modules, {"open_clip": mock_oc}):
        from src.embeddings.clip_encoder import CLIPEncoder

        encoder = CLIPEncoder(
            model_name="ViT-B-32",
            pretrained="laion2b_s34b_b79k",
            device="cpu",
        )

    return encoder


@pytest.fixture
def image_files(tmp_path: Path) -> list[str]:
    """Two small JPEGs on disk."""
    paths = []
    for i, color in enumerate(("black", "white")):
        p = tmp_path / f"pet_{i}.jpg"
        Image.new("RGB", (64, 64), color=color).save(p)
        paths.append(str(p))
    return paths


def _first_label_wins(prompts: list[str]) -> torch.Tensor:
    """Label vectors where only the first prompt aligns with [1, 0]."""
    return torch.tensor([[1.0, 0.0]] + [[0.0, 1.0]] * (len(prompts) - 1))


class TestCLIPEncoder:
    """Tests for CLIPEncoder class."""

    def test_init_sets_device(self, mock_clip_encoder) -> None:
        """Should set device to cpu when specified."""
        assert mock_clip_encoder.device == "cpu"

    def test_encode_text_normalized(self, mock_clip_encoder) -> None:
        """Text embeddings should be L2-normalized tensors."""
        result = mock_clip_encoder.encode_text(["a photo of a Beagle"])
        assert result.shape == (1, 512)
        assert torch.allclose(result.norm(dim=-1), torch.ones(1), atol=1e-5)

    def test_encode_images_batch(self, mock_clip_encoder, image_files: list[str]) -> None:
        """Should encode a batch of images from file paths."""
        batch_features = torch.randn(2, 512)
        mock_clip_encoder.model.encode_image.return_value = batch_features

        result = mock_clip_encoder.encode_images(image_files)

        assert result.shape == (2, 512)
        assert torch.allclose(result.norm(dim=-1), torch.ones(2), atol=1e-5)
        assert mock_clip_encoder.preprocess.call_count == 2

    def test_encode_missing_image_raises(self, mock_clip_encoder, tmp_path: Path) -> None:
        """Unreadable images raise VisionServiceError."""
        with pytest.raises(VisionServiceError):
            mock_clip_encoder.encode_images([str(tmp_path / "missing.jpg")])


class TestLoadImage:
    """Tests for load_image."""

    def test_local_file(self, image_files: list[str]) -> None:
        """Should open local files as RGB."""
        from src.embeddings.clip_encoder import load_image

        assert load_image(image_files[0]).mode == "RGB"

    @patch("src.embeddings.clip_encoder.requests.get")
    def test_url(self, mock_get: MagicMock, image_files: list[str]) -> None:
        """Should download http(s) references."""
        from src.embeddings.clip_encoder import load_image

        mock_get.return_value.content = Path(image_files[1]).read_bytes()
        image = load_image("https://img.example.com/pet.jpg", timeout=5)
        assert image.size == (64, 64)
        mock_get.assert_called_once_with("https://img.example.com/pet.jpg", timeout=5)

    @patch("src.embeddings.clip_encoder.requests.get")
    def test_download_error(self, mock_get: MagicMock) -> None:
        """HTTP failures raise VisionServiceError."""
        from src.embeddings.clip_encoder import load_image

        mock_get.side_effect = requests.ConnectionError("unreachable")
        with pytest.raises(VisionServiceError, match="Failed to load image"):
            load_image("https://img.example.com/pet.jpg")


class TestClipVisionService:
    """Tests for the CLIP-backed vision service."""

    @pytest.fixture
    def encoder(self) -> MagicMock:
        encoder = MagicMock()
        encoder.encode_images.side_effect = lambda refs: torch.tensor(
            [[1.0, 0.0], [0.6, 0.8]][: len(refs)]
        )
        encoder.encode_text.side_effect = _first_label_wins
        return encoder

    @pytest.fixture
    def service(self, encoder: MagicMock):
        from src.vision.clip_service import ClipVisionService

        return ClipVisionService(
            encoder,
            breed_labels=["Beagle", "Poodle"],
            color_labels=["black", "white"],
            feature_labels=["a collar", "floppy ears"],
        )

    @pytest.mark.asyncio
    async def test_compare_returns_cosine(self, service) -> None:
        """compare answers with the cosine similarity as a bare number."""
        assert await service.compare("a.jpg", "b.jpg") == "0.6000"

    @pytest.mark.asyncio
    async def test_describe_returns_feature_json(self, service) -> None:
        """describe answers in the feature JSON shape."""
        result = json.loads(await service.describe("a.jpg"))
        assert result["detectedBreed"] == "Beagle"
        assert result["detectedColor"] == "black"
        assert result["distinctiveFeatures"] == ["collar"]
        assert result["confidence"] == pytest.approx(1.0)

    @pytest.mark.asyncio
    async def test_label_vectors_cached(self, service, encoder: MagicMock) -> None:
        """Label prompts are encoded once per vocabulary."""
        await service.describe("a.jpg")
        await service.describe("b.jpg")
        assert encoder.encode_text.call_count == 3

    @pytest.mark.asyncio
    async def test_label_vectors_encoded_once_when_concurrent(
        self, service, encoder: MagicMock
    ) -> None:
        """Parallel describes share one encoding per vocabulary."""

        def slow_labels(prompts: list[str]) -> torch.Tensor:
            time.sleep(0.02)
            return _first_label_wins(prompts)

        encoder.encode_text.side_effect = slow_labels
        await asyncio.gather(*(service.describe(f"{i}.jpg") for i in range(4)))
        assert encoder.encode_text.call_count == 3

    @pytest.mark.asyncio
    async def test_answers_parse_through_adapter(self, service) -> None:
        """The adapter's parsers accept CLIP answers."""
        from src.vision.similarity import parse_features, parse_similarity_score

        assert parse_similarity_score(await service.compare("a.jpg", "b.jpg")) == 0.6
        assert parse_features(await service.describe("a.jpg")) is not None
