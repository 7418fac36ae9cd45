"""CLIP model wrapper for pet photo and label encoding."""

from __future__ import annotations

import io
import logging
from pathlib import Path

import requests
import torch
from PIL import Image

from src.errors import VisionServiceError

logger = logging.getLogger(__name__)


class CLIPEncoder:
    """Encode pet photos and text labels into CLIP embedding space.

    Photos and labels share one L2-normalized vector space, so cosine
    similarity compares two photos directly and ranks labels for a photo
    (zero-shot classification).

    Args:
        model_name: CLIP model architecture name.
        pretrained: Pretrained weights identifier.
        device: Device to run model on (auto-detected if None).
    """

    def __init__(
        self,
        model_name: str = "ViT-B-32",
        pretrained: str = "laion2b_s34b_b79k",
        device: str | None = None,
    ) -> None:
        import open_clip

        self.device = device or ("cuda" if torch.cuda.is_available() else "cpu")
        logger.info(
            "Loading CLIP model %s (%s) on %s",
            model_name,
            pretrained,
            self.device,
        )

        self.model, _, self.preprocess = open_clip.create_model_and_transforms(
            model_name, pretrained=pretrained
        )
        self.model = self.model.to(self.device).eval()
        self.tokenizer = open_clip.get_tokenizer(model_name)

        logger.info("CLIP model loaded successfully")

    def encode_text(self, texts: list[str]) -> torch.Tensor:
        """Encode text labels into normalized vectors.

        Args:
            texts: Label prompts to encode.

        Returns:
            Tensor of shape ``(len(texts), dim)``.
        """
        tokens = self.tokenizer(texts).to(self.device)

        with torch.no_grad():
            features = self.model.encode_text(tokens)
            features = features / features.norm(dim=-1, keepdim=True)

        return features.cpu()

    def encode_images(self, refs: list[str]) -> torch.Tensor:
        """Encode pet photos into normalized vectors.

        Args:
            refs: Image URLs or filesystem paths.

        Returns:
            Tensor of shape ``(len(refs), dim)``.

        Raises:
            VisionServiceError: If any image cannot be loaded.
        """
        images = [self.preprocess(load_image(ref)) for ref in refs]
        batch_tensor = torch.stack(images).to(self.device)

        with torch.no_grad():
            features = self.model.encode_image(batch_tensor)
            features = features / features.norm(dim=-1, keepdim=True)

        return features.cpu()


def load_image(ref: str, timeout: float = 30.0) -> Image.Image:
    """Load an RGB image from a URL or a local path.

    Args:
        ref: ``http(s)`` URL or filesystem path.
        timeout: Download timeout in seconds.

    Returns:
        Decoded PIL image.

    Raises:
        VisionServiceError: If the image cannot be fetched or decoded.
    """
    try:
        if ref.startswith(("http://", "https://")):
            response = requests.get(ref, timeout=timeout)
            response.raise_for_status()
            return Image.open(io.BytesIO(response.content)).convert("RGB")
        return Image.open(Path(ref)).convert("RGB")
    except (requests.RequestException, OSError) as err:
        raise VisionServiceError(f"Failed to load image {ref}: {err}") from err
