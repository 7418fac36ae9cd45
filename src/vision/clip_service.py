"""Vision service running a local CLIP model instead of a hosted LLM."""

from __future__ import annotations

import asyncio
import json
import logging
import threading

import torch

from src.embeddings.clip_encoder import CLIPEncoder

logger = logging.getLogger(__name__)

BREED_LABELS: list[str] = [
    "Labrador Retriever",
    "Golden Retriever",
    "German Shepherd",
    "Beagle",
    "Bulldog",
    "Poodle",
    "Rottweiler",
    "Dachshund",
    "Husky",
    "Chihuahua",
    "Pomeranian",
    "Shih Tzu",
    "mixed breed dog",
    "Siamese",
    "Persian",
    "Maine Coon",
    "Ragdoll",
    "Bengal",
    "tabby cat",
    "tuxedo cat",
    "domestic shorthair cat",
]

COLOR_LABELS: list[str] = [
    "black",
    "white",
    "brown",
    "golden",
    "cream",
    "grey",
    "orange",
    "black and white",
    "brown and white",
    "tricolor",
    "brindle",
    "spotted",
]

FEATURE_LABELS: list[str] = [
    "a collar",
    "a white patch on the chest",
    "floppy ears",
    "pointed ears",
    "long fur",
    "short fur",
    "blue eyes",
    "a curled tail",
    "a spotted coat",
    "a striped coat",
]

# Feature labels scoring above this softmax share are reported.
FEATURE_MIN_PROBABILITY = 0.15


class ClipVisionService:
    """Answer vision requests with CLIP embeddings.

    ``compare`` returns the cosine similarity of the two photos;
    ``describe`` runs zero-shot classification against fixed breed, color
    and marking vocabularies. Answers use the same textual shapes as a
    hosted model so the adapter parses both the same way.

    Args:
        encoder: Loaded CLIP encoder.
        breed_labels: Candidate breed names.
        color_labels: Candidate coat colors.
        feature_labels: Candidate distinctive markings.
    """

    def __init__(
        self,
        encoder: CLIPEncoder,
        breed_labels: list[str] | None = None,
        color_labels: list[str] | None = None,
        feature_labels: list[str] | None = None,
    ) -> None:
        self.encoder = encoder
        self.breed_labels = breed_labels or BREED_LABELS
        self.color_labels = color_labels or COLOR_LABELS
        self.feature_labels = feature_labels or FEATURE_LABELS
        self._label_vectors: dict[str, torch.Tensor] = {}
        self._label_lock = threading.Lock()

    async def compare(self, image_a: str, image_b: str) -> str:
        vectors = await asyncio.to_thread(self.encoder.encode_images, [image_a, image_b])
        cosine = float(vectors[0] @ vectors[1])
        return f"{max(0.0, min(1.0, cosine)):.4f}"

    async def describe(self, image: str) -> str:
        return await asyncio.to_thread(self._describe_sync, image)

    def _describe_sync(self, image: str) -> str:
        vector = self.encoder.encode_images([image])[0]

        breed_probs = self._rank(vector, "breed", [f"a photo of a {b}" for b in self.breed_labels])
        color_probs = self._rank(vector, "color", [f"a photo of a {c} pet" for c in self.color_labels])
        feature_probs = self._rank(
            vector, "feature", [f"a photo of a pet with {f}" for f in self.feature_labels]
        )

        breed_index = int(breed_probs.argmax())
        color_index = int(color_probs.argmax())
        features = [
            label.removeprefix("a ")
            for label, prob in zip(self.feature_labels, feature_probs.tolist(), strict=True)
            if prob >= FEATURE_MIN_PROBABILITY
        ]

        result = {
            "detectedBreed": self.breed_labels[breed_index],
            "detectedColor": self.color_labels[color_index],
            "distinctiveFeatures": features,
            "confidence": round(float(breed_probs[breed_index]), 4),
        }
        logger.debug("CLIP described %s as %s", image, result)
        return json.dumps(result)

    def _rank(self, vector: torch.Tensor, key: str, prompts: list[str]) -> torch.Tensor:
        """Softmax over label prompts for one image vector."""
        with self._label_lock:
            if key not in self._label_vectors:
                self._label_vectors[key] = self.encoder.encode_text(prompts)
            label_vectors = self._label_vectors[key]
        logits = 100.0 * (label_vectors @ vector)
        return logits.softmax(dim=-1)
