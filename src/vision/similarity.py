"""Fail-soft visual similarity between pet photos."""

from __future__ import annotations

import asyncio
import json
import logging
import re
from collections.abc import Awaitable

from pydantic import ValidationError

from src.data.schemas import ImageSimilarity, Pet, PetFeatures
from src.matching.weights import similarity_bucket
from src.vision.service import VisionService

logger = logging.getLogger(__name__)

NO_IMAGES_REASON = "One or both pets don't have images"
PLACEHOLDER_REASON = "One or both pets only have placeholder images"
ERROR_REASON = "Error processing images"
DEFAULT_CONFIDENCE = 0.5

_LEADING_NUMBER = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)")
_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


class VisualSimilarity:
    """Score and describe pet photos through an external vision service.

    Every public method absorbs service failures: a slow or broken service
    lowers match quality but never aborts a search.

    Args:
        service: Vision backend answering compare/describe requests.
        placeholder: Substring marking an image reference as "no real image".
        timeout: Seconds allowed per service call; None disables the limit.
    """

    def __init__(
        self,
        service: VisionService,
        placeholder: str = "placeholder",
        timeout: float | None = 30.0,
    ) -> None:
        self.service = service
        self.placeholder = placeholder
        self.timeout = timeout

    def is_placeholder(self, ref: str | None) -> bool:
        """True if *ref* is missing or points at a placeholder image."""
        return not ref or self.placeholder in ref

    async def compare_images(self, image_a: str | None, image_b: str | None) -> float:
        """Likelihood in [0, 1] that two photos show the same animal.

        Returns 0 without contacting the service when either reference is
        missing or a placeholder, and 0 on any service or parse failure.
        """
        if self.is_placeholder(image_a) or self.is_placeholder(image_b):
            return 0.0

        try:
            text = await self._call(self.service.compare(image_a, image_b))
        except Exception as exc:
            logger.warning("Image comparison failed for %s vs %s: %s", image_a, image_b, exc)
            return 0.0

        return parse_similarity_score(text)

    async def extract_features(self, image: str | None) -> PetFeatures | None:
        """Breed, color and markings detected in one photo, or None."""
        if self.is_placeholder(image):
            return None

        try:
            text = await self._call(self.service.describe(image))
        except Exception as exc:
            logger.warning("Feature extraction failed for %s: %s", image, exc)
            return None

        features = parse_features(text)
        if features is None:
            logger.warning("Unparseable feature response for %s: %r", image, (text or "")[:200])
        return features

    async def pet_image_similarity(self, pet_a: Pet, pet_b: Pet) -> ImageSimilarity:
        """Compare the primary photos of two pets.

        Never raises; unexpected failures yield a zero score with an
        error reason.
        """
        try:
            return await self._pet_image_similarity(pet_a, pet_b)
        except Exception:
            logger.exception("Error comparing images of pets %s and %s", pet_a.id, pet_b.id)
            return ImageSimilarity(score=0, confidence=0, reasons=[ERROR_REASON])

    async def _pet_image_similarity(self, pet_a: Pet, pet_b: Pet) -> ImageSimilarity:
        if not pet_a.images or not pet_b.images:
            return ImageSimilarity(score=0, confidence=0, reasons=[NO_IMAGES_REASON])

        image_a = pet_a.images[0]
        image_b = pet_b.images[0]
        if self.is_placeholder(image_a) or self.is_placeholder(image_b):
            return ImageSimilarity(score=0, confidence=0, reasons=[PLACEHOLDER_REASON])

        score, features_a, features_b = await asyncio.gather(
            self.compare_images(image_a, image_b),
            self.extract_features(image_a),
            self.extract_features(image_b),
        )

        reasons: list[str] = []
        confidence = DEFAULT_CONFIDENCE

        if features_a and features_b:
            confidence = (features_a.confidence + features_b.confidence) / 2
            reasons.extend(_feature_reasons(features_a, features_b))

        bucket = similarity_bucket(score)
        if bucket is None:
            reasons.append("Images show different pets")
        else:
            reasons.append(f"Images show {bucket} similar pets")

        return ImageSimilarity(score=score, confidence=confidence, reasons=reasons)

    async def _call(self, request: Awaitable[str]) -> str:
        if self.timeout is None:
            return await request
        return await asyncio.wait_for(request, timeout=self.timeout)


def _overlaps(a: str, b: str) -> bool:
    a, b = a.lower(), b.lower()
    return a in b or b in a


def _feature_reasons(features_a: PetFeatures, features_b: PetFeatures) -> list[str]:
    reasons = []

    if _overlaps(features_a.detected_breed, features_b.detected_breed):
        reasons.append(
            f"Similar detected breed: {features_a.detected_breed} and {features_b.detected_breed}"
        )

    if _overlaps(features_a.detected_color, features_b.detected_color):
        reasons.append(
            f"Similar coat color: {features_a.detected_color} and {features_b.detected_color}"
        )

    common = [
        feature
        for feature in features_a.distinctive_features
        if any(feature.lower() in other.lower() for other in features_b.distinctive_features)
    ]
    if common:
        reasons.append(f"Shared distinctive features: {', '.join(common)}")

    return reasons


def parse_similarity_score(text: str | None) -> float:
    """Read a leading number from a service answer, clamped to [0, 1].

    Args:
        text: Raw service response, ideally a bare number.

    Returns:
        Parsed score, or 0.0 when no number can be read.
    """
    if not text:
        return 0.0

    match = _LEADING_NUMBER.match(text)
    if not match:
        return 0.0

    return max(0.0, min(1.0, float(match.group(1))))


def parse_features(text: str | None) -> PetFeatures | None:
    """Parse a feature-extraction answer into PetFeatures.

    Accepts a bare JSON object, or one wrapped in prose or a fenced code
    block.

    Args:
        text: Raw service response.

    Returns:
        PetFeatures, or None if the answer is not a valid feature object.
    """
    if not text:
        return None

    match = _JSON_OBJECT.search(text)
    if not match:
        return None

    try:
        data = json.loads(match.group(0))
        if not isinstance(data, dict):
            return None
        return PetFeatures.model_validate(data)
    except (json.JSONDecodeError, ValidationError):
        return None
