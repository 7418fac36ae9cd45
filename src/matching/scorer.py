"""Weighted multi-factor score for one lost/found pet pair."""

from __future__ import annotations

import logging
import math

from src.data.schemas import ImageSimilarity, MatchScore, Pet
from src.matching.text_similarity import text_similarity
from src.matching.weights import (
    MATCH_WEIGHTS,
    MAX_SCORE,
    PARTIAL_SIMILARITY,
    STRONG_SIMILARITY,
    TIME_FRAME_FALLBACK,
    TIME_FRAME_STEPS,
    UNKNOWN_GENDER_FACTOR,
    image_bucket_reason,
)
from src.vision.similarity import VisualSimilarity

logger = logging.getLogger(__name__)

SPECIES_MISMATCH_REASON = "Pet types do not match"


class MatchScorer:
    """Score how likely a found pet is a given lost pet.

    Species is a hard gate; every other factor adds a weighted share of
    ``MATCH_WEIGHTS`` and, when notable, a reason. Missing optional fields
    contribute nothing.

    Args:
        visual: Image similarity adapter. Without one, image analysis is
            always skipped.
        weights: Per-factor weights, defaulting to ``MATCH_WEIGHTS``.
    """

    def __init__(
        self,
        visual: VisualSimilarity | None = None,
        weights: dict[str, float] | None = None,
    ) -> None:
        self.visual = visual
        self.weights = weights or MATCH_WEIGHTS

    async def score(
        self,
        lost_pet: Pet,
        found_pet: Pet,
        include_image_analysis: bool = True,
    ) -> MatchScore:
        """Compute the match score for a lost/found pair.

        Args:
            lost_pet: Pet reported lost.
            found_pet: Pet reported found.
            include_image_analysis: Whether to consult the vision service.

        Returns:
            MatchScore with an integer score in [0, 100] and ordered reasons.
        """
        if lost_pet.species.lower() != found_pet.species.lower():
            return MatchScore(score=0, reasons=[SPECIES_MISMATCH_REASON])

        reasons = [f"Pet type matches: {lost_pet.species}"]
        total = self.weights["species"]

        total += self._text_factor(
            "breed", lost_pet.breed, found_pet.breed, reasons, ("a strong match", "a partial match")
        )
        total += self._text_factor(
            "color", lost_pet.color, found_pet.color, reasons, ("a strong match", "a partial match")
        )
        total += self._gender_factor(lost_pet, found_pet, reasons)
        total += self._text_factor(
            "location", lost_pet.location, found_pet.location, reasons, ("very close", "somewhat close")
        )
        total += self._time_frame_factor(lost_pet, found_pet, reasons)

        image_similarity: ImageSimilarity | None = None
        if (
            include_image_analysis
            and self.visual is not None
            and lost_pet.images
            and found_pet.images
        ):
            image_similarity = await self.visual.pet_image_similarity(lost_pet, found_pet)
            total += image_similarity.score * self.weights["image_similarity"]
            reason = image_bucket_reason(image_similarity.score)
            if reason:
                reasons.append(reason)

        final = min(_round_half_up(total), MAX_SCORE)
        logger.debug("Scored lost=%s found=%s -> %d", lost_pet.id, found_pet.id, final)
        return MatchScore(
            score=max(final, 0),
            reasons=reasons,
            image_similarity=image_similarity,
        )

    def _text_factor(
        self,
        factor: str,
        lost_value: str | None,
        found_value: str | None,
        reasons: list[str],
        labels: tuple[str, str],
    ) -> float:
        if not lost_value or not found_value:
            return 0.0

        similarity = text_similarity(lost_value, found_value)
        strong, partial = labels
        if similarity > STRONG_SIMILARITY:
            reasons.append(f"{factor.capitalize()} is {strong}: {lost_value} and {found_value}")
        elif similarity > PARTIAL_SIMILARITY:
            reasons.append(f"{factor.capitalize()} is {partial}: {lost_value} and {found_value}")

        return similarity * self.weights[factor]

    def _gender_factor(self, lost_pet: Pet, found_pet: Pet, reasons: list[str]) -> float:
        if lost_pet.gender == found_pet.gender:
            reasons.append(f"Gender matches: {lost_pet.gender}")
            return self.weights["gender"]
        if "unknown" in (lost_pet.gender, found_pet.gender):
            reasons.append("One pet has unknown gender")
            return self.weights["gender"] * UNKNOWN_GENDER_FACTOR
        return 0.0

    def _time_frame_factor(self, lost_pet: Pet, found_pet: Pet, reasons: list[str]) -> float:
        lost_date = lost_pet.last_seen
        found_date = found_pet.found_date
        if lost_date is None or found_date is None:
            return 0.0

        if found_date < lost_date:
            reasons.append("Found date is before lost date, which is unusual")
            return 0.0

        days = (found_date - lost_date).days
        weight = self.weights["time_frame"]
        for max_days, fraction, label in TIME_FRAME_STEPS:
            if days <= max_days:
                reasons.append(f"{label} ({days} days)")
                return weight * fraction

        fraction, label = TIME_FRAME_FALLBACK
        reasons.append(f"{label} ({days} days)")
        return weight * fraction


def _round_half_up(value: float) -> int:
    """Round to the nearest integer, halves up (unlike the built-in round())."""
    return math.floor(value + 0.5)
