"""Two-phase search for likely matches in a candidate pool."""

from __future__ import annotations

import asyncio
import logging
import time

from src.data.schemas import MatchScore, Pet, PetMatch
from src.matching.scorer import MatchScorer

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 50
PREFILTER_RATIO = 0.7
MAX_DETAILED_CANDIDATES = 10


class MatchFinder:
    """Rank candidate pets against a subject pet.

    A cheap pass scores every candidate without image analysis and keeps
    those scoring at least ``threshold * prefilter_ratio``. The best
    ``max_detailed_candidates`` of them are rescored from scratch with image
    analysis as requested; the cheap score only selects candidates and never
    leaks into the result.

    Args:
        scorer: Pair scorer shared by both passes.
        prefilter_ratio: Fraction of the threshold a cheap score must reach.
        max_detailed_candidates: Cap on candidates given a full rescore.
    """

    def __init__(
        self,
        scorer: MatchScorer,
        prefilter_ratio: float = PREFILTER_RATIO,
        max_detailed_candidates: int = MAX_DETAILED_CANDIDATES,
    ) -> None:
        self.scorer = scorer
        self.prefilter_ratio = prefilter_ratio
        self.max_detailed_candidates = max_detailed_candidates

    async def find_matches_for_lost(
        self,
        lost_pet: Pet,
        found_pets: list[Pet],
        threshold: int = DEFAULT_THRESHOLD,
        include_image_analysis: bool = True,
    ) -> list[PetMatch]:
        """Find found pets that may be *lost_pet*.

        Args:
            lost_pet: Subject pet reported lost.
            found_pets: Candidate pool of found pets.
            threshold: Minimum full score to keep a match.
            include_image_analysis: Whether the full pass consults the vision service.

        Returns:
            Matches sorted by score, highest first.
        """
        return await self._find(lost_pet, found_pets, threshold, include_image_analysis, True)

    async def find_matches_for_found(
        self,
        found_pet: Pet,
        lost_pets: list[Pet],
        threshold: int = DEFAULT_THRESHOLD,
        include_image_analysis: bool = True,
    ) -> list[PetMatch]:
        """Find lost pets that *found_pet* may be.

        Args:
            found_pet: Subject pet reported found.
            lost_pets: Candidate pool of lost pets.
            threshold: Minimum full score to keep a match.
            include_image_analysis: Whether the full pass consults the vision service.

        Returns:
            Matches sorted by score, highest first.
        """
        return await self._find(found_pet, lost_pets, threshold, include_image_analysis, False)

    async def _find(
        self,
        subject: Pet,
        candidates: list[Pet],
        threshold: int,
        include_image_analysis: bool,
        subject_is_lost: bool,
    ) -> list[PetMatch]:
        if not candidates:
            return []

        start = time.monotonic()

        quick_scores = await asyncio.gather(
            *(self._score(subject, candidate, False, subject_is_lost) for candidate in candidates)
        )
        cutoff = threshold * self.prefilter_ratio
        shortlist = sorted(
            (
                (candidate, quick.score)
                for candidate, quick in zip(candidates, quick_scores, strict=True)
                if quick.score >= cutoff
            ),
            key=lambda pair: pair[1],
            reverse=True,
        )[: self.max_detailed_candidates]

        full_scores = await asyncio.gather(
            *(
                self._score(subject, candidate, include_image_analysis, subject_is_lost)
                for candidate, _ in shortlist
            )
        )

        matches = [
            _pair(subject, candidate, full, subject_is_lost)
            for (candidate, _), full in zip(shortlist, full_scores, strict=True)
            if full.score >= threshold
        ]
        matches.sort(key=lambda match: match.match_score.score, reverse=True)

        logger.info(
            "Matched %s pet %s: %d candidates, %d shortlisted, %d above %d (%.1f ms)",
            subject.status,
            subject.id,
            len(candidates),
            len(shortlist),
            len(matches),
            threshold,
            (time.monotonic() - start) * 1000,
        )
        return matches

    async def _score(
        self,
        subject: Pet,
        candidate: Pet,
        include_image_analysis: bool,
        subject_is_lost: bool,
    ) -> MatchScore:
        if subject_is_lost:
            return await self.scorer.score(subject, candidate, include_image_analysis)
        return await self.scorer.score(candidate, subject, include_image_analysis)


def _pair(
    subject: Pet,
    candidate: Pet,
    match_score: MatchScore,
    subject_is_lost: bool,
) -> PetMatch:
    if subject_is_lost:
        return PetMatch(lost_pet=subject, found_pet=candidate, match_score=match_score)
    return PetMatch(lost_pet=candidate, found_pet=subject, match_score=match_score)
