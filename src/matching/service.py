"""Caller-facing match query over stored pet reports."""

from __future__ import annotations

import asyncio
import logging

from src.data.schemas import MatchQuery, MatchResponse
from src.errors import PetNotFoundError, PetStatusMismatchError
from src.matching.finder import MatchFinder
from src.search.repository import PetRepository

logger = logging.getLogger(__name__)

CANDIDATE_POOL_SIZE = 100


class MatchService:
    """Resolve a stored pet and rank its possible matches.

    Args:
        repository: Source of the subject pet and candidate pool.
        finder: Two-phase match finder.
        candidate_pool_size: How many recent opposite-status reports to search.
    """

    def __init__(
        self,
        repository: PetRepository,
        finder: MatchFinder,
        candidate_pool_size: int = CANDIDATE_POOL_SIZE,
    ) -> None:
        self.repository = repository
        self.finder = finder
        self.candidate_pool_size = candidate_pool_size

    async def find_matches(self, query: MatchQuery) -> MatchResponse:
        """Run a match query.

        Args:
            query: Subject pet id and status plus search options.

        Returns:
            At most ``query.limit`` matches, best first.

        Raises:
            PetNotFoundError: If the subject pet does not exist.
            PetStatusMismatchError: If the subject pet has another status.
            RepositoryError: If the repository cannot be read.
        """
        pet = await asyncio.to_thread(self.repository.get_pet, query.pet_id)
        if pet is None:
            raise PetNotFoundError(f"Pet {query.pet_id} not found")

        if pet.status != query.pet_status:
            raise PetStatusMismatchError(f"Pet is not a {query.pet_status} pet")

        opposite = "found" if pet.status == "lost" else "lost"
        pool = await asyncio.to_thread(
            self.repository.list_recent, opposite, self.candidate_pool_size
        )
        include_image_analysis = not query.skip_image_analysis

        if pet.status == "lost":
            matches = await self.finder.find_matches_for_lost(
                pet, pool, query.threshold, include_image_analysis
            )
        else:
            matches = await self.finder.find_matches_for_found(
                pet, pool, query.threshold, include_image_analysis
            )

        logger.info(
            "Query for %s pet %s returned %d of %d matches",
            pet.status,
            pet.id,
            min(len(matches), query.limit),
            len(matches),
        )
        return MatchResponse(matches=matches[: query.limit])
