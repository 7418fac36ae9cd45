"""Pet report lookup used by the match service."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Protocol

from elasticsearch import ApiError, Elasticsearch, NotFoundError, TransportError

from src.data.schemas import Pet, PetStatus
from src.errors import RepositoryError
from src.search.indexer import PET_INDEX_NAME, pet_to_document

logger = logging.getLogger(__name__)


class PetRepository(Protocol):
    """Read access to stored pet reports."""

    def get_pet(self, pet_id: str) -> Pet | None:
        """Return the report with *pet_id*, or None if unknown."""
        ...

    def list_recent(self, status: PetStatus, limit: int = 100) -> list[Pet]:
        """Return up to *limit* reports with *status*, newest first."""
        ...

    def add(self, pet: Pet) -> None:
        """Store or replace a report."""
        ...

    def ping(self) -> bool:
        """Return True if the backing store is reachable."""
        ...


class ElasticsearchPetRepository:
    """Pet reports stored as documents in an Elasticsearch index.

    Args:
        es_client: Connected Elasticsearch client.
        index_name: Index holding the reports.
    """

    def __init__(self, es_client: Elasticsearch, index_name: str = PET_INDEX_NAME) -> None:
        self.es = es_client
        self.index_name = index_name

    def get_pet(self, pet_id: str) -> Pet | None:
        try:
            resp = self.es.get(index=self.index_name, id=pet_id)
        except NotFoundError:
            return None
        except (ApiError, TransportError) as err:
            raise RepositoryError(f"Failed to fetch pet {pet_id}: {err}") from err
        return Pet.model_validate(resp["_source"])

    def list_recent(self, status: PetStatus, limit: int = 100) -> list[Pet]:
        try:
            resp = self.es.search(
                index=self.index_name,
                query={"term": {"status": status}},
                sort=[{"created_at": {"order": "desc", "missing": "_last"}}],
                size=limit,
            )
        except (ApiError, TransportError) as err:
            raise RepositoryError(f"Failed to list {status} pets: {err}") from err

        return [Pet.model_validate(hit["_source"]) for hit in resp["hits"]["hits"]]

    def add(self, pet: Pet) -> None:
        try:
            self.es.index(
                index=self.index_name,
                id=pet.id,
                document=pet_to_document(pet),
                refresh="wait_for",
            )
        except (ApiError, TransportError) as err:
            raise RepositoryError(f"Failed to store pet {pet.id}: {err}") from err

    def ping(self) -> bool:
        try:
            return bool(self.es.ping())
        except TransportError:
            return False


class InMemoryPetRepository:
    """Dict-backed repository for local runs and tests."""

    def __init__(self, pets: list[Pet] | None = None) -> None:
        self._pets: dict[str, Pet] = {}
        for pet in pets or []:
            self.add(pet)

    def get_pet(self, pet_id: str) -> Pet | None:
        return self._pets.get(pet_id)

    def list_recent(self, status: PetStatus, limit: int = 100) -> list[Pet]:
        oldest = datetime.min.replace(tzinfo=timezone.utc)
        matching = [pet for pet in self._pets.values() if pet.status == status]
        matching.sort(key=lambda pet: _aware(pet.created_at) or oldest, reverse=True)
        return matching[:limit]

    def add(self, pet: Pet) -> None:
        self._pets[pet.id] = pet

    def ping(self) -> bool:
        return True


def _aware(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
