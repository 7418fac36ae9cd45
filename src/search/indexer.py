"""Elasticsearch index creation and bulk indexing of pet reports."""

from __future__ import annotations

import logging

from elasticsearch import Elasticsearch
from elasticsearch.helpers import bulk

from src.data.schemas import Pet

logger = logging.getLogger(__name__)

PET_INDEX_NAME = "pets"

PET_INDEX_MAPPING = {
    "settings": {
        "number_of_shards": 1,
        "number_of_replicas": 0,
    },
    "mappings": {
        "properties": {
            "id": {"type": "keyword"},
            "status": {"type": "keyword"},
            "species": {
                "type": "text",
                "fields": {"keyword": {"type": "keyword"}},
            },
            "name": {"type": "text"},
            "breed": {
                "type": "text",
                "fields": {"keyword": {"type": "keyword"}},
            },
            "color": {"type": "text"},
            "gender": {"type": "keyword"},
            "last_seen": {"type": "date"},
            "found_date": {"type": "date"},
            "location": {"type": "text"},
            "coordinates": {
                "properties": {
                    "latitude": {"type": "float"},
                    "longitude": {"type": "float"},
                }
            },
            "images": {"type": "keyword", "index": False},
            "description": {"type": "text", "analyzer": "standard"},
            "created_at": {"type": "date"},
        },
        "dynamic": False,
    },
}


def create_index(
    es: Elasticsearch,
    index_name: str = PET_INDEX_NAME,
    recreate: bool = False,
) -> None:
    """Create the pets index if it does not exist.

    Args:
        es: Elasticsearch client.
        index_name: Name of the index to create.
        recreate: Drop an existing index first.
    """
    if es.indices.exists(index=index_name):
        if not recreate:
            logger.info("Index '%s' already exists", index_name)
            return
        logger.info("Deleting existing index '%s'", index_name)
        es.indices.delete(index=index_name)

    es.indices.create(
        index=index_name,
        settings=PET_INDEX_MAPPING["settings"],
        mappings=PET_INDEX_MAPPING["mappings"],
    )
    logger.info("Created index '%s'", index_name)


def pet_to_document(pet: Pet) -> dict:
    """Serialize a pet report for storage (snake_case, JSON-safe)."""
    return pet.model_dump(mode="json", by_alias=False)


def index_pets(
    es: Elasticsearch,
    pets: list[Pet],
    index_name: str = PET_INDEX_NAME,
    batch_size: int = 100,
) -> int:
    """Bulk index pet reports keyed by their id.

    Args:
        es: Elasticsearch client.
        pets: Reports to index.
        index_name: Target index name.
        batch_size: Bulk indexing batch size.

    Returns:
        Number of successfully indexed documents.
    """

    def _generate_actions():
        for pet in pets:
            yield {
                "_index": index_name,
                "_id": pet.id,
                "_source": pet_to_document(pet),
            }

    success, errors = bulk(es, _generate_actions(), chunk_size=batch_size, refresh="wait_for")

    if errors:
        logger.error("Bulk indexing errors: %s", errors)

    logger.info("Indexed %d pet reports into '%s'", success, index_name)
    return success
