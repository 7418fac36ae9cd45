"""Shared test fixtures for the pet match test suite."""

from __future__ import annotations

import json
from collections.abc import Callable
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.data.schemas import Pet
from src.vision.similarity import VisualSimilarity


@pytest.fixture
def make_pet() -> Callable[..., Pet]:
    """Factory building a Pet with overridable fields."""

    def _make(pet_id: str = "pet-1", status: str = "lost", **fields) -> Pet:
        defaults = {
            "species": "Dog",
            "breed": "Labrador",
            "color": "Black",
            "gender": "male",
            "location": "Colombo",
        }
        defaults.update(fields)
        return Pet(id=pet_id, status=status, **defaults)

    return _make


@pytest.fixture
def lost_labrador(make_pet: Callable[..., Pet]) -> Pet:
    """Lost black Labrador last seen in Colombo."""
    return make_pet(
        "lost-1",
        "lost",
        last_seen="2023-05-10",
        images=["https://img.example.com/lost-1.jpg"],
    )


@pytest.fixture
def found_labrador(make_pet: Callable[..., Pet]) -> Pet:
    """Found black Labrador picked up in Colombo the next day."""
    return make_pet(
        "found-1",
        "found",
        found_date="2023-05-11",
        images=["https://img.example.com/found-1.jpg"],
    )


@pytest.fixture
def feature_response() -> str:
    """A well-formed feature extraction answer."""
    return json.dumps(
        {
            "detectedBreed": "Labrador Retriever",
            "detectedColor": "Black",
            "distinctiveFeatures": ["white spot on chest", "blue collar"],
            "confidence": 0.9,
        }
    )


@pytest.fixture
def mock_vision_service(feature_response: str) -> MagicMock:
    """Vision service answering every request successfully."""
    service = MagicMock()
    service.compare = AsyncMock(return_value="0.9")
    service.describe = AsyncMock(return_value=feature_response)
    return service


@pytest.fixture
def visual(mock_vision_service: MagicMock) -> VisualSimilarity:
    """Adapter over the mock vision service with a short timeout."""
    return VisualSimilarity(mock_vision_service, timeout=1.0)


@pytest.fixture
def mock_es_client() -> MagicMock:
    """Create a mock Elasticsearch client."""
    mock = MagicMock()
    mock.ping.return_value = True
    mock.indices.exists.return_value = False
    mock.indices.create.return_value = {"acknowledged": True}
    return mock
