"""Pydantic models for pet reports and match results."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

PetStatus = Literal["lost", "found"]
Gender = Literal["male", "female", "unknown"]

_GENDERS = {"male", "female", "unknown"}


class _CamelModel(BaseModel):
    """Base model accepting snake_case or camelCase and dumping camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GeoLocation(_CamelModel):
    """Latitude/longitude pair produced by the geocoder."""

    latitude: float
    longitude: float


class Pet(_CamelModel):
    """A lost or found pet report.

    The record is owned by the pet repository; the matching engine only
    reads it. ``species`` is also accepted as ``type`` on input.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    id: str = Field(description="Unique report identifier")
    status: PetStatus = Field(description="'lost' or 'found'")
    species: str = Field(
        validation_alias=AliasChoices("species", "type"),
        description="Free-text category, e.g. 'Dog'",
    )
    name: str | None = None
    breed: str | None = None
    color: str = ""
    gender: Gender = "unknown"
    last_seen: date | None = Field(default=None, description="Lost pets only")
    found_date: date | None = Field(default=None, description="Found pets only")
    location: str = ""
    coordinates: GeoLocation | None = None
    images: list[str] = Field(default_factory=list)
    description: str = ""
    size: str | None = None
    age: str | None = None
    contact_name: str | None = None
    contact_email: str | None = None
    contact_phone: str | None = None
    created_at: datetime | None = None

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("gender", mode="before")
    @classmethod
    def _normalize_gender(cls, value: object) -> str:
        if not isinstance(value, str):
            return "unknown"
        value = value.strip().lower()
        return value if value in _GENDERS else "unknown"

    @field_validator("last_seen", "found_date", mode="before")
    @classmethod
    def _parse_report_date(cls, value: object) -> object:
        # Timestamps are truncated to their UTC calendar day.
        if isinstance(value, str):
            value = value.strip()
            if not value:
                return None
            if len(value) > 10:
                value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        if isinstance(value, datetime):
            if value.tzinfo is not None:
                value = value.astimezone(timezone.utc)
            return value.date()
        return value

    @field_validator("images", mode="before")
    @classmethod
    def _coerce_images(cls, value: object) -> object:
        if value is None:
            return []
        if isinstance(value, str):
            return [part.strip() for part in value.split(";") if part.strip()]
        return value


class PetFeatures(_CamelModel):
    """Descriptive features extracted from a single pet image."""

    detected_breed: str
    detected_color: str
    distinctive_features: list[str] = Field(default_factory=list)
    confidence: float

    @field_validator("confidence", mode="after")
    @classmethod
    def _clamp_confidence(cls, value: float) -> float:
        return max(0.0, min(1.0, value))


class ImageSimilarity(_CamelModel):
    """Visual comparison of two pets' primary images."""

    score: float = Field(ge=0.0, le=1.0)
    confidence: float = Field(ge=0.0, le=1.0)
    reasons: list[str] = Field(default_factory=list)


class MatchScore(_CamelModel):
    """Weighted score for one (lost, found) pair with its explanation."""

    score: int = Field(ge=0, le=100)
    reasons: list[str] = Field(default_factory=list)
    image_similarity: ImageSimilarity | None = None


class PetMatch(_CamelModel):
    """A candidate pairing returned to the caller."""

    lost_pet: Pet
    found_pet: Pet
    match_score: MatchScore


class MatchQuery(_CamelModel):
    """Caller request for matches against a stored pet report."""

    pet_id: str
    pet_status: PetStatus
    threshold: int = 50
    limit: int = Field(default=5, ge=0)
    skip_image_analysis: bool = False


class MatchResponse(_CamelModel):
    """Ranked matches for a single query."""

    matches: list[PetMatch] = Field(default_factory=list)
