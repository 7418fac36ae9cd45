"""Tunable coefficients shared by the match scorer and the vision adapter."""

from __future__ import annotations

# Points each factor contributes at full similarity; sums to 100.
MATCH_WEIGHTS: dict[str, float] = {
    "species": 20,
    "breed": 15,
    "color": 10,
    "gender": 5,
    "location": 15,
    "time_frame": 10,
    "image_similarity": 25,
}

STRONG_SIMILARITY = 0.8
PARTIAL_SIMILARITY = 0.5
WEAK_SIMILARITY = 0.3

UNKNOWN_GENDER_FACTOR = 0.5

# (max days between lost and found, fraction of the time-frame weight, label)
TIME_FRAME_STEPS: list[tuple[int, float, str]] = [
    (2, 1.0, "Found very soon after being lost"),
    (7, 0.8, "Found within a week of being lost"),
    (30, 0.6, "Found within a month of being lost"),
    (90, 0.4, "Found within 3 months of being lost"),
]
TIME_FRAME_FALLBACK: tuple[float, str] = (0.2, "Found after a long time")

MAX_SCORE = 100


def similarity_bucket(score: float) -> str | None:
    """Qualitative label for a visual similarity score.

    Returns:
        "very", "moderately" or "somewhat", or None at or below the weak cutoff.
    """
    if score > STRONG_SIMILARITY:
        return "very"
    if score > PARTIAL_SIMILARITY:
        return "moderately"
    if score > WEAK_SIMILARITY:
        return "somewhat"
    return None


def image_bucket_reason(score: float) -> str | None:
    """Reason sentence for an image similarity score, if it clears the weak cutoff."""
    bucket = similarity_bucket(score)
    if bucket is None:
        return None
    return f"Images show {bucket} similar pets"
