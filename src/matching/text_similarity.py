"""Normalized edit-distance similarity for short free-text fields."""

from __future__ import annotations


def levenshtein_distance(a: str, b: str) -> int:
    """Minimum number of single-character edits turning *a* into *b*.

    Args:
        a: Source string.
        b: Target string.

    Returns:
        Edit distance counting insertions, deletions and substitutions.
    """
    # Rows follow b, columns follow a.
    matrix = [[0] * (len(a) + 1) for _ in range(len(b) + 1)]

    for i in range(len(a) + 1):
        matrix[0][i] = i
    for j in range(len(b) + 1):
        matrix[j][0] = j

    for j in range(1, len(b) + 1):
        for i in range(1, len(a) + 1):
            cost = 0 if a[i - 1] == b[j - 1] else 1
            matrix[j][i] = min(
                matrix[j][i - 1] + 1,
                matrix[j - 1][i] + 1,
                matrix[j - 1][i - 1] + cost,
            )

    return matrix[len(b)][len(a)]


def text_similarity(a: str, b: str) -> float:
    """Similarity between two strings in [0, 1].

    Both strings are lowercased and stripped first. Identical strings
    (including two empty strings) score 1.0; otherwise the score is
    ``1 - distance / max(len(a), len(b))``.

    Args:
        a: First string.
        b: Second string.

    Returns:
        Similarity score between 0 and 1.
    """
    a = a.lower().strip()
    b = b.lower().strip()

    if a == b:
        return 1.0

    distance = levenshtein_distance(a, b)
    return 1.0 - distance / max(len(a), len(b))
