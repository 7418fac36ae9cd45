"""Exceptions raised at the pet matching boundaries."""

from __future__ import annotations


class PetMatchError(Exception):
    """Base exception for all pet matching errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)


class PetNotFoundError(PetMatchError):
    """Subject pet could not be resolved by the repository."""


class PetStatusMismatchError(PetMatchError):
    """Subject pet does not have the status the caller asked for."""


class RepositoryError(PetMatchError):
    """Pet repository operation failed."""


class VisionServiceError(PetMatchError):
    """Vision service call failed or is misconfigured."""
