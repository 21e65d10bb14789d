"""
Error taxonomy shared by the storage, collection and HTTP layers.
"""

from __future__ import annotations


class PrizeError(Exception):
    """Base class for errors raised by the prize backend."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(PrizeError):
    """Missing or out-of-range input on creation."""

    status_code = 400


class NotFoundError(PrizeError):
    """No prize with the requested id."""

    status_code = 404


class StorageUnavailable(PrizeError):
    """The backend cannot be reached or is read-only."""

    status_code = 500


class UnexpectedError(PrizeError):
    status_code = 500
