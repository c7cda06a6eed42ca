"""Document storage interface definitions.

Defines the DocumentStorage abstract class the HTTP layer depends on.
Implementations translate documents to whatever format the backend uses
and raise `kvstore_lib.storage.errors.StorageError` subclasses on failure.
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any

from .errors import InvalidInputError


class DocumentStorage(ABC):
    """Abstract single-key document store.

    Implementations must be safe to call concurrently from multiple threads.
    """

    @abstractmethod
    def insert(self, key: str, value: dict[str, Any]) -> None:
        """Create a record. Raise `AlreadyExistsError` if `key` is present.

        Must never overwrite an existing record.
        """

    @abstractmethod
    def get(self, key: str) -> dict[str, Any]:
        """Return the document stored under `key`.

        Raise `NotFoundError` if absent and `BackendFailureError` if the
        stored value cannot be decoded.
        """

    @abstractmethod
    def update(self, key: str, value: dict[str, Any]) -> None:
        """Replace the whole document under `key`. Raise `NotFoundError` if absent."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove the record. Raise `NotFoundError` if absent."""

    def ping(self) -> bool:
        """Return True if the backend is reachable."""
        return True

    def close(self) -> None:
        return


def check_key(key: Any) -> str:
    if not isinstance(key, str) or not key.strip():
        raise InvalidInputError("key must be a non-empty string")
    return key
