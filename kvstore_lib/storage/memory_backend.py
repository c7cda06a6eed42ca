"""Simple memory-backed document storage

This backend keeps documents in a dict keyed by record key. Values are deep
copied on the way in and out so callers never share state with the store.
"""
import copy
from threading import RLock
from typing import Dict, Any

from . import codec
from .base import DocumentStorage, check_key
from .errors import AlreadyExistsError, NotFoundError


class MemoryStorage(DocumentStorage):
    def __init__(self):
        self._lock = RLock()
        self._store: Dict[str, Dict[str, Any]] = {}

    def insert(self, key: str, value: Dict[str, Any]) -> None:
        key = check_key(key)
        doc = copy.deepcopy(codec.encode(value))
        with self._lock:
            if key in self._store:
                raise AlreadyExistsError(f"key {key!r} already exists", key=key)
            self._store[key] = doc

    def get(self, key: str) -> Dict[str, Any]:
        key = check_key(key)
        with self._lock:
            if key not in self._store:
                raise NotFoundError(f"key {key!r} not found", key=key)
            return copy.deepcopy(self._store[key])

    def update(self, key: str, value: Dict[str, Any]) -> None:
        key = check_key(key)
        doc = copy.deepcopy(codec.encode(value))
        with self._lock:
            if key not in self._store:
                raise NotFoundError(f"key {key!r} not found", key=key)
            self._store[key] = doc

    def delete(self, key: str) -> None:
        key = check_key(key)
        with self._lock:
            if self._store.pop(key, None) is None:
                raise NotFoundError(f"key {key!r} not found", key=key)

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)
