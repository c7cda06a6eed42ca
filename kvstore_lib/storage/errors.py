"""Domain error taxonomy for document storage.

Every failure raised by a storage implementation is a `StorageError` with a
`kind` from `ErrorKind`. Backend status codes are translated to kinds in
exactly one place, `classify_backend_error`, so the mapping can evolve
without touching the storage operations or the HTTP layer.
"""
from __future__ import annotations
from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    INVALID_INPUT = "invalid_input"
    NOT_FOUND = "not_found"
    ALREADY_EXISTS = "already_exists"
    BACKEND_FAILURE = "backend_failure"


class StorageError(Exception):
    """Base class for storage failures. Never carries partial results."""

    kind: ErrorKind = ErrorKind.BACKEND_FAILURE

    def __init__(self, message: str, key: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.key = key


class InvalidInputError(StorageError):
    kind = ErrorKind.INVALID_INPUT


class NotFoundError(StorageError):
    kind = ErrorKind.NOT_FOUND


class AlreadyExistsError(StorageError):
    kind = ErrorKind.ALREADY_EXISTS


class BackendFailureError(StorageError):
    kind = ErrorKind.BACKEND_FAILURE


class DecodeError(BackendFailureError):
    """The backend returned a tuple or value that is not a document."""


# Tarantool box error codes (see box/errcode.h).
ER_TUPLE_FOUND = 3
ER_TUPLE_NOT_FOUND = 4

# operation -> {code: kind}; codes missing for an operation are backend failures
BACKEND_ERROR_KINDS: dict[str, dict[int, ErrorKind]] = {
    'insert': {ER_TUPLE_FOUND: ErrorKind.ALREADY_EXISTS},
    'update': {ER_TUPLE_NOT_FOUND: ErrorKind.NOT_FOUND},
    'delete': {ER_TUPLE_NOT_FOUND: ErrorKind.NOT_FOUND},
    'select': {},
}

_ERROR_CLASSES: dict[ErrorKind, type[StorageError]] = {
    ErrorKind.INVALID_INPUT: InvalidInputError,
    ErrorKind.NOT_FOUND: NotFoundError,
    ErrorKind.ALREADY_EXISTS: AlreadyExistsError,
    ErrorKind.BACKEND_FAILURE: BackendFailureError,
}


def classify_backend_error(operation: str, code: Optional[int]) -> ErrorKind:
    """Map an engine status code returned by `operation` to a domain error kind.

    Unknown operations, unknown codes and missing codes are backend failures.
    A read never reports a conflict.
    """
    if code is None:
        return ErrorKind.BACKEND_FAILURE
    return BACKEND_ERROR_KINDS.get(operation, {}).get(code, ErrorKind.BACKEND_FAILURE)


def error_for(kind: ErrorKind, message: str, key: Optional[str] = None) -> StorageError:
    return _ERROR_CLASSES[kind](message, key=key)
