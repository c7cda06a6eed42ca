"""Document storage backed by a Tarantool space.

Records are stored as `[key, value]` tuples in a space with a unique primary
index on the key field. Each operation borrows one connection from a
`TarantoolConnectionPool`, issues the matching box request and classifies
the outcome into the domain error taxonomy.
"""
from __future__ import annotations
import logging
from typing import Any, Callable, Optional

from tarantool.error import DatabaseError, Error as TarantoolError, NetworkError

from . import codec
from .base import DocumentStorage, check_key
from .connection import PoolError, TarantoolConnectionPool
from .errors import (
    BackendFailureError,
    DecodeError,
    ErrorKind,
    NotFoundError,
    classify_backend_error,
    error_for,
)

logger = logging.getLogger(__name__)


def _error_code(exc: BaseException) -> Optional[int]:
    code = getattr(exc, 'code', None)
    if isinstance(code, int):
        return code
    if exc.args and isinstance(exc.args[0], int):
        return exc.args[0]
    return None


def _rows(resp: Any) -> list:
    if resp is None:
        return []
    data = getattr(resp, 'data', resp)
    return list(data or [])


class TarantoolStorage(DocumentStorage):
    """DocumentStorage over a Tarantool space.

    With `atomic_update` (the default) an update is a single box `update`
    request, which the engine applies only when the key exists. Without it
    the update first selects the key and then updates it; a concurrent
    delete or insert between the two requests is not detected.
    """

    def __init__(
        self,
        pool: TarantoolConnectionPool,
        space: str = 'kv',
        index: str = 'primary',
        *,
        atomic_update: bool = True,
    ) -> None:
        self._pool = pool
        self.space = space
        self.index = index
        self.atomic_update = atomic_update

    def _call(self, operation: str, key: str, request: Callable[[Any], Any]) -> Any:
        try:
            with self._pool.connection() as conn:
                resp = request(conn)
        except NetworkError as e:
            logger.warning("Tarantool %s for key %r failed on the network: %s", operation, key, e)
            raise BackendFailureError(f"Tarantool {operation} failed: network error", key=key) from e
        except DatabaseError as e:
            code = _error_code(e)
            kind = classify_backend_error(operation, code)
            logger.debug("Tarantool %s for key %r returned error code=%s: %s", operation, key, code, e)
            if kind is ErrorKind.BACKEND_FAILURE:
                logger.warning("Tarantool %s for key %r failed (code=%s): %s", operation, key, code, e)
            raise error_for(kind, f"Tarantool {operation} failed (code={code})", key=key) from e
        except (TarantoolError, PoolError) as e:
            logger.warning("Tarantool %s for key %r failed: %s", operation, key, e)
            raise BackendFailureError(f"Tarantool {operation} failed", key=key) from e

        code = getattr(resp, 'return_code', 0) or 0
        if code:
            kind = classify_backend_error(operation, code)
            logger.warning("Tarantool %s for key %r returned status %s", operation, key, code)
            raise error_for(kind, f"Tarantool {operation} failed (code={code})", key=key)
        return resp

    def _select(self, key: str) -> list:
        resp = self._call(
            'select',
            key,
            lambda conn: conn.select(self.space, [key], index=self.index, limit=1, iterator='EQ'),
        )
        return _rows(resp)

    def _replace_value(self, key: str, ops: list) -> list:
        resp = self._call(
            'update',
            key,
            lambda conn: conn.update(self.space, [key], ops, index=self.index),
        )
        return _rows(resp)

    def insert(self, key: str, value: dict[str, Any]) -> None:
        key = check_key(key)
        record = codec.encode_record(key, value)
        self._call('insert', key, lambda conn: conn.insert(self.space, record))
        logger.info("Created record %r", key)

    def get(self, key: str) -> dict[str, Any]:
        key = check_key(key)
        rows = self._select(key)
        if not rows:
            raise NotFoundError(f"key {key!r} not found", key=key)
        try:
            _, document = codec.decode_record(rows[0])
        except DecodeError as e:
            e.key = key
            logger.error("Stored record %r could not be decoded: %s", key, e)
            raise
        return document

    def update(self, key: str, value: dict[str, Any]) -> None:
        key = check_key(key)
        ops = codec.value_assignment(value)
        if not self.atomic_update and not self._select(key):
            raise NotFoundError(f"key {key!r} not found", key=key)
        if not self._replace_value(key, ops):
            raise NotFoundError(f"key {key!r} not found", key=key)
        logger.info("Updated record %r", key)

    def delete(self, key: str) -> None:
        key = check_key(key)
        resp = self._call(
            'delete',
            key,
            lambda conn: conn.delete(self.space, [key], index=self.index),
        )
        if not _rows(resp):
            raise NotFoundError(f"key {key!r} not found", key=key)
        logger.info("Deleted record %r", key)

    def ping(self) -> bool:
        try:
            with self._pool.connection() as conn:
                conn.ping(notime=True)
            return True
        except (TarantoolError, PoolError, OSError) as e:
            logger.debug("Tarantool ping failed: %s", e)
            return False

    def close(self) -> None:
        self._pool.close()
