"""Storage abstraction package for the KV document store."""
from typing import Optional

from .base import DocumentStorage
from .errors import (
    AlreadyExistsError,
    BackendFailureError,
    DecodeError,
    ErrorKind,
    InvalidInputError,
    NotFoundError,
    StorageError,
)
from .memory_backend import MemoryStorage


def create_storage(
    backend: str = 'tarantool',
    *,
    address: str = 'tarantool:3301',
    user: Optional[str] = None,
    password: Optional[str] = None,
    space: str = 'kv',
    index: str = 'primary',
    pool_size: int = 4,
    socket_timeout: float = 5.0,
    acquire_timeout: float = 5.0,
    atomic_update: bool = True,
) -> DocumentStorage:
    """Build a DocumentStorage for `backend` ('tarantool' or 'memory')."""
    if backend == 'memory':
        return MemoryStorage()
    if backend == 'tarantool':
        from .connection import TarantoolConnectionPool, parse_address
        from .tarantool_backend import TarantoolStorage

        host, port = parse_address(address)
        pool = TarantoolConnectionPool(
            host,
            port,
            user=user,
            password=password,
            size=pool_size,
            socket_timeout=socket_timeout,
            acquire_timeout=acquire_timeout,
        )
        return TarantoolStorage(pool, space=space, index=index, atomic_update=atomic_update)
    raise ValueError(f"unknown storage backend {backend!r}")


__all__ = [
    "DocumentStorage",
    "MemoryStorage",
    "create_storage",
    "ErrorKind",
    "StorageError",
    "InvalidInputError",
    "NotFoundError",
    "AlreadyExistsError",
    "BackendFailureError",
    "DecodeError",
]
