"""Pooled connections to a Tarantool instance.

A `tarantool.Connection` is not meant to be shared by concurrent callers, so
the pool hands each storage call its own connection and takes it back
afterwards. Connections are created lazily up to `size`; a connection that
failed on the network is discarded instead of being returned, which frees
its slot for a waiting borrower.
"""
from __future__ import annotations
import logging
import threading
import time
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional

import tarantool
from tarantool.error import NetworkError

from .interfaces import BackendConnectionProtocol

logger = logging.getLogger(__name__)


class PoolError(Exception):
    pass


class PoolTimeout(PoolError):
    pass


class PoolClosed(PoolError):
    pass


def parse_address(address: str, default_port: int = 3301) -> tuple[str, int]:
    """Split `host:port` into its parts. A bare host uses `default_port`."""
    host, sep, port = address.rpartition(':')
    if not sep:
        return address, default_port
    if not host:
        raise ValueError(f"invalid Tarantool address {address!r}")
    try:
        return host, int(port)
    except ValueError as e:
        raise ValueError(f"invalid port in Tarantool address {address!r}") from e


class TarantoolConnectionPool:
    def __init__(
        self,
        host: str,
        port: int,
        user: Optional[str] = None,
        password: Optional[str] = None,
        *,
        size: int = 4,
        socket_timeout: float = 5.0,
        acquire_timeout: float = 5.0,
        connect: Optional[Callable[[], BackendConnectionProtocol]] = None,
    ) -> None:
        if size < 1:
            raise ValueError("pool size must be at least 1")
        self.host = host
        self.port = port
        self.user = user or None
        self.password = password or None
        self.size = size
        self.socket_timeout = socket_timeout
        self.acquire_timeout = acquire_timeout
        self._connect = connect or self._open_connection
        # idle connections, most recently used last
        self._idle: list = []
        self._available = threading.Condition()
        self._created = 0
        self._closed = False

    def _open_connection(self) -> BackendConnectionProtocol:
        logger.debug("Opening Tarantool connection to %s:%s", self.host, self.port)
        return tarantool.Connection(
            self.host,
            self.port,
            user=self.user,
            password=self.password,
            socket_timeout=self.socket_timeout,
            connection_timeout=self.socket_timeout,
        )

    def _acquire(self) -> Any:
        deadline = time.monotonic() + self.acquire_timeout
        with self._available:
            while True:
                if self._closed:
                    raise PoolClosed("connection pool is closed")
                if self._idle:
                    return self._idle.pop()
                if self._created < self.size:
                    self._created += 1
                    break
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise PoolTimeout(
                        f"no Tarantool connection available within {self.acquire_timeout}s"
                    )
                self._available.wait(remaining)

        # connect outside the lock; the slot is already reserved
        try:
            return self._connect()
        except Exception:
            self._free_slot()
            raise

    def _free_slot(self) -> None:
        with self._available:
            self._created -= 1
            self._available.notify()

    def _release(self, conn: Any) -> None:
        with self._available:
            if not self._closed:
                self._idle.append(conn)
                self._available.notify()
                return
        self._discard(conn)

    def _discard(self, conn: Any) -> None:
        self._free_slot()
        try:
            conn.close()
        except Exception:
            logger.debug("Error closing discarded Tarantool connection", exc_info=True)

    @contextmanager
    def connection(self) -> Iterator[BackendConnectionProtocol]:
        """Borrow a connection for the duration of the `with` block."""
        conn = self._acquire()
        broken = False
        try:
            yield conn
        except NetworkError:
            broken = True
            raise
        finally:
            if broken:
                self._discard(conn)
            else:
                self._release(conn)

    def close(self) -> None:
        with self._available:
            self._closed = True
            idle, self._idle = self._idle, []
            self._available.notify_all()
        for conn in idle:
            self._discard(conn)
        logger.info("Closed Tarantool connection pool for %s:%s", self.host, self.port)
