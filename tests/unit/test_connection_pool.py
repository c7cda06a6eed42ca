import errno
import threading
import time

import pytest
from tarantool.error import NetworkError

from kvstore_lib.storage.connection import (
    PoolClosed,
    PoolTimeout,
    TarantoolConnectionPool,
    parse_address,
)


class Conn:
    def __init__(self, n):
        self.n = n
        self.closed = False

    def close(self):
        self.closed = True


def counting_factory():
    made = []

    def connect():
        conn = Conn(len(made))
        made.append(conn)
        return conn

    return connect, made


def test_parse_address():
    assert parse_address('tarantool:3301') == ('tarantool', 3301)
    assert parse_address('localhost') == ('localhost', 3301)
    assert parse_address('10.0.0.5:3302') == ('10.0.0.5', 3302)
    with pytest.raises(ValueError):
        parse_address('host:port')
    with pytest.raises(ValueError):
        parse_address(':3301')


def test_connections_are_created_lazily_and_reused():
    connect, made = counting_factory()
    pool = TarantoolConnectionPool('h', 1, size=3, connect=connect)
    assert made == []

    with pool.connection() as c1:
        pass
    with pool.connection() as c2:
        pass
    assert c1 is c2
    assert len(made) == 1


def test_pool_never_exceeds_size():
    connect, made = counting_factory()
    pool = TarantoolConnectionPool('h', 1, size=2, acquire_timeout=0.01, connect=connect)
    with pool.connection() as a, pool.connection() as b:
        assert a is not b
        with pytest.raises(PoolTimeout):
            with pool.connection():
                pass
    assert len(made) == 2


def test_failed_connect_frees_the_slot():
    calls = []

    def connect():
        calls.append(1)
        if len(calls) == 1:
            raise OSError('refused')
        return Conn(len(calls))

    pool = TarantoolConnectionPool('h', 1, size=1, connect=connect)
    with pytest.raises(OSError):
        with pool.connection():
            pass
    with pool.connection() as conn:
        assert conn.n == 2


def test_close_discards_idle_connections_and_rejects_new_borrowers():
    connect, made = counting_factory()
    pool = TarantoolConnectionPool('h', 1, size=2, connect=connect)
    with pool.connection():
        pass
    pool.close()
    assert made[0].closed is True
    with pytest.raises(PoolClosed):
        with pool.connection():
            pass


def test_invalid_size():
    with pytest.raises(ValueError):
        TarantoolConnectionPool('h', 1, size=0)


def test_fake_connection_matches_connector_interface(tarantool_server):
    from kvstore_lib.storage.interfaces import BackendConnectionProtocol

    assert isinstance(tarantool_server.connect(), BackendConnectionProtocol)


def test_waiting_borrower_gets_the_slot_of_a_discarded_connection():
    connect, made = counting_factory()
    pool = TarantoolConnectionPool('h', 1, size=1, acquire_timeout=2.0, connect=connect)
    got = []

    def borrower():
        with pool.connection() as conn:
            got.append(conn)

    with pytest.raises(NetworkError):
        with pool.connection() as first:
            waiter = threading.Thread(target=borrower)
            waiter.start()
            time.sleep(0.1)
            assert got == []
            raise NetworkError(OSError(errno.ECONNRESET, 'Connection reset'))
    waiter.join(timeout=1.0)

    assert not waiter.is_alive()
    assert first.closed is True
    assert got == [made[1]]


def test_waiting_borrower_gets_a_released_connection():
    connect, made = counting_factory()
    pool = TarantoolConnectionPool('h', 1, size=1, acquire_timeout=2.0, connect=connect)
    got = []

    def borrower():
        with pool.connection() as conn:
            got.append(conn)

    with pool.connection():
        waiter = threading.Thread(target=borrower)
        waiter.start()
        time.sleep(0.1)
    waiter.join(timeout=1.0)

    assert got == [made[0]]
    assert len(made) == 1
