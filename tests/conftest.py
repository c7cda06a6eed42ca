"""Pytest configuration helpers for test collection.

Ensure the project root is on sys.path so tests can import the package
without requiring PYTHONPATH to be set externally.
"""
import sys
from pathlib import Path

import pytest


def pytest_configure(config):
    # Insert repo root (one level up from tests/) to sys.path
    repo_root = Path(__file__).resolve().parents[1]
    sys.path.insert(0, str(repo_root))


@pytest.fixture
def tarantool_server():
    from tests.fakes import FakeTarantoolServer

    return FakeTarantoolServer()


@pytest.fixture
def tarantool_storage(tarantool_server):
    from kvstore_lib.storage.connection import TarantoolConnectionPool
    from kvstore_lib.storage.tarantool_backend import TarantoolStorage

    pool = TarantoolConnectionPool('fake', 3301, size=2, acquire_timeout=0.5, connect=tarantool_server.connect)
    storage = TarantoolStorage(pool)
    yield storage
    storage.close()
