import time

from kvstore_lib import __version__
from kvstore_lib.server.health import get_health
from kvstore_lib.storage import MemoryStorage
from tests.helpers import make_client


class DownStorage(MemoryStorage):
    def ping(self):
        return False


def test_get_health_contains_fields():
    h = get_health(MemoryStorage())
    assert isinstance(h, dict)
    assert h.get("status") == "ok"
    assert h.get("backend") == "ok"
    assert h.get("version") == __version__
    assert "start_time" in h
    assert isinstance(h["uptime_seconds"], int)


def test_health_without_storage_is_degraded():
    h = get_health()
    assert h["backend"] == "unconfigured"
    assert h["status"] == "degraded"


def test_uptime_increases():
    h1 = get_health()
    time.sleep(1)
    h2 = get_health()
    assert h2["uptime_seconds"] >= h1["uptime_seconds"] + 1


def test_health_endpoint_reports_unreachable_backend():
    client = make_client(storage=DownStorage())
    r = client.get('/health')
    assert r.status_code == 200
    assert r.json()["backend"] == "unreachable"
    assert r.json()["status"] == "degraded"


def test_app_lifespan_closes_storage(tarantool_storage, tarantool_server):
    with make_client(storage=tarantool_storage) as client:
        assert client.get('/health').json()["backend"] == "ok"
        conn = tarantool_server.connections[0]
    assert conn.closed is True
