from typing import Any, Optional
from starlette.testclient import TestClient

from kvstore_lib.config.config import Config
from kvstore_lib.main import create_app
from kvstore_lib.services.container import ServiceContainer
from kvstore_lib.storage import DocumentStorage, MemoryStorage


def register_service_on_client(client: TestClient, name: str, instance: Any) -> None:
    """Register a service instance into the app's DI container for tests.

    Usage in tests:
        from tests.helpers import register_service_on_client
        register_service_on_client(client, 'kv_storage', fake_storage)
    """
    container = getattr(client.app.state, 'container', None)
    if container is None:
        container = ServiceContainer()
        client.app.state.container = container

    container.register_singleton(name, instance)


def make_client(storage: Optional[DocumentStorage] = None, **config: Any) -> TestClient:
    """Build a TestClient around an app using `storage` (in-memory by default)."""
    cfg = Config(storage_backend='memory', **config)
    app = create_app(cfg, storage=storage if storage is not None else MemoryStorage())
    return TestClient(app)
