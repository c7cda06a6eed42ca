"""Application factory for the KV document store FastAPI app.

This module exposes `create_app(config: Config) -> FastAPI` which performs
all heavy setup (storage composition, middleware and router registration).
Avoids performing side-effects at import time so tests can construct
isolated apps.

To create an app for production or local runs:

    from kvstore_lib.main import create_app
    from kvstore_lib.config.config import load_config
    app = create_app(load_config())

Note: we intentionally do not create a global `app` at import time.
"""
import contextlib
import logging
from typing import Optional

from fastapi import FastAPI
from starlette.concurrency import run_in_threadpool

from kvstore_lib.config.config import Config
from kvstore_lib.services import ServiceContainer
from kvstore_lib.storage import DocumentStorage, create_storage

logger = logging.getLogger(__name__)


def build_storage(config: Config) -> DocumentStorage:
    return create_storage(
        backend=config.storage_backend,
        address=config.tarantool_host,
        user=config.tarantool_user,
        password=config.tarantool_pass,
        space=config.space,
        index=config.index,
        pool_size=config.pool_size,
        socket_timeout=config.socket_timeout,
        acquire_timeout=config.acquire_timeout,
        atomic_update=config.atomic_update,
    )


def create_app(config: Config, storage: Optional[DocumentStorage] = None) -> FastAPI:
    """Create and return a configured FastAPI application.

    `storage` overrides the backend chosen by `config`; tests use it to
    inject fakes.
    """
    container = ServiceContainer()
    container.register_singleton("config", config)
    if storage is None:
        container.register_factory("kv_storage", lambda: build_storage(config))
    else:
        container.register_singleton("kv_storage", storage)

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting KV store with %s storage", config.storage_backend)
        backend = container.get("kv_storage")
        if not await run_in_threadpool(backend.ping):
            logger.warning("Storage backend at %s is not reachable yet", config.tarantool_host)
        try:
            yield
        finally:
            logger.info("Shutting down, closing services")
            container.close()

    app = FastAPI(title="KV Document Store", lifespan=lifespan)
    # Handlers resolve services via the container only.
    app.state.container = container

    # Register middleware; the last one added is the outermost.
    from kvstore_lib.middleware import BrotliCompression, Recovery, RequestLogging, RequestTimeout
    if config.enable_brotli:
        logger.info("Brotli compression middleware is enabled")
        app.add_middleware(BrotliCompression)
    app.add_middleware(Recovery)
    app.add_middleware(RequestTimeout, timeout=config.request_timeout)
    app.add_middleware(RequestLogging)

    # Router registration: import routers here to avoid import-time side-effects
    from kvstore_lib.kv.api import router as kv_router
    from kvstore_lib.server.api import router as server_router

    app.include_router(kv_router)
    app.include_router(server_router)

    return app
