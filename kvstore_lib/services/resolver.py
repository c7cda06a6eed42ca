"""Lookup of services registered on `app.state.container`."""
import logging
from typing import Any, Optional

from fastapi import HTTPException
from starlette.requests import Request

from kvstore_lib.services.container import ServiceContainer

logger = logging.getLogger(__name__)


def _container(request: Request) -> Optional[ServiceContainer]:
    return getattr(request.app.state, 'container', None)


def _not_configured(reason: str) -> HTTPException:
    logger.error(reason)
    return HTTPException(status_code=500, detail={'error': 'internal_error', 'message': 'Internal server error'})


def resolve_service(request: Request, name: str) -> Any:
    """Return the service registered as `name` or fail the request with a 500.

    The reason is logged; the response body stays generic.
    """
    container = _container(request)
    if container is None:
        raise _not_configured("Service container not configured on the application")
    if name not in container:
        raise _not_configured(f"Service '{name}' not configured")
    return container.get(name)


def resolve_optional_service(request: Request, name: str) -> Any:
    container = _container(request)
    if container is None or name not in container:
        return None
    return container.get(name)
