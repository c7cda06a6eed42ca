"""Services package: DI container and request-time resolution helpers."""
from .container import ServiceContainer
from .resolver import resolve_service, resolve_optional_service

__all__ = [
    "ServiceContainer",
    "resolve_service",
    "resolve_optional_service",
]
