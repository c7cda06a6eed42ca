import logging
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)


class ServiceContainer:
    """A tiny, explicit DI container for the application's shared services.

    Services are registered by name, either as ready instances or as
    factories evaluated on first use. `close` shuts down every resolved
    service that exposes a `close()` method, in reverse registration order.
    """

    def __init__(self) -> None:
        self._singletons: Dict[str, Any] = {}
        self._factories: Dict[str, Callable[[], Any]] = {}
        self._order: List[str] = []

    def register_singleton(self, key: str, instance: Any) -> None:
        self._singletons[key] = instance
        if key not in self._order:
            self._order.append(key)

    def register_factory(self, key: str, factory: Callable[[], Any]) -> None:
        self._factories[key] = factory
        if key not in self._order:
            self._order.append(key)

    def get(self, key: str) -> Any:
        if key in self._singletons:
            return self._singletons[key]
        if key in self._factories:
            inst = self._factories[key]()
            self._singletons[key] = inst
            return inst
        raise KeyError(f"No service registered for key '{key}'")

    def __contains__(self, key: str) -> bool:
        return key in self._singletons or key in self._factories

    def close(self) -> None:
        for key in reversed(self._order):
            inst = self._singletons.get(key)
            closer = getattr(inst, 'close', None)
            if callable(closer):
                logger.debug("Closing service '%s'", key)
                try:
                    closer()
                except Exception:
                    logger.exception("Failed to close service '%s'", key)
