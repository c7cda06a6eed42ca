from typing import Protocol, Any, Sequence, runtime_checkable


@runtime_checkable
class DocumentStorageProtocol(Protocol):
    """Storage protocol mirroring `kvstore_lib.storage.DocumentStorage`.

    Implementations should follow the semantics documented on the abstract
    base class in `kvstore_lib.storage.base` (NotFoundError for missing keys,
    AlreadyExistsError on duplicate insert, thread-safety, etc.).
    """

    def insert(self, key: str, value: dict[str, Any]) -> None: ...

    def get(self, key: str) -> dict[str, Any]: ...

    def update(self, key: str, value: dict[str, Any]) -> None: ...

    def delete(self, key: str) -> None: ...

    def ping(self) -> bool: ...

    def close(self) -> None: ...


@runtime_checkable
class BackendConnectionProtocol(Protocol):
    """Subset of `tarantool.Connection` used by the Tarantool storage."""

    def select(self, space_name: Any, key: Any = None, offset: int = 0, limit: int = ...,
               index: Any = 0, iterator: Any = None) -> Any: ...

    def insert(self, space_name: Any, values: Sequence[Any]) -> Any: ...

    def update(self, space_name: Any, key: Any, op_list: Sequence[Any], index: Any = 0) -> Any: ...

    def delete(self, space_name: Any, key: Any, index: Any = 0) -> Any: ...

    def ping(self, notime: bool = False) -> Any: ...

    def close(self) -> None: ...
