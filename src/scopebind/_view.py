from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:
    from collections.abc import Iterable

    from ._container import Container


class ServiceView(Mapping[Any, Any]):
    """Read-only mapping of identifiers to services.

    Values are resolved from the container on every access, so lifecycles apply
    exactly as they do for direct `resolve` calls. String keys are also
    available as attributes:

      services = scope.view(["db", "user_repo"])
      services.db is services["db"]

    """

    __slots__ = ("_container", "_keys")

    def __init__(self, container: Container, identifiers: Iterable[object]) -> None:
        object.__setattr__(self, "_container", container)
        object.__setattr__(self, "_keys", tuple(dict.fromkeys(identifiers)))

    def __getitem__(self, identifier: object) -> Any:
        if identifier not in self._keys:
            raise KeyError(identifier)
        return self._container.resolve(identifier)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._keys)

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._keys

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_") or name not in self._keys:
            msg = f"{type(self).__name__!r} object has no service {name!r}"
            raise AttributeError(msg)
        return self._container.resolve(name)

    def __setattr__(self, name: str, value: object) -> None:
        msg = f"{type(self).__name__} is read-only"
        raise AttributeError(msg)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self._keys)!r})"
