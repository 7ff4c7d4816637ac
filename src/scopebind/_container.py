from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import (
    TYPE_CHECKING,
    Any,
    TypeVar,
    overload,
)

from ._view import ServiceView


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from types import TracebackType

    T = TypeVar("T")

    Identifier = type[T] | str | Token
    Factory = Callable[[Container], T]


class Lifecycle(Enum):
    TRANSIENT = "transient"
    SINGLETON = "singleton"
    SCOPED = "scoped"


class _Empty:
    def __repr__(self) -> str:
        return "<empty>"


_EMPTY: Any = _Empty()


class Token:
    """Opaque service identifier.

    Tokens compare by identity, so two tokens named "db" are distinct keys.
    """

    __slots__ = ("name",)

    def __init__(self, name: str) -> None:
        self.name = name

    def __repr__(self) -> str:
        return f"Token({self.name!r})"

    def __str__(self) -> str:
        return self.name


@dataclass
class Registration:
    factory: Callable[[Container], object]
    lifecycle: Lifecycle
    cached_instance: object = _EMPTY  # singleton slot

    def has_instance(self) -> bool:
        return self.cached_instance is not _EMPTY


class ResolutionError(RuntimeError):
    pass


class NotRegisteredError(ResolutionError, LookupError):
    def __init__(self, identifier: object) -> None:
        self.identifier = identifier
        self.name = describe(identifier)
        super().__init__(f"Service not registered: {self.name}")


def describe(identifier: object) -> str:
    """Textual form of an identifier, as shown in errors and logs."""
    if isinstance(identifier, (str, Token)):
        return str(identifier)
    qualname = getattr(identifier, "__qualname__", None)
    if isinstance(qualname, str):
        return qualname
    return repr(identifier)


class Container:
    """Service container.

    - register factories, classes or pre-built instances under an identifier
    - lifecycles: transient / singleton / scoped
    - scopes share singletons with their parent and cache scoped services on their own.

    Factories receive the container and resolve their own dependencies from it;
    nothing is auto-wired.
    """

    def __init__(self) -> None:
        self._registrations: dict[Any, Registration] = {}
        self._scoped_instances: dict[Any, object] = {}
        self._lock = threading.RLock()

    def register(
        self,
        identifier: Identifier[T],
        factory: Factory[T],
        lifecycle: Lifecycle = Lifecycle.TRANSIENT,
    ) -> None:
        """Register a factory for an identifier, replacing any previous registration.

        Example:
          container.register("db", lambda c: Database(c.resolve("settings")), Lifecycle.SINGLETON)

        """
        self._set(identifier, Registration(factory=factory, lifecycle=lifecycle))

    def register_singleton(self, identifier: Identifier[T], factory: Factory[T]) -> None:
        self.register(identifier, factory, Lifecycle.SINGLETON)

    def register_transient(self, identifier: Identifier[T], factory: Factory[T]) -> None:
        self.register(identifier, factory, Lifecycle.TRANSIENT)

    def register_scoped(self, identifier: Identifier[T], factory: Factory[T]) -> None:
        self.register(identifier, factory, Lifecycle.SCOPED)

    def register_class(
        self,
        identifier: Identifier[T],
        cls: Callable[[], T],
        lifecycle: Lifecycle = Lifecycle.TRANSIENT,
    ) -> None:
        """Register a class constructed without arguments.

        Classes that need dependencies should be registered with a factory instead.
        """
        self.register(identifier, lambda _: cls(), lifecycle)

    def register_instance(self, identifier: Identifier[T], instance: T) -> None:
        """Register a pre-built instance (always singleton)."""
        self._set(
            identifier,
            Registration(
                factory=lambda _: instance,
                lifecycle=Lifecycle.SINGLETON,
                cached_instance=instance,
            ),
        )

    def _set(self, identifier: object, reg: Registration) -> None:
        with self._lock:
            if identifier in self._registrations:
                logger.warning("Replacing registration for %s", describe(identifier))
            self._registrations[identifier] = reg
            # a stale scoped value would hide the new factory
            self._scoped_instances.pop(identifier, None)
        logger.debug("Registered %s (%s)", describe(identifier), reg.lifecycle.value)

    @overload
    def resolve(self, identifier: type[T]) -> T: ...

    @overload
    def resolve(self, identifier: str | Token) -> Any: ...

    def resolve(self, identifier: Identifier[T]) -> object:
        """Resolve the identifier to an instance.

        Raises NotRegisteredError when nothing is registered under the identifier.
        Errors raised by the factory propagate as they are and leave nothing cached.
        """
        with self._lock:
            reg = self._registrations.get(identifier)
            if reg is None:
                raise NotRegisteredError(identifier)

            if reg.lifecycle is Lifecycle.SINGLETON:
                if not reg.has_instance():
                    logger.debug("Creating singleton %s", describe(identifier))
                    reg.cached_instance = reg.factory(self)
                return reg.cached_instance

            if reg.lifecycle is Lifecycle.SCOPED:
                if identifier not in self._scoped_instances:
                    logger.debug("Creating scoped %s", describe(identifier))
                    self._scoped_instances[identifier] = reg.factory(self)
                return self._scoped_instances[identifier]

            return reg.factory(self)

    def has(self, identifier: object) -> bool:
        with self._lock:
            return identifier in self._registrations

    def __contains__(self, identifier: object) -> bool:
        return self.has(identifier)

    def identifiers(self) -> list[Any]:
        """Registered identifiers, in registration order."""
        with self._lock:
            return list(self._registrations)

    def create_scope(self) -> Container:
        """Create a child container for one unit of work.

        Singletons are delegated to this container so parent and scope share them.
        Scoped and transient registrations are copied, giving the scope its own scoped cache.
        """
        scope = Container()
        with self._lock:
            for identifier, reg in self._registrations.items():
                if reg.lifecycle is Lifecycle.SINGLETON:
                    scope._registrations[identifier] = Registration(  # noqa: SLF001
                        factory=self._delegate(identifier),
                        lifecycle=Lifecycle.SINGLETON,
                        cached_instance=reg.cached_instance,
                    )
                else:
                    scope._registrations[identifier] = Registration(  # noqa: SLF001
                        factory=reg.factory,
                        lifecycle=reg.lifecycle,
                    )
        logger.debug("Created scope with %d registrations", len(scope._registrations))  # noqa: SLF001
        return scope

    def _delegate(self, identifier: object) -> Callable[[Container], object]:
        return lambda _: self.resolve(identifier)

    def clear_scope(self) -> None:
        """Drop scoped instances; registrations and singletons are kept."""
        with self._lock:
            self._scoped_instances.clear()
        logger.debug("Cleared scoped instances")

    def clear(self) -> None:
        """Drop every registration and scoped instance."""
        with self._lock:
            self._registrations.clear()
            self._scoped_instances.clear()
        logger.debug("Cleared container")

    def view(self, identifiers: Iterable[object] | None = None) -> ServiceView:
        """Read-only mapping that resolves from this container on every access."""
        if identifiers is None:
            identifiers = [i for i in self.identifiers() if isinstance(i, str)]
        return ServiceView(self, identifiers)

    def __enter__(self) -> Container:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.clear_scope()
