"""Minimal service container.

This package maps identifiers (strings, tokens or classes) to factories and
resolves them according to a lifecycle, with scopes for per-unit-of-work
instances.

Exports:
- `Container`: registration and resolution of factories, classes and pre-built instances.
- `Lifecycle`: caching policy of a registration (transient, singleton or scoped).
- `Token`: opaque identifier that only ever equals itself.
- `ServiceView`: read-only mapping resolving services from a container on each access.
- `ResolutionError` / `NotRegisteredError`: resolution failures.
"""

from ._container import (
    Container,
    Lifecycle,
    NotRegisteredError,
    Registration,
    ResolutionError,
    Token,
)
from ._view import ServiceView


__all__ = [
    "Container",
    "Lifecycle",
    "NotRegisteredError",
    "Registration",
    "ResolutionError",
    "ServiceView",
    "Token",
]
