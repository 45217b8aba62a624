"""Object-graph construction with singleton, transient and scoped lifetimes.

Bind interfaces to implementations on a `Container`, then resolve any type:
its constructor dependencies are read from type hints (or declared
explicitly per binding) and built recursively from the bindings.

Exports:
- `Container`: binding registry and resolver.
- `Scope`: per-context cache for scoped bindings, from `Container.make_scope()`.
- `TEMPORARY_SCOPE`: marker for a one-off scope dropped after the call.
- `GLOBAL_SCOPE`: a process-wide scope.
- `Lifetime`, `Duplicates`: lifetime policies and duplicate-binding policies.
- The `WiredepError` exception hierarchy.
"""

from ._container import Container
from ._errors import (
    CircularDependencyError,
    DependencyNotFoundError,
    IntrospectionError,
    MissingScopeError,
    RegistrationError,
    ResolutionError,
    WiredepError,
)
from ._identity import type_identity
from ._introspect import ConstructionPlan, Dependency, Introspector
from ._providers import Lifetime
from ._registry import GLOBAL_SCOPE, TEMPORARY_SCOPE, Binding, Duplicates, Scope


__all__ = [
    "GLOBAL_SCOPE",
    "TEMPORARY_SCOPE",
    "Binding",
    "CircularDependencyError",
    "ConstructionPlan",
    "Container",
    "Dependency",
    "DependencyNotFoundError",
    "Duplicates",
    "IntrospectionError",
    "Introspector",
    "Lifetime",
    "MissingScopeError",
    "RegistrationError",
    "ResolutionError",
    "Scope",
    "WiredepError",
    "type_identity",
]
