from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING, Any

from ._errors import MissingScopeError
from ._identity import describe


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from ._chain import ResolutionChain
    from ._container import Container
    from ._introspect import ConstructionPlan
    from ._registry import Scope


class Lifetime(Enum):
    SINGLETON = "singleton"
    TRANSIENT = "transient"
    SCOPED = "scoped"


class Provider(ABC):
    """Produces the value bound to one interface."""

    lifetime: Lifetime

    @abstractmethod
    def provide(self, container: Container, scope: Scope | None, chain: ResolutionChain) -> Any:
        """Return an instance, threading `scope` through any nested resolution."""


class SingletonProvider(Provider):
    lifetime = Lifetime.SINGLETON

    def __init__(self, instance: Any) -> None:
        self.instance = instance

    def provide(self, container: Container, scope: Scope | None, chain: ResolutionChain) -> Any:
        return self.instance

    def __repr__(self) -> str:
        return f"SingletonProvider({type(self.instance).__qualname__})"


class _ConstructingProvider(Provider):
    """Shared state of the providers that build their implementation on demand.

    `plan` is fixed at bind time when the binding declared a factory or
    explicit dependencies; otherwise the implementation's constructor is
    introspected on first use.
    """

    def __init__(self, impl: Any, plan: ConstructionPlan | None = None) -> None:
        self.impl = impl
        self._plan = plan

    def plan(self, container: Container) -> ConstructionPlan:
        if self._plan is not None:
            return self._plan
        return container.introspector.plan(self.impl)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({describe(self.impl)})"


class TransientProvider(_ConstructingProvider):
    lifetime = Lifetime.TRANSIENT

    def provide(self, container: Container, scope: Scope | None, chain: ResolutionChain) -> Any:
        instance = container.build(self.plan(container), scope, chain)
        logger.debug("Created transient: %s", describe(self.impl))
        return instance


class ScopedProvider(_ConstructingProvider):
    """Builds at most one instance per scope, cached under the implementation key."""

    lifetime = Lifetime.SCOPED

    def provide(self, container: Container, scope: Scope | None, chain: ResolutionChain) -> Any:
        if scope is None:
            msg = f"Scoped dependency {describe(self.impl)} requested without a scope"
            raise MissingScopeError(self.impl, msg, [*chain.labels(), describe(self.impl)])

        cached = scope.find(self.impl)
        if cached is not None:
            return cached.provider.provide(container, scope, chain)

        instance = container.build(self.plan(container), scope, chain)
        scope.cache(self.impl, instance)
        logger.debug("Created scoped %s in %r", describe(self.impl), scope)
        return instance
