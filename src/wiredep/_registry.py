from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Final

from ._errors import RegistrationError
from ._identity import describe
from ._providers import SingletonProvider


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Iterator

    from ._providers import Lifetime, Provider


class Duplicates(Enum):
    """What a registry does when an interface is bound a second time."""

    KEEP_FIRST = "keep_first"
    REJECT = "reject"
    REPLACE = "replace"


@dataclass(frozen=True)
class Binding:
    interface: Any
    implementation: Any
    provider: Provider

    @property
    def lifetime(self) -> Lifetime:
        return self.provider.lifetime


class Registry:
    """Ordered bindings plus an interface-keyed index over them.

    Only reachable bindings are stored: with `KEEP_FIRST` a duplicate is
    dropped (and logged), never kept as dead weight.
    """

    def __init__(self, *, duplicates: Duplicates = Duplicates.KEEP_FIRST) -> None:
        if not isinstance(duplicates, Duplicates):
            msg = f"Unknown duplicate policy: {duplicates!r}"
            raise RegistrationError(msg)
        self.duplicates = duplicates
        self._bindings: list[Binding] = []
        self._index: dict[Any, Binding] = {}

    def accepts(self, interface: Any) -> bool:
        """Tell whether binding `interface` now would take effect.

        Raises under `REJECT` when `interface` is already bound.
        """
        if interface not in self._index:
            return True

        if self.duplicates is Duplicates.REPLACE:
            return True

        if self.duplicates is Duplicates.REJECT:
            msg = f"Duplicate registration for {describe(interface)}"
            raise RegistrationError(msg)

        logger.warning("Ignoring duplicate registration for %s; the first one wins", describe(interface))
        return False

    def add(self, binding: Binding) -> bool:
        if not self.accepts(binding.interface):
            return False

        previous = self._index.get(binding.interface)
        if previous is None:
            self._bindings.append(binding)
        else:
            self._bindings[self._bindings.index(previous)] = binding
            logger.debug("Replaced binding for %s", describe(binding.interface))

        self._index[binding.interface] = binding
        return True

    def find(self, interface: Any) -> Binding | None:
        return self._index.get(interface)

    def bindings(self) -> list[Binding]:
        return list(self._bindings)

    def __contains__(self, interface: object) -> bool:
        return interface in self._index

    def __len__(self) -> int:
        return len(self._index)

    def __iter__(self) -> Iterator[Binding]:
        return iter(self._bindings)


_scope_ids = itertools.count(1)


class Scope(Registry):
    """A registry used only as a cache for scoped instances.

    Entries map an implementation key to a singleton binding holding the
    instance built for this scope. Scopes never see each other's entries,
    and dropping a scope releases everything it cached.
    """

    def __init__(self, name: str | None = None) -> None:
        super().__init__(duplicates=Duplicates.KEEP_FIRST)
        self.name = name or f"scope-{next(_scope_ids)}"

    def cache(self, impl: Any, instance: Any) -> None:
        self.add(Binding(impl, type(instance), SingletonProvider(instance)))

    def clear(self) -> None:
        """Drop every cached instance; later resolutions build afresh."""
        self._bindings.clear()
        self._index.clear()
        logger.debug("Cleared %r", self)

    def __repr__(self) -> str:
        return f"Scope({self.name!r}, cached={len(self)})"


class _TemporaryScope:
    """Marker asking `resolve` for a fresh scope that is dropped after the call."""

    _instance: _TemporaryScope | None = None

    def __new__(cls) -> _TemporaryScope:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "TEMPORARY_SCOPE"


TEMPORARY_SCOPE: Final = _TemporaryScope()

# process-wide scope for applications that want one long-lived cache
GLOBAL_SCOPE: Final = Scope("global")
