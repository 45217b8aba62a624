from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from ._errors import CircularDependencyError
from ._identity import describe


if TYPE_CHECKING:
    from collections.abc import Iterator


class ResolutionChain:
    """Keys currently under construction for one top-level resolution call.

    A fresh chain is created by every public entry point and threaded through
    providers, so nested calls from unrelated call trees never share state.
    """

    def __init__(self) -> None:
        self._stack: list[Any] = []
        self._active: set[Any] = set()

    @contextmanager
    def building(self, key: Any) -> Iterator[None]:
        if key in self._active:
            msg = f"Circular dependency detected while constructing {describe(key)}"
            raise CircularDependencyError(key, msg, [*self.labels(), describe(key)])

        self._stack.append(key)
        self._active.add(key)
        try:
            yield
        finally:
            self._stack.pop()
            self._active.discard(key)

    def labels(self) -> list[str]:
        return [describe(key) for key in self._stack]

    def __len__(self) -> int:
        return len(self._stack)
