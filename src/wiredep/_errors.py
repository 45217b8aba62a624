from __future__ import annotations

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from collections.abc import Sequence


class WiredepError(Exception):
    """Base class for every error raised by wiredep."""


class RegistrationError(WiredepError, ValueError):
    """A binding could not be registered."""


class ResolutionError(WiredepError, RuntimeError):
    """A dependency graph could not be resolved.

    `chain` holds the labels of the keys that were under construction when
    the failure happened, outermost first.
    """

    def __init__(self, message: str, chain: Sequence[str] | None = None) -> None:
        if chain:
            message = f"{message} (resolution chain: {' -> '.join(chain)})"
        super().__init__(message)
        self.chain: list[str] = list(chain or ())

    def __str__(self) -> str:
        # KeyError subclasses would otherwise repr() the message
        return str(self.args[0]) if self.args else ""


class DependencyNotFoundError(ResolutionError, KeyError):
    """No reachable binding exists for a required key."""

    def __init__(self, key: object, message: str, chain: Sequence[str] | None = None) -> None:
        super().__init__(message, chain)
        self.key = key


class MissingScopeError(ResolutionError):
    """A scoped binding was reached without a scope to cache it in."""

    def __init__(self, key: object, message: str, chain: Sequence[str] | None = None) -> None:
        super().__init__(message, chain)
        self.key = key


class CircularDependencyError(ResolutionError):
    """A key was requested again while it was still being constructed."""

    def __init__(self, key: object, message: str, chain: Sequence[str] | None = None) -> None:
        super().__init__(message, chain)
        self.key = key


class IntrospectionError(ResolutionError):
    """The dependency list of a constructor or factory could not be inferred."""
