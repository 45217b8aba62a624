from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, get_type_hints

from ._errors import IntrospectionError
from ._identity import describe, type_identity


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence


_POSITIONAL_ONLY = inspect.Parameter.POSITIONAL_ONLY
_VARIADIC = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)


@dataclass(frozen=True)
class Dependency:
    """One constructor parameter that the resolver has to supply."""

    name: str
    key: Any
    kind: inspect._ParameterKind = _POSITIONAL_ONLY
    default: Any = inspect.Parameter.empty

    @property
    def required(self) -> bool:
        return self.default is inspect.Parameter.empty

    @property
    def injectable(self) -> bool:
        """False for a positional-only slot that only ever takes its default."""
        return self.key is not inspect.Parameter.empty


@dataclass(frozen=True)
class ConstructionPlan:
    """How to build `target`: call `factory` with `dependencies` resolved, in order."""

    target: Any
    factory: Callable[..., Any]
    dependencies: tuple[Dependency, ...] = ()

    def keys(self) -> list[Any]:
        return [dep.key for dep in self.dependencies if dep.injectable]

    def call(self, values: Sequence[Any]) -> Any:
        """Invoke the factory with one value per dependency.

        Unbound optional dependencies are passed as `inspect.Parameter.empty`
        and dropped, so the callee's own default applies. Positional-only
        parameters keep their slot by receiving the default explicitly.
        """
        args: list[Any] = []
        kwargs: dict[str, Any] = {}

        for dep, value in zip(self.dependencies, values, strict=True):
            if dep.kind is _POSITIONAL_ONLY:
                args.append(dep.default if value is inspect.Parameter.empty else value)
            elif value is not inspect.Parameter.empty:
                kwargs[dep.name] = value

        return self.factory(*args, **kwargs)


class Introspector:
    """Infers the ordered dependency list of a constructor or factory.

    Parameters are read from `inspect.signature` and typed from
    `typing.get_type_hints`. Variadic parameters are never injected, and a
    parameter with a default but no annotation is left to its default.
    Results are cached per (factory, target).
    """

    def __init__(self) -> None:
        self._plans: dict[tuple[Any, Any], ConstructionPlan] = {}

    def plan(
        self,
        factory: Callable[..., Any],
        *,
        target: Any = None,
        dependencies: Iterable[Any] | None = None,
    ) -> ConstructionPlan:
        if target is None:
            target = factory

        if dependencies is not None:
            return self.explicit(factory, dependencies, target=target)

        cache_key = (factory, target)
        plan = self._plans.get(cache_key)
        if plan is None:
            plan = ConstructionPlan(target, factory, tuple(self._infer(factory)))
            self._plans[cache_key] = plan
            logger.debug(
                "Introspected %s: (%s)",
                describe(target),
                ", ".join(describe(key) for key in plan.keys()),
            )
        return plan

    def explicit(self, factory: Callable[..., Any], dependencies: Iterable[Any], *, target: Any = None) -> ConstructionPlan:
        if not callable(factory):
            msg = f"Factory for {describe(target)} must be callable, got {type(factory).__name__}"
            raise TypeError(msg)

        deps = tuple(Dependency(name=f"arg{i}", key=type_identity(dep)) for i, dep in enumerate(dependencies))
        return ConstructionPlan(factory if target is None else target, factory, deps)

    def _infer(self, factory: Callable[..., Any]) -> list[Dependency]:
        if not callable(factory):
            msg = f"Cannot introspect non-callable {factory!r}"
            raise IntrospectionError(msg)

        try:
            sig = inspect.signature(factory)
        except (TypeError, ValueError):
            # builtins such as int() or str() expose no signature; call them bare
            logger.debug("No signature available for %s; assuming no dependencies", describe(factory))
            return []

        hints, hint_error = _get_type_hints(factory)
        deps: list[Dependency] = []

        for name, p in sig.parameters.items():
            if p.kind in _VARIADIC:
                continue

            ann = hints.get(name, inspect.Parameter.empty)
            if ann is inspect.Parameter.empty and not isinstance(p.annotation, str):
                ann = p.annotation

            if ann is inspect.Parameter.empty:
                if p.default is not inspect.Parameter.empty:
                    if p.kind is _POSITIONAL_ONLY:
                        # holds its slot so later positional-only values stay aligned
                        deps.append(Dependency(name=name, key=inspect.Parameter.empty, kind=p.kind, default=p.default))
                    continue
                msg = (
                    f"Cannot infer dependency for parameter '{name}' of {describe(factory)}: "
                    "add a type annotation or pass explicit dependencies"
                )
                if hint_error is not None:
                    msg = f"{msg} (annotation error: {hint_error})"
                raise IntrospectionError(msg) from hint_error

            try:
                key = type_identity(ann)
            except TypeError as e:
                msg = f"Unsupported annotation {ann!r} on parameter '{name}' of {describe(factory)}"
                raise IntrospectionError(msg) from e

            deps.append(Dependency(name=name, key=key, kind=p.kind, default=p.default))

        return deps


def _get_type_hints(factory: Callable[..., Any]) -> tuple[dict[str, Any], Exception | None]:
    """Resolve parameter annotations for a class constructor or a plain callable.

    For classes, `__init__` hints win and class-level hints fill the gaps
    (dataclass-style fields).
    """
    if not inspect.isclass(factory):
        return _safe_hints(factory, describe(factory))

    try:
        init = inspect.getattr_static(factory, "__init__")
    except AttributeError:
        init = None

    hints, error = _safe_hints(init, describe(factory)) if init is not None else ({}, None)
    class_hints, class_error = _safe_hints(factory, describe(factory))
    for name, ann in class_hints.items():
        hints.setdefault(name, ann)

    return hints, error or class_error


def _safe_hints(obj: Any, label: str) -> tuple[dict[str, Any], Exception | None]:
    try:
        return dict(get_type_hints(obj, include_extras=True)), None
    except TypeError:
        return {}, None
    except NameError as exc:
        logger.warning("'%s' name error retrieving %s type hints", exc.name, label)
        return {}, exc
