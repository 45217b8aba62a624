from __future__ import annotations

import inspect
import logging
import typing
from typing import (
    TYPE_CHECKING,
    Any,
    Protocol,
    TypeVar,
    get_origin,
    get_type_hints,
    overload,
)

from ._chain import ResolutionChain
from ._errors import DependencyNotFoundError, RegistrationError
from ._identity import describe, type_identity
from ._introspect import Introspector
from ._providers import ScopedProvider, SingletonProvider, TransientProvider
from ._registry import TEMPORARY_SCOPE, Binding, Duplicates, Registry, Scope, _TemporaryScope


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from ._introspect import ConstructionPlan
    from ._providers import _ConstructingProvider

    T = TypeVar("T")

    ScopeArg = Scope | _TemporaryScope | None


class _Missing:
    def __repr__(self) -> str:
        return "<missing>"


_MISSING: Any = _Missing()


class Container:
    """Binds interfaces to implementations and builds wired object graphs.

    - singleton: one instance, given or built eagerly at bind time
    - transient: a new instance on every request
    - scoped: one instance per `Scope`, built lazily
    - dependencies inferred from constructor type hints, or declared
      explicitly per binding.
    """

    def __init__(self, *, duplicates: Duplicates = Duplicates.KEEP_FIRST) -> None:
        self._registry = Registry(duplicates=duplicates)
        self.introspector = Introspector()

    # Registration

    def bind_singleton(
        self,
        interface: Any,
        impl: Any = None,
        *,
        instance: Any = _MISSING,
        factory: Callable[..., Any] | None = None,
        dependencies: Iterable[Any] | None = None,
    ) -> None:
        """Bind `interface` to a single shared instance.

        With `instance`, that object is registered as is. Without it, `impl`
        (or `interface` itself) is built right away from the bindings made so
        far, so registration order matters here. No scope exists at that
        point: a transitive scoped dependency raises `MissingScopeError`.

        Example:
          container.bind_singleton(Config, instance=Config.from_env())
          container.bind_singleton(Database, PostgresDatabase)

        """
        if instance is not _MISSING:
            if factory is not None or dependencies is not None:
                msg = "Provide either `instance` or `factory`/`dependencies`, not both."
                raise RegistrationError(msg)

            key = type_identity(interface)
            if impl is not None:
                self._validate_instance(type_identity(impl), instance)
            self._validate_instance(key, instance)
            self._add(Binding(key, impl if impl is not None else type(instance), SingletonProvider(instance)))
            return

        key, impl, plan = self._prepare(interface, impl, factory, dependencies)
        if not self._registry.accepts(key):
            return

        if plan is None:
            plan = self.introspector.plan(impl)

        value = self.build(plan, None, ResolutionChain())
        self._add(Binding(key, impl, SingletonProvider(value)))

    def bind_instance(self, instance: object, interface: Any = None) -> None:
        """Bind an existing object under `interface`, or under its own type."""
        self.bind_singleton(type(instance) if interface is None else interface, instance=instance)

    def bind_transient(
        self,
        interface: Any,
        impl: Any = None,
        *,
        factory: Callable[..., Any] | None = None,
        dependencies: Iterable[Any] | None = None,
    ) -> None:
        """Bind `interface` so that every request builds a new `impl`."""
        self._bind_constructing(TransientProvider, interface, impl, factory, dependencies)

    def bind_scoped(
        self,
        interface: Any,
        impl: Any = None,
        *,
        factory: Callable[..., Any] | None = None,
        dependencies: Iterable[Any] | None = None,
    ) -> None:
        """Bind `interface` so that each scope builds `impl` at most once."""
        self._bind_constructing(ScopedProvider, interface, impl, factory, dependencies)

    def _bind_constructing(
        self,
        provider_cls: type[_ConstructingProvider],
        interface: Any,
        impl: Any,
        factory: Callable[..., Any] | None,
        dependencies: Iterable[Any] | None,
    ) -> None:
        key, impl, plan = self._prepare(interface, impl, factory, dependencies)
        self._add(Binding(key, impl, provider_cls(impl, plan)))

    def _prepare(
        self,
        interface: Any,
        impl: Any,
        factory: Callable[..., Any] | None,
        dependencies: Iterable[Any] | None,
    ) -> tuple[Any, Any, ConstructionPlan | None]:
        key = type_identity(interface)
        impl = key if impl is None else type_identity(impl)

        if factory is not None and not callable(factory):
            msg = f"factory must be callable, got {type(factory).__name__}"
            raise RegistrationError(msg)

        if _is_plain_class(key) and _is_plain_class(impl):
            _validate_impl(key, impl)

        if factory is None and _is_plain_class(impl) and (inspect.isabstract(impl) or _is_protocol(impl)):
            msg = f"Cannot register abstract type {describe(impl)} without a factory"
            raise RegistrationError(msg)

        if factory is None and dependencies is None:
            return key, impl, None
        return key, impl, self.introspector.plan(factory or impl, target=impl, dependencies=dependencies)

    def _add(self, binding: Binding) -> None:
        if self._registry.add(binding):
            logger.debug(
                "Bound %s -> %s as %s",
                describe(binding.interface),
                describe(binding.implementation),
                binding.lifetime.value,
            )

    def _validate_instance(self, key: Any, instance: object) -> None:
        if not _is_plain_class(key):
            return

        if _is_protocol(key):
            if _is_runtime_checkable_protocol(key):
                if not isinstance(instance, key):
                    msg = f"Instance {type(instance).__name__} does not implement runtime protocol {key.__name__}"
                    raise TypeError(msg)
            else:
                _validate_protocol_impl(key, type(instance))
            return

        if not isinstance(instance, key):
            msg = f"Instance {type(instance).__name__} is not an instance of {key.__name__}"
            raise TypeError(msg)

    # Resolution

    @overload
    def resolve(self, target: type[T], scope: ScopeArg = ...) -> T: ...

    @overload
    def resolve(self, target: Any, scope: ScopeArg = ...) -> Any: ...

    def resolve(self, target: Any, scope: ScopeArg = None) -> Any:
        """Resolve `target` to an instance.

        - If `target` is bound: its provider produces the value.
        - Otherwise `target` is constructed, each constructor dependency
          coming from the bindings.
        `scope` is threaded through every nested step. Pass `TEMPORARY_SCOPE`
        for a one-off scope that is dropped afterwards.
        """
        key = type_identity(target)
        scope = _open_scope(scope)
        chain = ResolutionChain()

        binding = self._registry.find(key)
        if binding is not None:
            return binding.provider.provide(self, scope, chain)

        if _is_plain_class(key) and (inspect.isabstract(key) or _is_protocol(key)):
            msg = f"No binding for abstract type {describe(key)}"
            raise DependencyNotFoundError(key, msg, [describe(key)])

        return self.build(self.introspector.plan(key), scope, chain)

    @overload
    def get(self, target: type[T], scope: ScopeArg = ...) -> T: ...

    @overload
    def get(self, target: Any, scope: ScopeArg = ...) -> Any: ...

    def get(self, target: Any, scope: ScopeArg = None) -> Any:
        """Return the value bound to `target`, never constructing an unbound type."""
        key = type_identity(target)
        binding = self._registry.find(key)
        if binding is None:
            msg = f"Dependency {describe(key)} is not bound"
            raise DependencyNotFoundError(key, msg, [describe(key)])

        return binding.provider.provide(self, _open_scope(scope), ResolutionChain())

    def build(self, plan: ConstructionPlan, scope: Scope | None, chain: ResolutionChain) -> Any:
        """Construct `plan.target` from the bindings of its dependencies.

        Every dependency is looked up before any of them is produced, so a
        missing binding fails before anything is constructed.
        """
        with chain.building(plan.target):
            found: list[Binding | None] = []
            for dep in plan.dependencies:
                binding = self._registry.find(dep.key) if dep.injectable else None
                if binding is None and dep.required:
                    msg = (
                        f"No binding for {describe(dep.key)}, "
                        f"required by parameter '{dep.name}' of {describe(plan.target)}"
                    )
                    raise DependencyNotFoundError(dep.key, msg, [*chain.labels(), describe(dep.key)])
                found.append(binding)

            values = [
                inspect.Parameter.empty if binding is None else binding.provider.provide(self, scope, chain)
                for binding in found
            ]
            return plan.call(values)

    # Scopes and introspection

    def make_scope(self, name: str | None = None) -> Scope:
        """Create an empty scope owned by the caller, reusable across resolutions."""
        return Scope(name)

    def size(self) -> int:
        """Number of reachable bindings."""
        return len(self._registry)

    def bindings(self) -> list[Binding]:
        return self._registry.bindings()

    def __len__(self) -> int:
        return len(self._registry)

    def __contains__(self, interface: object) -> bool:
        try:
            return type_identity(interface) in self._registry
        except TypeError:
            return False


def _open_scope(scope: ScopeArg) -> Scope | None:
    if scope is TEMPORARY_SCOPE:
        return Scope("temporary")
    if scope is not None and not isinstance(scope, Scope):
        msg = f"Expected a Scope, TEMPORARY_SCOPE or None, got {type(scope).__name__}"
        raise TypeError(msg)
    return scope


def _validate_impl(cls: type, impl: type) -> None:
    """Validate that 'impl' implements 'cls'.

    - For normal classes/ABCs: require issubclass(impl, cls).
    - For Protocols: nominal via MRO, otherwise structural conformance.
    """
    if not _is_protocol(cls):
        if not issubclass(impl, cls):
            msg = f"Implementation {impl.__name__} must be a subclass of {cls.__name__}"
            raise TypeError(msg)
        return

    _validate_protocol_impl(cls, impl)


def _validate_protocol_impl(proto_cls: type, impl: type) -> None:
    if proto_cls in getattr(impl, "__mro__", ()):
        return

    try:
        proto_hints = get_type_hints(proto_cls)
    except (NameError, TypeError):
        proto_hints = {}

    missing = [name for name in proto_hints if not name.startswith("_") and not hasattr(impl, name)]
    mismatches: list[str] = []

    for name, proto_attr in proto_cls.__dict__.items():
        if name.startswith("_") or not inspect.isfunction(proto_attr):
            continue

        impl_attr = getattr(impl, name, None)
        if impl_attr is None:
            missing.append(name)
            continue
        if not callable(impl_attr):
            mismatches.append(f"{name}: not callable on {impl.__name__}")
            continue

        try:
            proto_arity = _positional_arity(inspect.signature(proto_attr))
            impl_arity = _positional_arity(inspect.signature(impl_attr))
        except (TypeError, ValueError):
            continue
        if impl_arity < proto_arity:
            mismatches.append(
                f"{name}: impl has fewer required positional params ({impl_arity}) than protocol ({proto_arity})"
            )

    if missing or mismatches:
        msgs = []
        if missing:
            msgs.append(f"missing members: {', '.join(missing)}")
        if mismatches:
            msgs.append(f"signature mismatches: {', '.join(mismatches)}")
        msg = f"Implementation {impl.__name__} does not structurally conform to protocol {proto_cls.__name__}: {'; '.join(msgs)}"
        raise TypeError(msg)


def _positional_arity(sig: inspect.Signature) -> int:
    return sum(
        1
        for p in sig.parameters.values()
        if p.name != "self"
        and p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
        and p.default is inspect.Parameter.empty
    )


def _is_plain_class(tp: Any) -> bool:
    # list[int] passes inspect.isclass on 3.10 but rejects isinstance/issubclass
    return inspect.isclass(tp) and get_origin(tp) is None


def _is_runtime_checkable_protocol(tp: type) -> bool:
    try:
        isinstance(None, tp)
    except TypeError:
        return False
    else:
        return True


if hasattr(typing, "is_protocol"):
    # https://docs.python.org/3/library/typing.html#typing.is_protocol
    def _is_protocol(tp: Any) -> bool:
        return _is_plain_class(tp) and typing.is_protocol(tp)

else:

    def _is_protocol(tp: Any) -> bool:
        """Detect whether 'tp' is a typing.Protocol subclass (safe)."""
        return _is_plain_class(tp) and bool(getattr(tp, "_is_protocol", False)) and tp is not Protocol
