import gc
import unittest
import weakref

import pytest

from wiredep import GLOBAL_SCOPE, TEMPORARY_SCOPE, Container, MissingScopeError, Scope


class Service: ...


class Wrapper:
    def __init__(self, service: Service):
        self.service = service


class NeedsTwo:
    def __init__(self, first: Service, second: Service):
        self.first = first
        self.second = second


class TestContainerScopeBehavior(unittest.TestCase):
    cont: Container
    scope: Scope

    def setUp(self):
        self.cont = Container()
        self.cont.bind_scoped(Service)
        self.scope = self.cont.make_scope()

    def test_make_scope_returns_new_empty_scope(self):
        other = self.cont.make_scope()

        assert isinstance(self.scope, Scope)
        assert other is not self.scope
        assert len(self.scope) == 0

    def test_scoped_instance_is_cached_in_scope_under_implementation(self):
        svc = self.cont.resolve(Service, self.scope)

        assert Service in self.scope
        assert len(self.scope) == 1
        assert self.scope.find(Service).provider.instance is svc

    def test_scopes_are_independent(self):
        other = self.cont.make_scope()

        svc = self.cont.resolve(Service, self.scope)
        other_svc = self.cont.resolve(Service, other)

        assert svc is not other_svc
        assert self.cont.resolve(Service, self.scope) is svc
        assert self.cont.resolve(Service, other) is other_svc

    def test_scope_is_threaded_through_transient_dependents(self):
        self.cont.bind_transient(Wrapper)

        w1 = self.cont.resolve(Wrapper, self.scope)
        w2 = self.cont.resolve(Wrapper, self.scope)

        assert w1 is not w2
        assert w1.service is w2.service

    def test_one_resolution_shares_scoped_instance_between_parameters(self):
        obj = self.cont.resolve(NeedsTwo, self.scope)
        assert obj.first is obj.second

    def test_interfaces_bound_to_same_implementation_share_scoped_instance(self):
        class Port: ...

        class Adapter(Port): ...

        class OtherPort: ...

        class DualAdapter(Adapter, OtherPort): ...

        cont = Container()
        cont.bind_scoped(Port, DualAdapter)
        cont.bind_scoped(OtherPort, DualAdapter)
        scope = cont.make_scope()

        assert cont.resolve(Port, scope) is cont.resolve(OtherPort, scope)

    def test_resolve_without_scope_raises_missing_scope(self):
        with pytest.raises(MissingScopeError) as ctx:
            self.cont.resolve(Service)
        assert ctx.value.key is Service

    def test_transitive_scoped_dependency_without_scope_raises(self):
        with pytest.raises(MissingScopeError):
            self.cont.resolve(Wrapper)

        assert isinstance(self.cont.resolve(Wrapper, self.scope), Wrapper)

    def test_eager_singleton_with_scoped_dependency_raises(self):
        with pytest.raises(MissingScopeError):
            self.cont.bind_singleton(Wrapper)

        assert Wrapper not in self.cont

    def test_temporary_scope_is_fresh_for_every_call(self):
        w1 = self.cont.resolve(Wrapper, TEMPORARY_SCOPE)
        w2 = self.cont.resolve(Wrapper, TEMPORARY_SCOPE)

        assert w1.service is not w2.service

    def test_temporary_scope_caches_within_one_call(self):
        obj = self.cont.resolve(NeedsTwo, TEMPORARY_SCOPE)
        assert obj.first is obj.second

    def test_get_accepts_temporary_scope(self):
        assert isinstance(self.cont.get(Service, TEMPORARY_SCOPE), Service)

    def test_global_scope_caches_across_containers(self):
        class GlobalOnly: ...

        self.addCleanup(GLOBAL_SCOPE.clear)
        c1 = Container()
        c2 = Container()
        c1.bind_scoped(GlobalOnly)
        c2.bind_scoped(GlobalOnly)

        assert c1.resolve(GlobalOnly, GLOBAL_SCOPE) is c2.resolve(GlobalOnly, GLOBAL_SCOPE)
        assert GlobalOnly in GLOBAL_SCOPE

    def test_clear_drops_cached_instances(self):
        first = self.cont.resolve(Service, self.scope)

        self.scope.clear()

        assert len(self.scope) == 0
        assert Service not in self.scope
        assert self.cont.resolve(Service, self.scope) is not first

    def test_resolve_rejects_non_scope_argument(self):
        with pytest.raises(TypeError):
            self.cont.resolve(Service, {})  # type: ignore[arg-type]

    def test_dropping_scope_releases_scoped_instance(self):
        scope = self.cont.make_scope()
        ref = weakref.ref(self.cont.resolve(Service, scope))
        self.assertIsNotNone(ref())

        del scope
        gc.collect()
        assert ref() is None

    def test_named_scope_repr(self):
        scope = self.cont.make_scope("request-42")
        assert scope.name == "request-42"
        assert "request-42" in repr(scope)

    def test_scope_created_directly_works_with_container(self):
        scope = Scope()
        assert self.cont.resolve(Service, scope) is self.cont.resolve(Service, scope)
        assert scope.name != Scope().name
