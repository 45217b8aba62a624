import unittest
from typing import Optional

import pytest

from wiredep import Container, DependencyNotFoundError, Lifetime


class TestLifetimeControl(unittest.TestCase):
    cont: Container

    def setUp(self):
        self.cont = Container()

    def test_resolve_bind_singleton_returns_same_instance(self):
        class A: ...

        self.cont.bind_singleton(A)
        a1 = self.cont.resolve(A)
        a2 = self.cont.resolve(A)
        assert a2 is a1, "SINGLETON should return the cached instance"

    def test_singleton_is_shared_across_scopes(self):
        class A: ...

        self.cont.bind_singleton(A)
        a1 = self.cont.resolve(A, self.cont.make_scope())
        a2 = self.cont.resolve(A, self.cont.make_scope())
        assert a1 is a2

    def test_resolve_bind_transient_returns_new_instances(self):
        class A: ...

        self.cont.bind_transient(A)
        a1 = self.cont.resolve(A)
        a2 = self.cont.resolve(A)
        assert a2 is not a1, "TRANSIENT should return new instances"

    def test_transient_dependency_is_rebuilt_for_each_dependent(self):
        class Dep: ...

        class User:
            def __init__(self, dep: Dep):
                self.dep = dep

        self.cont.bind_transient(Dep)
        assert self.cont.resolve(User).dep is not self.cont.resolve(User).dep

    def test_scoped_is_cached_per_scope(self):
        class A: ...

        self.cont.bind_scoped(A)
        scope = self.cont.make_scope()
        other = self.cont.make_scope()

        assert self.cont.resolve(A, scope) is self.cont.resolve(A, scope)
        assert self.cont.resolve(A, scope) is not self.cont.resolve(A, other)

    def test_bind_instance_is_always_singleton(self):
        class A: ...

        a = A()
        self.cont.bind_instance(a)
        assert self.cont.resolve(A) is a
        assert self.cont.bindings()[0].lifetime is Lifetime.SINGLETON

    def test_bind_singleton_without_instance_builds_eagerly(self):
        created = []

        class A:
            def __init__(self):
                created.append(self)

        self.cont.bind_singleton(A)
        assert len(created) == 1

        assert self.cont.resolve(A) is created[0]
        assert len(created) == 1

    def test_eager_singleton_sees_only_earlier_bindings(self):
        class Config: ...

        class Service:
            def __init__(self, config: Config):
                self.config = config

        with pytest.raises(DependencyNotFoundError):
            self.cont.bind_singleton(Service)

        self.cont.bind_singleton(Config)
        self.cont.bind_singleton(Service)
        assert self.cont.resolve(Service).config is self.cont.resolve(Config)

    def test_singleton_may_be_none(self):
        class Maybe: ...

        self.cont.bind_singleton(Optional[Maybe], instance=None)
        assert self.cont.get(Optional[Maybe]) is None

    def test_bindings_report_lifetimes_in_registration_order(self):
        class A: ...

        class B: ...

        class C: ...

        self.cont.bind_singleton(A)
        self.cont.bind_transient(B)
        self.cont.bind_scoped(C)

        assert [b.lifetime for b in self.cont.bindings()] == [
            Lifetime.SINGLETON,
            Lifetime.TRANSIENT,
            Lifetime.SCOPED,
        ]
        assert [b.interface for b in self.cont.bindings()] == [A, B, C]
