import unittest

import pytest

from scopebind import Container, Lifecycle


class TestContainerScopeBehavior(unittest.TestCase):
    parent: Container

    def setUp(self):
        self.parent = Container()

    def test_scope_shares_singleton_resolved_after_creation(self):
        class Service: ...

        self.parent.register(Service, lambda _: Service(), Lifecycle.SINGLETON)
        scope = self.parent.create_scope()

        from_scope = scope.resolve(Service)

        assert from_scope is self.parent.resolve(Service)

    def test_scope_shares_singleton_resolved_before_creation(self):
        class Service: ...

        self.parent.register(Service, lambda _: Service(), Lifecycle.SINGLETON)
        from_parent = self.parent.resolve(Service)
        scope = self.parent.create_scope()

        assert scope.resolve(Service) is from_parent

    def test_sibling_scopes_share_parent_singleton(self):
        calls = []
        self.parent.register_singleton("db", lambda _: calls.append(1) or object())

        a = self.parent.create_scope()
        b = self.parent.create_scope()

        assert a.resolve("db") is b.resolve("db")
        assert len(calls) == 1

    def test_sibling_scopes_get_distinct_scoped_instances(self):
        counter = {"n": 0}

        def make_request(_):
            counter["n"] += 1
            return {"count": counter["n"]}

        self.parent.register("req", make_request, Lifecycle.SCOPED)
        a = self.parent.create_scope()
        b = self.parent.create_scope()

        a1 = a.resolve("req")
        a2 = a.resolve("req")
        b1 = b.resolve("req")

        assert a1 is a2
        assert b1 is not a1
        assert counter["n"] == 2

    def test_scope_does_not_reuse_parent_scoped_instance(self):
        self.parent.register_scoped("req", lambda _: object())
        in_parent = self.parent.resolve("req")

        scope = self.parent.create_scope()

        assert scope.resolve("req") is not in_parent

    def test_scope_transient_runs_factory_every_time(self):
        self.parent.register_transient("t", lambda _: object())
        scope = self.parent.create_scope()

        assert scope.resolve("t") is not scope.resolve("t")

    def test_scoped_factory_receives_scope_container(self):
        received = []

        def make(c):
            received.append(c)
            return object()

        self.parent.register_scoped("req", make)
        scope = self.parent.create_scope()
        scope.resolve("req")

        assert received == [scope]

    def test_scope_registration_does_not_leak_into_parent(self):
        scope = self.parent.create_scope()
        scope.register("only-in-scope", lambda _: 1)

        assert scope.has("only-in-scope")
        assert not self.parent.has("only-in-scope")

    def test_parent_registration_after_scope_creation_is_not_visible(self):
        scope = self.parent.create_scope()
        self.parent.register("late", lambda _: 1)

        assert not scope.has("late")

    def test_clear_scope_on_scope_leaves_parent_untouched(self):
        self.parent.register_scoped("req", lambda _: object())
        in_parent = self.parent.resolve("req")
        scope = self.parent.create_scope()
        in_scope = scope.resolve("req")

        scope.clear_scope()

        assert self.parent.resolve("req") is in_parent
        assert scope.resolve("req") is not in_scope

    def test_nested_scope_shares_root_singleton(self):
        self.parent.register_singleton("db", lambda _: object())
        child = self.parent.create_scope()
        grandchild = child.create_scope()

        assert grandchild.resolve("db") is self.parent.resolve("db")

    def test_register_instance_is_shared_with_scopes(self):
        cfg = object()
        self.parent.register_instance("cfg", cfg)

        assert self.parent.create_scope().resolve("cfg") is cfg


def test_scope_as_context_manager_clears_scoped_instances_on_exit():
    c = Container()
    c.register_scoped("req", lambda _: object())

    with c.create_scope() as scope:
        inside = scope.resolve("req")
        assert scope.resolve("req") is inside

    assert scope._scoped_instances == {}  # noqa: SLF001
    assert scope.resolve("req") is not inside


def test_scope_context_manager_propagates_errors_and_still_clears():
    c = Container()
    c.register_scoped("req", lambda _: object())

    with pytest.raises(ValueError, match="boom"), c.create_scope() as scope:
        scope.resolve("req")
        msg = "boom"
        raise ValueError(msg)

    assert scope._scoped_instances == {}  # noqa: SLF001
