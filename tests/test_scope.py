"""Tests for inplace_adjoint.extraction.scope module."""

from __future__ import annotations

import math

import jax.numpy as jnp
import numpy as np
import pytest

from inplace_adjoint.extraction import Scope, ScopeKind, kind_of


class TestKindOf:
    """Tests for kind_of."""

    def test_numpy_array(self):
        assert kind_of(np.zeros((2, 2))) is ScopeKind.ARRAY

    def test_jax_array_is_immutable(self):
        assert kind_of(jnp.zeros(3)) is ScopeKind.IMMUTABLE_ARRAY

    @pytest.mark.parametrize("value", [3, np.int64(3), np.int32(-1)])
    def test_integers(self, value):
        assert kind_of(value) is ScopeKind.INTEGER

    @pytest.mark.parametrize("value", [0.5, np.float64(1.0), 1j])
    def test_scalars(self, value):
        assert kind_of(value) is ScopeKind.SCALAR

    @pytest.mark.parametrize("value", [True, [1.0, 2.0], "text", None])
    def test_other_objects(self, value):
        assert kind_of(value) is ScopeKind.OBJECT


class TestCapture:
    """Tests for Scope.capture."""

    def test_globals_before_locals(self):
        scope = Scope.capture({"val": 1.5, "i": 0}, {"a": np.zeros(2), "b": np.ones(2)})
        assert scope.names == ("a", "b", "val", "i")

    def test_name_in_both_listed_once(self):
        scope = Scope.capture({"a": 1.0, "i": 2}, {"a": np.zeros(2)})
        assert scope.names == ("a", "i")
        assert scope.kind("a") is ScopeKind.ARRAY

    def test_skips_code_and_private_names(self):
        def helper():
            return None

        namespace = {
            "np": np,
            "math": math,
            "helper": helper,
            "sin": np.sin,
            "Scope": Scope,
            "_hidden": 1.0,
            "__name__": "__main__",
            "x": 2.0,
        }
        assert Scope.capture(namespace).names == ("x",)

    def test_skips_own_bookkeeping(self):
        previous = Scope.from_names(["a"])
        assert Scope.capture({"scope": previous, "a": np.zeros(1)}).names == ("a",)

    def test_empty(self):
        scope = Scope.capture()
        assert scope.names == ()
        assert len(scope) == 0

    def test_snapshot_is_read_only(self):
        namespace = {"a": np.zeros(2)}
        scope = Scope.capture(namespace)
        namespace["b"] = 1.0
        assert "b" not in scope
        with pytest.raises(TypeError):
            scope.bindings["b"] = ScopeKind.SCALAR


class TestNamesOfKind:
    """Tests for Scope.names_of_kind."""

    def test_integers_in_order(self):
        scope = Scope.capture({"n": 3, "a": np.zeros(3), "i": 1, "val": 0.5})
        assert scope.names_of_kind(ScopeKind.INTEGER) == ("n", "i")

    def test_several_kinds(self):
        scope = Scope.capture({"n": 3, "a": np.zeros(3), "val": 0.5})
        assert scope.names_of_kind(ScopeKind.ARRAY, ScopeKind.SCALAR) == ("a", "val")


class TestFromNames:
    """Tests for Scope.from_names."""

    def test_default_kind(self):
        scope = Scope.from_names(["a", "b"])
        assert scope.names == ("a", "b")
        assert scope.kind("b") is ScopeKind.OBJECT

    def test_equality_ignores_construction_path(self):
        assert Scope.from_names(["a"], ScopeKind.ARRAY) == Scope.capture({"a": np.zeros(1)})

    def test_hashable(self):
        first = Scope.from_names(["a", "b"], ScopeKind.ARRAY)
        second = Scope.from_names(["b", "a"], ScopeKind.ARRAY)
        assert first == second
        assert hash(first) == hash(second)
        assert len({first, second}) == 1
