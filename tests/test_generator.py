"""Tests for inplace_adjoint.generator module."""

from __future__ import annotations

import io

import numpy as np
import pytest

from inplace_adjoint.config import Settings
from inplace_adjoint.errors import NoMutationError
from inplace_adjoint.extraction import Scope, ScopeKind
from inplace_adjoint.generator import AdjointGenerator


@pytest.fixture
def generator():
    return AdjointGenerator(settings=Settings(_env_file=None))


class TestExtract:
    """Tests for AdjointGenerator.extract."""

    def test_driving_loop(self, generator):
        n = 3
        a = np.zeros((n, n))
        b = np.eye(n) * 2.0
        c = np.ones(n)
        for i in range(n):
            val = float(np.sum(np.linalg.solve(b, c)))
            scope = Scope.capture(locals())

            def f1():
                a[i, i] = val
                c[i] = np.sin(val)

            generator.extract(f1, scope)

        assert len(generator.registry) == 1
        (triple,) = generator.artifacts()
        invars = triple.classification.invars
        assert set(invars) == {"a", "c", "i", "val"}
        assert triple.classification.mutated == ("a", "c")
        assert triple.mutating_function.startswith(f"def f1_({', '.join(invars)}):\n")

    def test_integer_constants_from_scope(self):
        a = np.zeros(4)
        i = 2
        val = 1.5
        scope = Scope.capture(locals())
        generator = AdjointGenerator(
            constants=scope.names_of_kind(ScopeKind.INTEGER), settings=Settings(_env_file=None)
        )

        def f2():
            a[i] = val

        generator.extract(f2, scope)
        (triple,) = generator.artifacts()
        assert triple.classification.constant == ("i",)
        slots = ["0.0" if name == "i" else f"dz_{name}" for name in triple.classification.invars]
        assert f"return ({', '.join(slots)})" in triple.adjoint_rule


class TestArtifacts:
    """Tests for AdjointGenerator.artifacts."""

    def test_synthesized_once(self, generator):
        generator.add_source("a[i] = val\n", ["a", "val", "i"], function_name="f1")
        first = generator.artifacts()
        assert generator.artifacts()[0] is first[0]

    def test_registration_order(self, generator):
        generator.add_source("a[i] = val\n", ["a", "val", "i"], function_name="f1")
        generator.add_source("c[i] = val\n", ["a", "c", "val", "i"], function_name="f2")
        generator.add_source("a[i] = val\n", ["i", "val", "a"], function_name="f3")
        assert [triple.function_name for triple in generator.artifacts()] == ["f1", "f2"]

    def test_errors_surface_on_synthesis(self, generator):
        is_new, artifact_id = generator.add_source("tmp = a[0]\n", ["a"], function_name="f1")
        assert is_new
        with pytest.raises(NoMutationError):
            generator.artifact(artifact_id)


class TestReport:
    """Tests for AdjointGenerator.report."""

    def test_prints_all_definitions(self, generator):
        generator.add_source("a[i,i] = val\nc[i] = sin(val)\n", ["a", "b", "c", "val", "i"], "f1")
        out = io.StringIO()
        generator.report(out)
        text = out.getvalue()
        assert "Found mutating variables a,c in function f1!" in text
        assert "def f1_(a, c, val, i):" in text
        assert "def f1(a, c, val, i):" in text
        assert "@adjoint" in text
        assert text.index("Mutating function") < text.index("Non-mutating") < text.index("Adjoint rule")

    def test_defaults_to_stdout(self, generator, capsys):
        generator.add_source("a[0] = b\n", ["a", "b"], "f4")
        generator.report()
        assert "def f4_(a, b):" in capsys.readouterr().out
