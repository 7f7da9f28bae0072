"""End-to-end driver.

Wraps extraction, deduplication and synthesis behind one object owned by
the caller, typically alive for the duration of a driving loop:

    generator = AdjointGenerator(constants=["i"])
    for i in range(n):
        val = float(np.sum(np.linalg.solve(b, c)))
        scope = Scope.capture(locals(), globals())

        def f1():
            a[i, i] = val
            c[i] = np.sin(val)

        generator.extract(f1, scope)

    generator.report()

"""

from __future__ import annotations

import sys
from collections.abc import Callable, Iterable
from typing import Any, TextIO

from inplace_adjoint.codegen.emit import GeneratedArtifactTriple, synthesize
from inplace_adjoint.config import Settings
from inplace_adjoint.config import settings as default_settings
from inplace_adjoint.extraction.blocks import block_from_source, extract_block
from inplace_adjoint.extraction.scope import Scope
from inplace_adjoint.registry.registry import DeduplicatingRegistry


class AdjointGenerator:
    """Collects mutating blocks and generates their definitions once per shape.

    Args:
        constants: Names treated as constants in every block.
        settings: Naming and dialect; defaults to the environment settings.

    """

    def __init__(self, constants: Iterable[str] = (), settings: Settings | None = None) -> None:
        self.constants = tuple(constants)
        self.settings = settings or default_settings
        self.registry = DeduplicatingRegistry()
        self._artifacts: dict[int, GeneratedArtifactTriple] = {}

    def extract(
        self,
        unit: Callable[[], Any],
        scope: Scope,
        *,
        fallback_source: str | None = None,
    ) -> tuple[bool, int]:
        """Run ``unit``, capture it and register its shape."""
        block = extract_block(unit, scope, fallback_source=fallback_source)
        return self.registry.register(block)

    def add_source(
        self,
        source_text: str,
        scope: Scope | Iterable[str],
        function_name: str | None = None,
    ) -> tuple[bool, int]:
        """Register a block given as text."""
        block = block_from_source(source_text, scope, function_name=function_name)
        return self.registry.register(block)

    def artifact(self, artifact_id: int) -> GeneratedArtifactTriple:
        """Definitions for one shape, synthesized on first request."""
        if artifact_id not in self._artifacts:
            block = self.registry.get(artifact_id)
            self._artifacts[artifact_id] = synthesize(block, self.constants, settings=self.settings)
        return self._artifacts[artifact_id]

    def artifacts(self) -> list[GeneratedArtifactTriple]:
        return [self.artifact(artifact_id) for artifact_id in range(len(self.registry))]

    def report(self, stream: TextIO | None = None) -> None:
        """Print every shape's definitions for copying into the program."""
        stream = stream or sys.stdout
        for triple in self.artifacts():
            name = triple.function_name
            mutated = ",".join(triple.classification.mutated)
            stream.write(f"Found mutating variables {mutated} in function {name}!\n")
            stream.write(f"\nMutating function to replace {name} is:\n\n{triple.mutating_function}")
            stream.write(f"\nNon-mutating version of {name} is:\n\n{triple.non_mutating_function}")
            stream.write(f"\nAdjoint rule is:\n\n{triple.adjoint_rule}\n")
