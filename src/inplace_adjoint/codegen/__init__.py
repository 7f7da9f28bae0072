"""Text synthesis of the generated definitions."""

from inplace_adjoint.codegen.emit import (
    GeneratedArtifactTriple,
    emit_adjoint_rule,
    emit_mutating_function,
    emit_non_mutating_function,
    format_tuple,
    generated_names,
    synthesize,
)

__all__ = [
    "GeneratedArtifactTriple",
    "synthesize",
    "emit_mutating_function",
    "emit_non_mutating_function",
    "emit_adjoint_rule",
    "format_tuple",
    "generated_names",
]
