"""Text synthesis of in-place, non-mutating and adjoint definitions.

For a block ``f1`` with arguments ``(a, c, val, i)`` mutating ``a`` and
``c`` the default dialect emits:

    def f1_(a, c, val, i):              # in-place form
        a[i, i] = val
        c[i] = np.sin(val)
        return None

    def f1(a, c, val, i):               # value-returning form
        a[i, i] = val
        c[i] = np.sin(val)
        return (a, c)

    @adjoint                            # custom reverse rule
    def f1(a, c, val, i):
        f1_(a, c, val, i)

        def back_f1(cotangents):
            (dz_a, dz_c) = cotangents
            dz_a = np.array(dz_a) if isinstance(dz_a, Fill) else dz_a
            ...
            dz_a = np.zeros_like(a) if dz_a is None else dz_a
            ...
            (dz_val, dz_i) = autodiff(
                f1_,
                Const,
                Duplicated(a, dz_a),
                Duplicated(c, dz_c),
                Active(val),
                Active(i),
            )
            return (dz_a, dz_c, dz_val, dz_i)

        return (a, c), back_f1

The host AD system calls the rule instead of tracing the body, so it never
sees the mutation; the secondary engine differentiates the in-place form.
Mutated cotangents are normalized first (fill placeholders densified, the
no-gradient sentinel replaced by zeros shaped like the primal) because the
secondary engine accepts neither.

Nothing here runs or validates the emitted code.

"""

from __future__ import annotations

import logging
import textwrap
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from inplace_adjoint.analysis.classify import VariableClassification, classify
from inplace_adjoint.config import Settings
from inplace_adjoint.config import settings as default_settings
from inplace_adjoint.errors import NameCollisionError
from inplace_adjoint.extraction.blocks import BlockRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeneratedArtifactTriple:
    """The three definitions generated for one block shape."""

    function_name: str
    mutating_function: str
    non_mutating_function: str
    adjoint_rule: str
    classification: VariableClassification

    def __iter__(self):
        return iter((self.mutating_function, self.non_mutating_function, self.adjoint_rule))


def format_tuple(items: Sequence[str]) -> str:
    """Python tuple display of ``items``.

    Examples:
        >>> format_tuple(["a", "c"])
        '(a, c)'
        >>> format_tuple(["a"])
        '(a,)'

    """
    if len(items) == 1:
        return f"({items[0]},)"
    return "(" + ", ".join(items) + ")"


class _Writer:
    """Accumulates indented lines."""

    def __init__(self, indent: str) -> None:
        self.indent = indent
        self.lines: list[str] = []

    def line(self, text: str = "", depth: int = 0) -> None:
        self.lines.append(self.indent * depth + text if text else "")

    def block(self, text: str, depth: int) -> None:
        self.lines.extend(textwrap.indent(text, self.indent * depth).splitlines())

    def render(self) -> str:
        return "\n".join(self.lines) + "\n"


def _signature(name: str, params: Iterable[str]) -> str:
    return f"{name}({', '.join(params)})"


def generated_names(block: BlockRecord, classes: VariableClassification, cfg: Settings) -> set[str]:
    """Identifiers the adjoint rule introduces next to the block variables."""
    name = block.function_name
    names = {name + cfg.inplace_suffix, cfg.backward_prefix + name, cfg.cotangent_name}
    names.update(cfg.gradient_prefix + var for var in classes.invars)
    return names


def emit_mutating_function(
    block: BlockRecord, classes: VariableClassification, cfg: Settings
) -> str:
    out = _Writer(cfg.indent)
    out.line(f"def {_signature(block.function_name + cfg.inplace_suffix, classes.invars)}:")
    out.block(block.source_text, 1)
    out.line("return None", 1)
    return out.render()


def emit_non_mutating_function(
    block: BlockRecord, classes: VariableClassification, cfg: Settings
) -> str:
    out = _Writer(cfg.indent)
    out.line(f"def {_signature(block.function_name, classes.invars)}:")
    out.block(block.source_text, 1)
    out.line(f"return {format_tuple(classes.mutated)}", 1)
    return out.render()


def emit_adjoint_rule(block: BlockRecord, classes: VariableClassification, cfg: Settings) -> str:
    name = block.function_name
    inplace = name + cfg.inplace_suffix
    backward = cfg.backward_prefix + name
    grad = {var: cfg.gradient_prefix + var for var in classes.invars}

    out = _Writer(cfg.indent)
    out.line(f"@{cfg.register_decorator}")
    out.line(f"def {_signature(name, classes.invars)}:")
    out.line(_signature(inplace, classes.invars), 1)
    out.line()
    out.line(f"def {backward}({cfg.cotangent_name}):", 1)

    body = 2
    out.line(f"{format_tuple([grad[var] for var in classes.mutated])} = {cfg.cotangent_name}", body)
    for var in classes.mutated:
        densified = cfg.densify_template.format(grad=grad[var])
        out.line(f"{grad[var]} = {densified}", body)
    for var in classes.mutated:
        zeroed = cfg.no_gradient_template.format(grad=grad[var], primal=var)
        out.line(f"{grad[var]} = {zeroed}", body)

    call_head = f"{cfg.secondary_entry}("
    if classes.active:
        call_head = f"{format_tuple([grad[var] for var in classes.active])} = {call_head}"
    out.line(call_head, body)
    out.line(f"{inplace},", body + 1)
    if cfg.return_annotation:
        out.line(f"{cfg.return_annotation},", body + 1)
    for var in classes.invars:
        role = classes.role(var)
        if role == "mutated":
            argument = f"{cfg.shadow_annotation}({var}, {grad[var]})"
        elif role == "constant":
            argument = f"{cfg.inactive_annotation}({var})"
        else:
            argument = f"{cfg.active_annotation}({var})"
        out.line(f"{argument},", body + 1)
    out.line(")", body)

    returned = [cfg.zero_literal if var in classes.constant else grad[var] for var in classes.invars]
    out.line(f"return {format_tuple(returned)}", body)
    out.line()
    out.line(f"return {format_tuple(classes.mutated)}, {backward}", 1)
    return out.render()


def synthesize(
    block: BlockRecord,
    constants: Iterable[str] = (),
    *,
    settings: Settings | None = None,
) -> GeneratedArtifactTriple:
    """Generate the three definitions for a block.

    Args:
        block: Extracted block.
        constants: Names to treat as constants (zero gradient, inactive).
        settings: Naming and dialect; defaults to the environment settings.

    Returns:
        In-place function, non-mutating function and adjoint rule text.

    Raises:
        NoMutationError: If the block mutates no visible variable.
        AnnotationConflictError: If a declared constant is mutated.
        NameCollisionError: If a block variable would be shadowed by a
            generated name.

    Examples:
        >>> from inplace_adjoint.extraction.blocks import block_from_source
        >>> block = block_from_source("a[i] = val\\n", ["a", "val", "i"], function_name="f2")
        >>> print(synthesize(block, constants=["i"]).non_mutating_function, end="")
        def f2(a, val, i):
            a[i] = val
            return (a,)

    """
    cfg = settings or default_settings
    classes = classify(block, constants)
    clashes = generated_names(block, classes, cfg)
    shadowed = tuple(var for var in classes.invars if var in clashes)
    if shadowed:
        raise NameCollisionError(block.function_name, shadowed)
    if block.degraded:
        logger.warning("%s was extracted from fallback text; check the output by hand", block.function_name)
    return GeneratedArtifactTriple(
        function_name=block.function_name,
        mutating_function=emit_mutating_function(block, classes, cfg),
        non_mutating_function=emit_non_mutating_function(block, classes, cfg),
        adjoint_rule=emit_adjoint_rule(block, classes, cfg),
        classification=classes,
    )
