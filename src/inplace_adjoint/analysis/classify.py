"""Variable classification for mutating blocks.

Each visible variable the block references lands in exactly one of three
groups:

    mutated   target of an indexed in-place assignment; seeded with the
              incoming cotangent and updated in place by the engine
    constant  declared by the caller; gradient slot is the zero literal
    active    everything else; its gradient is returned by the engine

Constants are never inferred. A typed scope makes explicit lists cheap to
build (``scope.names_of_kind(ScopeKind.INTEGER)``) but the choice stays with
the caller.

"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from inplace_adjoint.analysis.ir import BlockIR
from inplace_adjoint.errors import AnnotationConflictError, ImmutableTargetError, NoMutationError
from inplace_adjoint.extraction.scope import ScopeKind

if TYPE_CHECKING:
    from inplace_adjoint.extraction.blocks import BlockRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VariableClassification:
    """Partition of a block's referenced variables.

    All tuples follow ``invars`` order.

    Attributes:
        invars: Visible variables referenced by the block; the argument list.
        mutated: Variables assigned in place.
        constant: Variables declared constant.
        active: Remaining variables, differentiated but not mutated.

    """

    invars: tuple[str, ...]
    mutated: tuple[str, ...]
    constant: tuple[str, ...]
    active: tuple[str, ...]

    def role(self, name: str) -> str:
        """Return ``"mutated"``, ``"constant"`` or ``"active"``."""
        if name in self.mutated:
            return "mutated"
        if name in self.constant:
            return "constant"
        if name in self.active:
            return "active"
        raise KeyError(name)


def classify(
    block: BlockRecord,
    constants: Iterable[str] = (),
    *,
    ir: BlockIR | None = None,
) -> VariableClassification:
    """Classify the visible variables of a block.

    Args:
        block: Block to classify.
        constants: Names the caller declares constant. Names the block does
            not reference are ignored.
        ir: Pre-parsed IR of ``block.source_text``.

    Returns:
        The partition of the referenced visible variables.

    Raises:
        NoMutationError: If no referenced variable is mutated.
        AnnotationConflictError: If a declared constant is mutated.
        ImmutableTargetError: If a mutated variable is a jax array.

    Examples:
        >>> from inplace_adjoint.extraction.blocks import block_from_source
        >>> block = block_from_source(
        ...     "a[i, i] = val\\nc[i] = np.sin(val)\\n",
        ...     ["a", "b", "c", "val", "i"],
        ...     function_name="f1",
        ... )
        >>> result = classify(block, constants=["i"])
        >>> result.invars, result.mutated, result.constant, result.active
        (('a', 'c', 'val', 'i'), ('a', 'c'), ('i',), ('val',))

    """
    if ir is None:
        ir = block.parse()
    declared = set(constants)

    invars = tuple(name for name in block.visible_vars if ir.references(name))
    mutated = tuple(name for name in invars if ir.mutates(name))
    if not mutated:
        raise NoMutationError(
            f"{block.function_name}: no visible variable is assigned in place "
            f"(referenced: {', '.join(invars) or 'none'})"
        )

    conflicts = tuple(name for name in mutated if name in declared)
    if conflicts:
        raise AnnotationConflictError(conflicts)

    immutable = tuple(
        name for name in mutated if block.scope.kind(name) is ScopeKind.IMMUTABLE_ARRAY
    )
    if immutable:
        raise ImmutableTargetError(immutable)

    constant = tuple(name for name in invars if name in declared)
    active = tuple(name for name in invars if name not in mutated and name not in declared)

    logger.info("Found mutating variables %s in function %s", ",".join(mutated), block.function_name)
    return VariableClassification(invars=invars, mutated=mutated, constant=constant, active=active)
