"""Explicit scope snapshots.

A Scope is the ordered set of variable names visible where a mutating block
starts, with a coarse kind per name. Callers build it *before* running the
block, so names first bound inside the block are never part of it.

Capturing from ``globals()``/``locals()`` skips everything that is not data:
modules, functions, classes, other callables, ``_``-prefixed names and this
package's own objects. A driving loop therefore sees the same scope on every
iteration even though its unit and scope variables appear after the first.

References:
    - Python data model, execution frames: https://docs.python.org/3/reference/datamodel.html
    - JAX sharp bits, in-place updates: https://jax.readthedocs.io/en/latest/notebooks/Common_Gotchas_in_JAX.html

"""

from __future__ import annotations

import enum
import inspect
import numbers
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

import jax
import numpy as np


class ScopeKind(str, enum.Enum):
    """Kind of the value bound to a visible name."""

    ARRAY = "array"
    IMMUTABLE_ARRAY = "immutable_array"
    INTEGER = "integer"
    SCALAR = "scalar"
    OBJECT = "object"


def kind_of(value: Any) -> ScopeKind:
    """Classify a bound value.

    Examples:
        >>> import numpy as np
        >>> kind_of(np.zeros(3))
        <ScopeKind.ARRAY: 'array'>
        >>> kind_of(3)
        <ScopeKind.INTEGER: 'integer'>
        >>> kind_of(0.5)
        <ScopeKind.SCALAR: 'scalar'>

    """
    # jax arrays are checked first: they also satisfy the numeric protocols
    if isinstance(value, jax.Array):
        return ScopeKind.IMMUTABLE_ARRAY
    if isinstance(value, np.ndarray):
        return ScopeKind.ARRAY
    if isinstance(value, bool):
        return ScopeKind.OBJECT
    if isinstance(value, numbers.Integral):
        return ScopeKind.INTEGER
    if isinstance(value, numbers.Number):
        return ScopeKind.SCALAR
    return ScopeKind.OBJECT


def _is_variable(name: str, value: Any) -> bool:
    if name.startswith("_"):
        return False
    if inspect.ismodule(value) or inspect.isclass(value):
        return False
    # scopes, registries and generators bound in a driving loop are bookkeeping
    if type(value).__module__.split(".")[0] == "inplace_adjoint":
        return False
    # arrays are not callable; anything else that is (functions, ufuncs) is code
    return not callable(value)


@dataclass(frozen=True)
class Scope:
    """Ordered, read-only mapping of visible names to their kinds.

    Examples:
        >>> scope = Scope.from_names(["a", "c", "i"])
        >>> scope.names
        ('a', 'c', 'i')
        >>> "c" in scope
        True

    """

    bindings: Mapping[str, ScopeKind] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "bindings", MappingProxyType(dict(self.bindings)))

    def __hash__(self) -> int:
        # equality ignores binding order, so the hash does too
        return hash(frozenset(self.bindings.items()))

    @classmethod
    def capture(
        cls,
        local_vars: Mapping[str, Any] | None = None,
        global_vars: Mapping[str, Any] | None = None,
    ) -> Scope:
        """Snapshot variables from namespace mappings.

        Globals come first, followed by locals not already seen, which
        matches the order a reader meets them in the enclosing program.

        Args:
            local_vars: Usually ``locals()`` at the block site.
            global_vars: Usually ``globals()`` of the enclosing module.

        Returns:
            Scope over every data binding found.

        Examples:
            >>> import numpy as np
            >>> Scope.capture({"val": 1.5, "i": 0}, {"a": np.zeros(2), "np": np}).names
            ('a', 'val', 'i')

        """
        bindings: dict[str, ScopeKind] = {}
        for namespace in (global_vars or {}, local_vars or {}):
            for name, value in namespace.items():
                if name not in bindings and _is_variable(name, value):
                    bindings[name] = kind_of(value)
        return cls(bindings)

    @classmethod
    def from_names(cls, names: Iterable[str], kind: ScopeKind = ScopeKind.OBJECT) -> Scope:
        """Build a scope from bare names, all sharing one kind."""
        return cls({name: kind for name in names})

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self.bindings)

    def kind(self, name: str) -> ScopeKind:
        return self.bindings[name]

    def names_of_kind(self, *kinds: ScopeKind) -> tuple[str, ...]:
        """Names whose kind is one of ``kinds``, in scope order.

        Handy for an explicit constant list, e.g.
        ``constants=scope.names_of_kind(ScopeKind.INTEGER)``.
        """
        return tuple(name for name, kind in self.bindings.items() if kind in kinds)

    def __contains__(self, name: object) -> bool:
        return name in self.bindings

    def __len__(self) -> int:
        return len(self.bindings)
