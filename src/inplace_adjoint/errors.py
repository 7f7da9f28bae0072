"""Exceptions raised by inplace-adjoint."""

from __future__ import annotations


class InplaceAdjointError(Exception):
    """Base class for all generator errors."""


class BlockSyntaxError(InplaceAdjointError, ValueError):
    """Block text is not valid Python."""

    def __init__(self, message: str, *, lineno: int | None = None) -> None:
        super().__init__(message)
        self.lineno = lineno


class SourceUnavailableError(InplaceAdjointError, LookupError):
    """Source of a unit cannot be recovered and no fallback was given."""


class NoMutationError(InplaceAdjointError, ValueError):
    """Block has no indexed in-place assignment to a visible variable."""


class AnnotationConflictError(InplaceAdjointError, ValueError):
    """A variable was declared constant but the block mutates it."""

    def __init__(self, names: tuple[str, ...]) -> None:
        super().__init__(f"variables declared constant are mutated by the block: {', '.join(names)}")
        self.names = names


class ImmutableTargetError(InplaceAdjointError, TypeError):
    """A mutated variable is bound to an immutable array in the scope."""

    def __init__(self, names: tuple[str, ...]) -> None:
        super().__init__(
            f"block assigns in place to immutable arrays: {', '.join(names)} "
            "(use .at[].set() or convert to numpy first)"
        )
        self.names = names


class NameCollisionError(InplaceAdjointError, ValueError):
    """A block variable has the same name as an identifier the generator emits."""

    def __init__(self, function_name: str, names: tuple[str, ...]) -> None:
        super().__init__(
            f"{function_name}: variables clash with generated names: {', '.join(names)} "
            "(rename them or change the naming settings)"
        )
        self.function_name = function_name
        self.names = names
