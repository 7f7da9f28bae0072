"""Mutating block extraction.

A mutating block is wrapped in a zero-argument nested function (a *unit*)
at the site where it used to run inline:

    scope = Scope.capture(locals(), globals())

    def f1():
        a[i, i] = val
        c[i] = np.sin(val)

    block = extract_block(f1, scope)

Extraction runs the unit once, so the program computes exactly what the
inline block computed, and recovers the unit's statements as text.

References:
    - inspect.getsource: https://docs.python.org/3/library/inspect.html#inspect.getsource

"""

from __future__ import annotations

import ast
import inspect
import logging
import textwrap
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from inplace_adjoint.analysis.ir import BlockIR, parse_block
from inplace_adjoint.errors import BlockSyntaxError, SourceUnavailableError
from inplace_adjoint.extraction.scope import Scope

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BlockRecord:
    """One mutating block found at an extraction site.

    Attributes:
        source_text: Statement body, dedented, every line newline-terminated.
        function_name: Name of the unit the block was wrapped in.
        scope: Variables visible when the block started.
        degraded: True when the text came from a fallback literal.

    """

    source_text: str
    function_name: str
    scope: Scope
    degraded: bool = False

    @property
    def visible_vars(self) -> tuple[str, ...]:
        return self.scope.names

    @property
    def key(self) -> frozenset[str]:
        """Deduplication identity: blocks seeing the same names share a shape."""
        return frozenset(self.visible_vars)

    def parse(self) -> BlockIR:
        return parse_block(self.source_text)


def _join_lines(lines: Iterable[str]) -> str:
    return "".join(line + "\n" for line in lines)


def split_definition(text: str) -> tuple[str | None, str]:
    """Split unit text into its name and statement body.

    Decorators and the ``def`` line are dropped; the remaining lines are
    dedented and newline-terminated. Text that is not a single function
    definition is returned whole as the body, with no name.

    Examples:
        >>> split_definition("def f1():\\n    a[i] = 1\\n    c[i] = 2\\n")
        ('f1', 'a[i] = 1\\nc[i] = 2\\n')
        >>> split_definition("a[i] = 1")
        (None, 'a[i] = 1\\n')

    """
    text = textwrap.dedent(text)
    try:
        tree = ast.parse(text)
    except SyntaxError as exc:
        raise BlockSyntaxError(f"unit is not valid Python: {exc.msg}", lineno=exc.lineno) from exc

    lines = text.splitlines()
    if len(tree.body) == 1 and isinstance(tree.body[0], (ast.FunctionDef, ast.AsyncFunctionDef)):
        unit = tree.body[0]
        start = unit.body[0]
        last = unit.body[-1].end_lineno or len(lines)
        body_lines = lines[start.lineno - 1 : last]
        if start.lineno == unit.lineno:
            # one-line unit: "def f1(): a[i] = 1"
            body_lines[0] = body_lines[0][start.col_offset :]
        return unit.name, textwrap.dedent(_join_lines(body_lines))
    return None, _join_lines(lines)


def extract_block(
    unit: Callable[[], Any],
    scope: Scope,
    *,
    fallback_source: str | None = None,
) -> BlockRecord:
    """Run a unit once and capture its statements.

    Args:
        unit: Zero-argument function wrapping the mutating statements.
        scope: Names visible before the unit ran (see :meth:`Scope.capture`).
        fallback_source: Text standing in for the unit when its source
            cannot be recovered (interactive sessions, ``exec``). Either the
            full ``def`` or the bare statements.

    Returns:
        The extracted block.

    Raises:
        SourceUnavailableError: If the source is unavailable and no fallback
            was supplied. The unit has already run at that point.

    """
    unit()

    degraded = False
    try:
        raw = inspect.getsource(unit)
    except (OSError, TypeError) as exc:
        if fallback_source is None:
            raise SourceUnavailableError(
                f"cannot recover source of {getattr(unit, '__name__', unit)!r}: {exc}"
            ) from exc
        logger.warning(
            "Source of %s unavailable (%s); using fallback text, output may drift from the code",
            getattr(unit, "__name__", unit),
            exc,
        )
        raw = fallback_source
        degraded = True

    name, body = split_definition(raw)
    if name is None:
        name = getattr(unit, "__name__", "block")
    return BlockRecord(source_text=body, function_name=name, scope=scope, degraded=degraded)


def block_from_source(
    source_text: str,
    scope: Scope | Iterable[str],
    *,
    function_name: str | None = None,
) -> BlockRecord:
    """Build a block record from text, without running anything.

    Args:
        source_text: A unit definition or bare statements.
        scope: Visible names, as a Scope or any iterable of names.
        function_name: Name for bare statements; overrides a parsed ``def`` name.

    Returns:
        The block record.

    Examples:
        >>> block = block_from_source("a[i] = val\\n", ["a", "val", "i"], function_name="f2")
        >>> block.function_name, block.visible_vars
        ('f2', ('a', 'val', 'i'))

    """
    if not isinstance(scope, Scope):
        scope = Scope.from_names(scope)
    name, body = split_definition(source_text)
    name = function_name or name
    if name is None:
        raise ValueError("function_name is required when the source has no def line")
    if not name.isidentifier():
        raise ValueError(f"{name!r} is not a valid function name")
    return BlockRecord(source_text=body, function_name=name, scope=scope)
