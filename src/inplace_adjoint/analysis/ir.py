"""Statement IR for mutating blocks.

The block text is parsed once with :mod:`ast`; identifiers are then
compared as tokens, never as substrings, so a variable ``xp`` is not
"referenced" by a call to ``np.exp``.

Mutation is line-granular. An assignment anywhere in the block, loop and
``if`` bodies included, counts as a write to ``name`` when its target is a
subscript rooted at ``name`` (``name[...] = ...``, ``name[...] += ...``,
``name[i][j] = ...``) and that target is the first token on its line.
A write that does not start its line is not detected: the second
statement of ``x = 1; a[0] = x`` and the body of ``if flag: a[0] = 1``
both read as non-mutating.

References:
    - Python ast module: https://docs.python.org/3/library/ast.html

"""

from __future__ import annotations

import ast
import textwrap
from dataclasses import dataclass

from inplace_adjoint.errors import BlockSyntaxError


@dataclass(frozen=True)
class BlockIR:
    """Parsed form of a block.

    Attributes:
        source_text: Dedented block text the IR was parsed from.
        statements: Top-level statements in order.
        referenced: Identifiers used anywhere in the block, first occurrence first.
        mutated: Roots of indexed-assignment targets that start their line, first occurrence first.

    """

    source_text: str
    statements: tuple[ast.stmt, ...]
    referenced: tuple[str, ...]
    mutated: tuple[str, ...]

    def references(self, name: str) -> bool:
        return name in self.referenced

    def mutates(self, name: str) -> bool:
        return name in self.mutated


def subscript_root(node: ast.expr) -> str | None:
    """Name at the root of a chain of subscripts, if any.

    Examples:
        >>> import ast
        >>> subscript_root(ast.parse("a[i][j]", mode="eval").body)
        'a'
        >>> subscript_root(ast.parse("a.b[0]", mode="eval").body) is None
        True

    """
    if not isinstance(node, ast.Subscript):
        return None
    while isinstance(node, ast.Subscript):
        node = node.value
    return node.id if isinstance(node, ast.Name) else None


def _assignment_targets(stmt: ast.stmt) -> list[ast.expr]:
    if isinstance(stmt, ast.Assign):
        targets: list[ast.expr] = []
        for target in stmt.targets:
            if isinstance(target, (ast.Tuple, ast.List)):
                targets.extend(target.elts)
            else:
                targets.append(target)
        return targets
    if isinstance(stmt, (ast.AugAssign, ast.AnnAssign)):
        return [stmt.target]
    return []


def _starts_line(node: ast.expr, lines: list[str]) -> bool:
    line = lines[node.lineno - 1]
    return node.col_offset == len(line) - len(line.lstrip())


def _referenced_names(tree: ast.Module) -> tuple[str, ...]:
    names = sorted(
        (node for node in ast.walk(tree) if isinstance(node, ast.Name)),
        key=lambda node: (node.lineno, node.col_offset),
    )
    return tuple(dict.fromkeys(node.id for node in names))


def parse_block(source_text: str) -> BlockIR:
    """Parse block text into a :class:`BlockIR`.

    Args:
        source_text: Statements of the block, possibly indented.

    Returns:
        The block's IR.

    Raises:
        BlockSyntaxError: If the text does not parse.

    Examples:
        >>> ir = parse_block("a[i, i] = val\\nc[i] = np.sin(val)\\n")
        >>> ir.mutated
        ('a', 'c')
        >>> ir.referenced
        ('a', 'i', 'val', 'c', 'np')

    """
    text = textwrap.dedent(source_text)
    try:
        tree = ast.parse(text)
    except SyntaxError as exc:
        raise BlockSyntaxError(f"block is not valid Python: {exc.msg}", lineno=exc.lineno) from exc

    lines = text.split("\n")
    writes: list[tuple[int, int, str]] = []
    for stmt in ast.walk(tree):
        for target in _assignment_targets(stmt):
            root = subscript_root(target)
            if root is not None and _starts_line(target, lines):
                writes.append((target.lineno, target.col_offset, root))
    mutated = dict.fromkeys(root for _, _, root in sorted(writes))

    return BlockIR(
        source_text=text,
        statements=tuple(tree.body),
        referenced=_referenced_names(tree),
        mutated=tuple(mutated),
    )
