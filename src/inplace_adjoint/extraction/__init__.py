"""Explicit scopes and mutating block extraction.

A caller snapshots the visible variables, wraps the mutating statements in
a zero-argument unit and hands both to the extractor, which runs the unit
once and captures its statements as text.
"""

from inplace_adjoint.extraction.scope import Scope, ScopeKind, kind_of
from inplace_adjoint.extraction.blocks import (
    BlockRecord,
    block_from_source,
    extract_block,
    split_definition,
)

__all__ = [
    "Scope",
    "ScopeKind",
    "kind_of",
    "BlockRecord",
    "extract_block",
    "block_from_source",
    "split_definition",
]
