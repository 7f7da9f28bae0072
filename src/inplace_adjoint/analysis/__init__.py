"""Block IR and variable classification.

Blocks are parsed once into a small statement IR; identifiers are matched
as tokens. Classification splits the referenced visible variables into
mutated, constant and active groups.
"""

from inplace_adjoint.analysis.ir import BlockIR, parse_block, subscript_root
from inplace_adjoint.analysis.classify import VariableClassification, classify

__all__ = [
    "BlockIR",
    "parse_block",
    "subscript_root",
    "VariableClassification",
    "classify",
]
