"""inplace-adjoint — custom adjoints for mutating array blocks.

Rewrites a block of indexed in-place assignments into an in-place function,
a value-returning wrapper and a custom reverse-mode rule whose backward pass
delegates to a mutation-aware AD engine.

Modules:
    extraction: Explicit scopes and block extraction from live units
    analysis: Statement IR and variable classification
    codegen: Text synthesis of the three generated definitions
    registry: Deduplication of repeated block shapes
    generator: End-to-end driver (extract, register, synthesize, report)
    config: Naming and target dialect settings
"""

__version__ = "0.1.0"
