"""Deduplication of block shapes across loop iterations.

A driving loop extracts the same block once per iteration. Blocks seeing
the same set of visible variables are taken to be the same shape, so only
the first one is kept and synthesized.

"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from inplace_adjoint.extraction.blocks import BlockRecord

logger = logging.getLogger(__name__)


class DeduplicatingRegistry:
    """Ordered collection of distinct block shapes.

    Examples:
        >>> from inplace_adjoint.extraction.blocks import block_from_source
        >>> registry = DeduplicatingRegistry()
        >>> block = block_from_source("a[i] = 1\\n", ["a", "i"], function_name="f1")
        >>> registry.register(block)
        (True, 0)
        >>> registry.register(block)
        (False, 0)
        >>> len(registry)
        1

    """

    def __init__(self) -> None:
        self._blocks: list[BlockRecord] = []
        self._ids: dict[frozenset[str], int] = {}

    def register(self, block: BlockRecord) -> tuple[bool, int]:
        """Record a block unless its shape is already known.

        Args:
            block: Freshly extracted block.

        Returns:
            ``(is_new, artifact_id)``; the id is that of the first block
            registered with the same visible variables.

        """
        artifact_id = self._ids.get(block.key)
        if artifact_id is not None:
            logger.debug("Block %s matches shape #%d, skipped", block.function_name, artifact_id)
            return False, artifact_id

        artifact_id = len(self._blocks)
        self._ids[block.key] = artifact_id
        self._blocks.append(block)
        logger.info("Registered block %s as shape #%d", block.function_name, artifact_id)
        return True, artifact_id

    def get(self, artifact_id: int) -> BlockRecord:
        return self._blocks[artifact_id]

    @property
    def blocks(self) -> tuple[BlockRecord, ...]:
        return tuple(self._blocks)

    @property
    def variable_sets(self) -> tuple[tuple[str, ...], ...]:
        return tuple(block.visible_vars for block in self._blocks)

    @property
    def function_names(self) -> tuple[str, ...]:
        return tuple(block.function_name for block in self._blocks)

    def __contains__(self, block: object) -> bool:
        return isinstance(block, BlockRecord) and block.key in self._ids

    def __len__(self) -> int:
        return len(self._blocks)

    def __iter__(self) -> Iterator[BlockRecord]:
        return iter(self._blocks)
