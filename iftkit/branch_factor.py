"""Branch factors of sparse bit set trees and their derived sizes."""

from __future__ import annotations

from enum import Enum

_NODE_SIZE_LOG2 = (1, 2, 3, 5)
# Depth needed to cover the entire 32 bit range 0..0xFFFFFFFF.
_MAX_DEPTH = (31, 16, 11, 7)


class BranchFactor(Enum):
    """Number of children per tree node; the value is its 2-bit wire code."""

    BF2 = 0
    BF4 = 1
    BF8 = 2
    BF32 = 3

    def node_size(self) -> int:
        """How many children a node has."""
        return 1 << self.node_size_log2()

    def node_size_log2(self) -> int:
        return _NODE_SIZE_LOG2[self.value]

    def twig_size(self) -> int:
        """How many values a node one layer above the leaves covers."""
        return 1 << self.twig_size_log2()

    def twig_size_log2(self) -> int:
        return self.node_size_log2() * 2

    def node_size_bit_mask(self) -> int:
        """Mask covering the bits needed to index within one node."""
        return self.node_size() - 1

    def twig_size_bit_mask(self) -> int:
        """Mask covering the bits needed to index within one twig."""
        return self.twig_size() - 1

    def max_depth(self) -> int:
        """Largest tree depth allowed for this branch factor."""
        return _MAX_DEPTH[self.value]