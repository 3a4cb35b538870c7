"""Tree shape calculations for sparse bit set encoding."""

from __future__ import annotations

from typing import Sequence

from iftkit.branch_factor import BranchFactor

_UINT32_MASK = 0xFFFFFFFF
_UINT32_MAX = 0xFFFFFFFF

_ALL_FACTORS = (
    BranchFactor.BF2,
    BranchFactor.BF4,
    BranchFactor.BF8,
    BranchFactor.BF32,
)

# Estimated sum of nodes above the leaves, as a multiple of the leaf count.
# Chosen to match tree sizes seen in uniform random and frequency weighted
# random codepoint sets.
_GEOMETRIC_SUM = {
    BranchFactor.BF2: 1.0 / 0.4,
    BranchFactor.BF4: 1.0 / 1.8,
    BranchFactor.BF8: 1.0 / 3.0,
    BranchFactor.BF32: 1.0 / 15.0,
}


def tree_depth_for(max_value: int, branch_factor: BranchFactor) -> int:
    """The tree depth needed to hold values up to ``max_value``."""
    shift = branch_factor.node_size_log2()
    depth = 1
    remaining = max_value >> shift
    while remaining:
        depth += 1
        remaining >>= shift
    return depth


def values_per_bit_log2_for_layer(
    layer: int, tree_depth: int, branch_factor: BranchFactor
) -> int:
    """Log2 of how many values one bit of a node in ``layer`` covers."""
    num_layers = tree_depth - layer - 1
    return branch_factor.node_size_log2() * num_layers


def estimate_tree_size(num_leaf_nodes: int, branch_factor: BranchFactor) -> int:
    """Estimate how many nodes sit above ``num_leaf_nodes`` leaves."""
    return int(num_leaf_nodes * _GEOMETRIC_SUM[branch_factor])


def _count_skipped_leaves(prev_cp: int, cp: int, empty_leaves: dict) -> None:
    if cp < BranchFactor.BF2.node_size():
        return
    if (cp - prev_cp) & _UINT32_MASK < BranchFactor.BF2.node_size():
        return
    first_missing = (prev_cp + 1) & _UINT32_MASK
    for bf in _ALL_FACTORS:
        size = bf.node_size()
        remainder = first_missing & bf.node_size_bit_mask()
        start = first_missing + (size - remainder) if remainder else first_missing
        start &= _UINT32_MASK
        end = cp - (cp & bf.node_size_bit_mask())
        if end > start:
            empty_leaves[bf] += (end - start) >> bf.node_size_log2()


def choose_branch_factor(
    codepoints: Sequence[int],
) -> tuple[BranchFactor, list[int]]:
    """Pick the branch factor estimated to give the smallest encoding.

    ``codepoints`` must be sorted and unique. Returns the chosen branch
    factor and the filled twigs found for it. Ties prefer BF4, then BF2,
    BF32 and BF8.
    """
    if not codepoints:
        return BranchFactor.BF8, []

    empty_leaves = {bf: 0 for bf in _ALL_FACTORS}
    filled_twigs: dict[BranchFactor, list[int]] = {bf: [] for bf in _ALL_FACTORS}

    it = iter(codepoints)
    cp = next(it)
    _count_skipped_leaves(_UINT32_MAX, cp, empty_leaves)
    seq_len = 1
    prev_cp = cp
    for cp in it:
        _count_skipped_leaves(prev_cp, cp, empty_leaves)
        seq_len = seq_len + 1 if cp == ((prev_cp + 1) & _UINT32_MASK) else 1
        for bf in _ALL_FACTORS:
            mask = bf.twig_size_bit_mask()
            if (cp & mask) != mask:
                break
            if seq_len >= bf.twig_size():
                filled_twigs[bf].append(cp >> bf.twig_size_log2())
        prev_cp = cp

    estimated_bytes: dict[BranchFactor, int] = {}
    for bf in _ALL_FACTORS:
        # Round up to the end of the current node.
        remainder = (prev_cp + 1) & bf.node_size_bit_mask()
        if remainder:
            prev_cp = (prev_cp + bf.node_size() - remainder) & _UINT32_MASK
        processed_leaves = ((prev_cp + 1) & _UINT32_MASK) >> bf.node_size_log2()
        filled_leaves = (len(filled_twigs[bf]) << bf.node_size_log2()) & _UINT32_MASK
        leaf_nodes = (processed_leaves - empty_leaves[bf] - filled_leaves) & _UINT32_MASK
        tree_nodes = estimate_tree_size(leaf_nodes, bf)
        total = (leaf_nodes + tree_nodes) & _UINT32_MASK
        if bf is BranchFactor.BF2:
            estimated_bytes[bf] = total >> 2
        elif bf is BranchFactor.BF4:
            estimated_bytes[bf] = total >> 1
        elif bf is BranchFactor.BF8:
            estimated_bytes[bf] = total
        else:
            estimated_bytes[bf] = (total << 2) & _UINT32_MASK

    optimal = BranchFactor.BF4
    max_value = codepoints[-1]
    for bf in (BranchFactor.BF2, BranchFactor.BF32, BranchFactor.BF8):
        if tree_depth_for(max_value, bf) > bf.max_depth():
            continue
        if estimated_bytes[bf] < estimated_bytes[optimal]:
            optimal = bf
    return optimal, filled_twigs[optimal]


def find_filled_twigs(
    codepoints: Sequence[int], branch_factor: BranchFactor
) -> list[int]:
    """Indices of twigs (nodes one layer above leaves) that are fully present.

    ``codepoints`` must be sorted and unique.
    """
    twig_mask = branch_factor.twig_size_bit_mask()
    twig_size = branch_factor.twig_size()
    twig_log2 = branch_factor.twig_size_log2()
    filled: list[int] = []
    prev_cp = _UINT32_MAX - 1
    seq_len = 0
    for cp in codepoints:
        seq_len = seq_len + 1 if cp == ((prev_cp + 1) & _UINT32_MASK) else 1
        if (cp & twig_mask) == twig_mask:
            if seq_len == twig_size:
                filled.append(cp >> twig_log2)
            seq_len = 0
        prev_cp = cp
    return filled


def find_filled_nodes(
    branch_factor: BranchFactor, tree_height: int, filled_twigs: Sequence[int]
) -> dict[int, int]:
    """Map each filled twig to the shallowest layer at which it is filled.

    Layer 0 is the root. A node that is completely filled is encoded as a
    zero at that layer. Leaf nodes are never marked as filled.
    """
    if tree_height < 2 or not filled_twigs:
        return {}

    filled_levels = {twig: tree_height - 2 for twig in filled_twigs}

    log2 = branch_factor.node_size_log2()
    node_size = branch_factor.node_size()
    node_size_bit_mask = branch_factor.node_size_bit_mask()
    for layer in range(tree_height - 3, -1, -1):
        target_level = layer + 1
        prev_twig = _UINT32_MAX - 1
        seq_len = 0
        merged_nodes = 0
        for twig in filled_twigs:
            level = filled_levels[twig]
            if twig == ((prev_twig + 1) & _UINT32_MASK) and level == target_level:
                seq_len += 1
            elif level == target_level:
                seq_len = 1
            else:
                seq_len = 0
            if (twig & node_size_bit_mask) == node_size_bit_mask:
                if seq_len == node_size:
                    for merged in range(twig - node_size + 1, twig + 1):
                        filled_levels[merged] = layer
                    merged_nodes += 1
                seq_len = 0
            prev_twig = twig
        if merged_nodes < branch_factor.node_size():
            break
        node_size = (node_size << log2) & _UINT32_MASK
        node_size_bit_mask = (
            (node_size_bit_mask << log2) | branch_factor.node_size_bit_mask()
        ) & _UINT32_MASK
    return filled_levels