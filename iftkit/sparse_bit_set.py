"""Compact encoding of sets of non-negative integers as bit set trees.

Each node of the tree is a group of bits (2, 4, 8 or 32 depending on the
branch factor). A set bit means the corresponding child node exists; in the
leaf layer it means the value is present. A node whose bits are all zero is
completely filled: every value it covers is in the set. Sets with large
gaps take far fewer bytes than a flat bit set.

The encoding must be fully decoded or encoded; random access is not
supported.
"""

from __future__ import annotations

from enum import Enum, auto
from typing import Iterable, Mapping, Sequence

from iftkit.bit_input_buffer import BitInputBuffer
from iftkit.bit_output_buffer import BitOutputBuffer
from iftkit.branch_factor import BranchFactor
from iftkit.tree_layout import (
    choose_branch_factor,
    find_filled_nodes,
    find_filled_twigs,
    tree_depth_for,
    values_per_bit_log2_for_layer,
)

MAX_VALUE = 0xFFFFFFFE
_UINT32_MASK = 0xFFFFFFFF
_INVALID = 0xFFFFFFFF


def _merge(intervals: list[tuple[int, int]]) -> list[range]:
    """Clip inclusive intervals to the storable range and merge them."""
    merged: list[list[int]] = []
    for start, end in sorted(intervals):
        if start > MAX_VALUE:
            continue
        end = min(end, MAX_VALUE)
        if merged and start <= merged[-1][1] + 1:
            merged[-1][1] = max(merged[-1][1], end)
        else:
            merged.append([start, end])
    return [range(start, end + 1) for start, end in merged]


def decode(data: bytes) -> tuple[list[range], bytes]:
    """Decode a sparse bit set.

    Returns the members as sorted, disjoint, non-adjacent ranges, and the
    bytes of ``data`` that follow the encoded set. Raises ValueError when
    the data is truncated or the tree is deeper than the branch factor
    allows. Values beyond MAX_VALUE are ignored.
    """
    data = bytes(data)
    if not data:
        return [], data

    reader = BitInputBuffer(data)
    branch_factor = reader.branch_factor
    tree_height = reader.depth
    if tree_height > branch_factor.max_depth():
        raise ValueError(
            f"tree_height, {tree_height} is larger than max "
            f"{branch_factor.max_depth()}"
        )

    log2 = branch_factor.node_size_log2()
    node_size = branch_factor.node_size()
    # Number of leaf values a node at the current level covers.
    leaf_node_size = 1 << (log2 * tree_height)
    # Converts a node base at the current level to its first leaf value.
    node_base_factor = leaf_node_size >> log2
    node_bases = [0]
    intervals: list[tuple[int, int]] = []

    for level in range(tree_height):
        is_leaf_level = level == tree_height - 1
        next_node_bases: list[int] = []
        for node_base in node_bases:
            node_bits = reader.read()
            if node_bits is None:
                raise ValueError("ran out of node bits.")
            if node_bits == 0:
                start = node_base * node_base_factor
                intervals.append((start, start + leaf_node_size - 1))
                continue
            for bit_index in range(node_size):
                if not (node_bits >> bit_index) & 1:
                    continue
                value = node_base | bit_index
                if is_leaf_level:
                    intervals.append((value, value))
                else:
                    next_node_bases.append(value << log2)
        leaf_node_size >>= log2
        node_base_factor >>= log2
        node_bases = next_node_bases

    return _merge(intervals), reader.remaining()


class _State(Enum):
    START = auto()
    BUILDING_NORMAL_NODE = auto()
    SKIPPING_FILLED_NODE = auto()
    END = auto()


class _Symbol(Enum):
    NEW_NORMAL_NODE = auto()
    EXISTING_NORMAL_NODE = auto()
    NEW_FILLED_NODE = auto()
    EXISTING_FILLED_NODE = auto()
    END_OF_VALUES = auto()


class _LayerEncoder:
    """Writes one layer of the tree by scanning all values once."""

    def __init__(
        self,
        layer: int,
        tree_height: int,
        branch_factor: BranchFactor,
        filled_levels: Mapping[int, int],
        node_bases: Sequence[int],
        bit_buffer: BitOutputBuffer,
    ) -> None:
        self.layer = layer
        self.tree_height = tree_height
        self.branch_factor = branch_factor
        self.filled_levels = filled_levels
        self.node_bases = node_bases
        self.bit_buffer = bit_buffer
        self.values_per_bit_log2 = values_per_bit_log2_for_layer(
            layer, tree_height, branch_factor
        )
        self.node_size = branch_factor.node_size() << self.values_per_bit_log2
        self.twig_log2 = branch_factor.twig_size_log2()
        self.next_node_base = 0
        self.node_base = _INVALID
        self.node_max = _INVALID
        self.node_mask = 0
        self.filled_max = _INVALID
        self.next_node_bases: list[int] = []

    def run(self, codepoints: Iterable[int]) -> list[int]:
        """Encode the layer; return the node bases of the next layer."""
        state = _State.START
        for cp in codepoints:
            state = self._update(state, self._classify(cp, state), cp)
        self._update(state, _Symbol.END_OF_VALUES, _INVALID)
        return self.next_node_bases

    def _filled_override(self, cp: int) -> _Symbol:
        level = self.filled_levels.get(cp >> self.twig_log2)
        if level is not None:
            if self.layer == level:
                return _Symbol.NEW_FILLED_NODE
            if self.layer > level:
                return _Symbol.EXISTING_FILLED_NODE
        return _Symbol.NEW_NORMAL_NODE

    def _classify(self, cp: int, state: _State) -> _Symbol:
        if state is _State.BUILDING_NORMAL_NODE and cp <= self.node_max:
            return _Symbol.EXISTING_NORMAL_NODE
        if state is _State.SKIPPING_FILLED_NODE and cp <= self.filled_max:
            return _Symbol.EXISTING_FILLED_NODE
        if state is _State.END:
            raise RuntimeError("value received after the end of the layer")
        return self._filled_override(cp)

    def _take_node_base(self) -> int:
        base = self.node_bases[self.next_node_base]
        self.next_node_base += 1
        return base

    def _start_filled_node(self) -> None:
        node_base = self._take_node_base()
        self.bit_buffer.append(0)
        self.filled_max = (node_base + self.node_size - 1) & _UINT32_MASK

    def _skip_existing_filled_node(self, cp: int) -> None:
        log2 = self.branch_factor.node_size_log2()
        twig = cp >> self.twig_log2
        # Scan right across all adjacent filled nodes covering this layer.
        while True:
            filled_depth = self.filled_levels[twig]
            twigs_covered = 1 << ((self.tree_height - filled_depth - 2) * log2)
            twig = (twig + twigs_covered) & _UINT32_MASK
            level = self.filled_levels.get(twig)
            if level is None or level >= self.layer:
                break
        self.filled_max = ((twig << self.twig_log2) - 1) & _UINT32_MASK

    def _end_normal_node(self) -> None:
        self.bit_buffer.append(self.node_mask)
        self.node_mask = 0
        self.node_base = _INVALID
        self.node_max = _INVALID
        self.filled_max = _INVALID

    def _update_node_bit(self, cp: int) -> None:
        bit_index = ((cp - self.node_base) & _UINT32_MASK) >> self.values_per_bit_log2
        cp_mask = 1 << bit_index
        if self.node_mask & cp_mask:
            return
        self.node_mask |= cp_mask
        if self.values_per_bit_log2 > 0:
            self.next_node_bases.append(
                (self.node_base | (bit_index << self.values_per_bit_log2))
                & _UINT32_MASK
            )

    def _start_normal_node(self, cp: int) -> None:
        self.node_base = self._take_node_base()
        self.node_max = self.node_base + self.node_size - 1
        self.filled_max = _INVALID
        self._update_node_bit(cp)

    def _update(self, state: _State, symbol: _Symbol, cp: int) -> _State:
        if state is _State.END:
            raise RuntimeError("invalid sparse bit set encoder state")

        if state is _State.BUILDING_NORMAL_NODE:
            if symbol is _Symbol.EXISTING_NORMAL_NODE:
                self._update_node_bit(cp)
                return _State.BUILDING_NORMAL_NODE
            self._end_normal_node()
            if symbol is _Symbol.END_OF_VALUES:
                return _State.END
        elif state is _State.SKIPPING_FILLED_NODE:
            if symbol is _Symbol.EXISTING_FILLED_NODE:
                return _State.SKIPPING_FILLED_NODE
            if symbol is _Symbol.END_OF_VALUES:
                return _State.END
        elif symbol in (_Symbol.EXISTING_NORMAL_NODE, _Symbol.END_OF_VALUES):
            raise RuntimeError("invalid sparse bit set encoder state")

        if symbol is _Symbol.NEW_NORMAL_NODE:
            self._start_normal_node(cp)
            return _State.BUILDING_NORMAL_NODE
        if symbol is _Symbol.NEW_FILLED_NODE:
            self._start_filled_node()
            return _State.SKIPPING_FILLED_NODE
        if symbol is _Symbol.EXISTING_FILLED_NODE:
            self._skip_existing_filled_node(cp)
            return _State.SKIPPING_FILLED_NODE
        raise RuntimeError("invalid sparse bit set encoder state")


def _encode_set(
    codepoints: Sequence[int],
    branch_factor: BranchFactor,
    filled_twigs: Sequence[int],
) -> bytes:
    tree_height = tree_depth_for(codepoints[-1], branch_factor)
    filled_levels = find_filled_nodes(branch_factor, tree_height, filled_twigs)
    bit_buffer = BitOutputBuffer(branch_factor, tree_height)

    node_bases = [0]
    for layer in range(tree_height):
        next_node_bases = _LayerEncoder(
            layer, tree_height, branch_factor, filled_levels, node_bases, bit_buffer
        ).run(codepoints)
        if not next_node_bases:
            break  # Filled nodes leave nothing further to encode.
        node_bases = next_node_bases
    return bit_buffer.to_bytes()


def encode(
    values: Iterable[int], branch_factor: BranchFactor | None = None
) -> bytes:
    """Encode a set of integers in ``0..MAX_VALUE`` as a sparse bit set.

    With no branch factor the one estimated to give the smallest encoding is
    chosen, and an empty set encodes to no bytes at all. With an explicit
    branch factor an empty set encodes to a single zero byte; BF2 is
    upgraded to BF4 when the values need a deeper tree than BF2 allows.
    """
    codepoints = sorted(set(values))
    if codepoints and (codepoints[0] < 0 or codepoints[-1] > MAX_VALUE):
        raise ValueError(f"values must lie in 0..{MAX_VALUE}")

    if branch_factor is None:
        if not codepoints:
            return b""
        chosen, filled_twigs = choose_branch_factor(codepoints)
        return _encode_set(codepoints, chosen, filled_twigs)

    max_value = codepoints[-1] if codepoints else _INVALID
    if (
        branch_factor is BranchFactor.BF2
        and tree_depth_for(max_value, branch_factor) > branch_factor.max_depth()
    ):
        branch_factor = BranchFactor.BF4
    if not codepoints:
        return b"\x00"
    filled_twigs = find_filled_twigs(codepoints, branch_factor)
    return _encode_set(codepoints, branch_factor, filled_twigs)