"""Reader for the node bits of an encoded sparse bit set."""

from __future__ import annotations

from typing import Iterator

from iftkit.branch_factor import BranchFactor


class BitInputBuffer:
    """Reads node-sized groups of bits from an encoded sparse bit set.

    The first byte holds the branch factor (bits 0-1) and the tree depth
    (bits 2-6); bit 7 is reserved and ignored.
    """

    def __init__(self, bits: bytes) -> None:
        self._bits = bytes(bits)
        if self._bits:
            first = self._bits[0]
            self.branch_factor = BranchFactor(first & 0b11)
            self.depth = (first & 0b01111100) >> 2
        else:
            self.branch_factor = BranchFactor.BF2
            self.depth = 0
        self._current_byte = 1
        self._current_pair = 0
        self._first_nibble = True

    def remaining(self) -> bytes:
        """Bytes not yet touched by any read."""
        start = self._current_byte
        if self.branch_factor is BranchFactor.BF2 and self._current_pair > 0:
            start += 1
        elif self.branch_factor is BranchFactor.BF4 and not self._first_nibble:
            start += 1
        return self._bits[start:]

    def read(self) -> int | None:
        """Return the next node's bits, or None when the data is exhausted."""
        bits = self._bits
        pos = self._current_byte
        bf = self.branch_factor

        if bf is BranchFactor.BF32:
            if pos + 3 >= len(bits):
                return None
            self._current_byte += 4
            return int.from_bytes(bits[pos : pos + 4], "little")

        if pos >= len(bits):
            return None

        if bf is BranchFactor.BF2:
            value = (bits[pos] >> (2 * self._current_pair)) & 0b11
            self._current_pair += 1
            if self._current_pair == 4:
                self._current_byte += 1
                self._current_pair = 0
            return value

        if bf is BranchFactor.BF4:
            if self._first_nibble:
                self._first_nibble = False
                return bits[pos] & 0x0F
            self._first_nibble = True
            self._current_byte += 1
            return bits[pos] >> 4

        self._current_byte += 1
        return bits[pos]

    def __iter__(self) -> Iterator[int]:
        return iter(self.read, None)