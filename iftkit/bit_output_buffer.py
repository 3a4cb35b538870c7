"""Writer for the node bits of an encoded sparse bit set."""

from __future__ import annotations

from iftkit.branch_factor import BranchFactor


class BitOutputBuffer:
    """Collects node-sized groups of bits into an encoded sparse bit set.

    The first byte encodes the branch factor and the depth. Bits are packed
    lowest first; a partly filled last byte is padded with zeros.
    """

    def __init__(self, branch_factor: BranchFactor, depth: int) -> None:
        self.branch_factor = branch_factor
        self._buffer = bytearray([(branch_factor.value | (depth << 2)) & 0xFF])
        self._current_pair = 0
        self._first_nibble = True

    def append(self, bits: int) -> None:
        """Append the lowest node-size bits of ``bits``."""
        bf = self.branch_factor
        if bf is BranchFactor.BF2:
            two_bits = bits & 0b11
            if self._current_pair == 0:
                self._buffer.append(two_bits)
            else:
                self._buffer[-1] |= two_bits << (2 * self._current_pair)
            self._current_pair = (self._current_pair + 1) % 4
        elif bf is BranchFactor.BF4:
            nibble = bits & 0x0F
            if self._first_nibble:
                self._buffer.append(nibble)
            else:
                self._buffer[-1] = (self._buffer[-1] & 0x0F) | (nibble << 4)
            self._first_nibble = not self._first_nibble
        elif bf is BranchFactor.BF8:
            self._buffer.append(bits & 0xFF)
        else:
            self._buffer += (bits & 0xFFFFFFFF).to_bytes(4, "little")

    def to_bytes(self) -> bytes:
        """The encoded bytes; the first bits written are in the first byte."""
        return bytes(self._buffer)