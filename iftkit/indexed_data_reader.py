"""Access to chunked data listed in an offset table (e.g. loca + glyf)."""

from __future__ import annotations


class IndexedDataReader:
    """Reads entries of data segmented by a big-endian offset table.

    ``offset_width`` is the size in bytes of each offset entry and
    ``offset_multiplier`` scales the stored offsets into byte offsets
    (2 for short loca, 1 otherwise).
    """

    def __init__(
        self,
        offsets: bytes,
        data: bytes,
        offset_width: int,
        offset_multiplier: int,
    ) -> None:
        if offset_width <= 0:
            raise ValueError(f"offset width must be positive, got {offset_width}")
        if offset_multiplier <= 0:
            raise ValueError(
                f"offset multiplier must be positive, got {offset_multiplier}"
            )
        self._offsets = bytes(offsets)
        self._data = bytes(data)
        self._width = offset_width
        self._multiplier = offset_multiplier

    def _offset_at(self, position: int) -> int:
        raw = self._offsets[position : position + self._width]
        return int.from_bytes(raw, "big") * self._multiplier

    def data_for(self, index: int) -> bytes:
        """Return the bytes of entry ``index``.

        Raises LookupError when the entry is not in the offset table and
        ValueError when the table describes an invalid range.
        """
        width = self._width
        start_index = index * width
        end_index = (index + 1) * width
        if index < 0 or end_index + width > len(self._offsets):
            raise LookupError(f"Entry {index} not found in offset table.")

        start_offset = self._offset_at(start_index)
        end_offset = self._offset_at(end_index)
        if end_offset < start_offset:
            raise ValueError("Invalid index. end < start.")
        if end_offset > len(self._data):
            raise ValueError("Data offsets exceed data size.")
        return self._data[start_offset:end_offset]