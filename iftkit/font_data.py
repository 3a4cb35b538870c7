"""Immutable holder for the binary data of a font."""

from __future__ import annotations


class FontData:
    """The bytes of a font binary, or of any piece of one."""

    __slots__ = ("_data",)

    def __init__(self, data: bytes | bytearray | memoryview | FontData = b"") -> None:
        if isinstance(data, (str, int)):
            raise TypeError(
                f"font data must be bytes-like, not {type(data).__name__}"
            )
        self._data = bytes(data)

    def empty(self) -> bool:
        """True when no bytes are held."""
        return not self._data

    def span(self, start: int = 0, end: int | None = None) -> bytes:
        """Bytes in ``[start, end)``, clipped to the data.

        A start at or past the end of the data, or not before ``end``,
        gives no bytes.
        """
        if start < 0 or (end is not None and end < 0):
            raise ValueError("span bounds must not be negative")
        size = len(self._data)
        if start >= size or (end is not None and start >= end):
            return b""
        if end is None or end > size:
            end = size
        return self._data[start:end]

    def __len__(self) -> int:
        return len(self._data)

    def __bytes__(self) -> bytes:
        return self._data

    def __eq__(self, other: object) -> bool:
        if isinstance(other, FontData):
            return self._data == other._data
        if isinstance(other, (bytes, bytearray, memoryview)):
            return self._data == bytes(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._data)

    def __repr__(self) -> str:
        return f"FontData({len(self._data)} bytes)"