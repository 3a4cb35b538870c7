"""IFT compatibility identifiers."""

from __future__ import annotations

from dataclasses import astuple, dataclass

from iftkit.byte_io import write_uint32

_UINT32_MAX = 0xFFFFFFFF


@dataclass(frozen=True)
class CompatId:
    """A compatibility id made of four unsigned 32 bit values."""

    a: int = 0
    b: int = 0
    c: int = 0
    d: int = 0

    def __post_init__(self) -> None:
        for value in astuple(self):
            if not 0 <= value <= _UINT32_MAX:
                raise ValueError(f"compat id value {value} is not a uint32")

    def to_bytes(self) -> bytes:
        """Serialise as four big-endian uint32 values."""
        return b"".join(write_uint32(value) for value in astuple(self))

    def __str__(self) -> str:
        return "{" + ", ".join(str(value) for value in astuple(self)) + "}"