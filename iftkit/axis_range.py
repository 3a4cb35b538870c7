"""A closed interval on a variation axis."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AxisRange:
    """A closed range ``[start, end]`` of values on a design axis."""

    start: float = 0.0
    end: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", float(self.start))
        object.__setattr__(self, "end", float(self.end))
        if self.end < self.start:
            raise ValueError(
                f"end ({self.end:g}) is less than start ({self.start:g})"
            )

    @classmethod
    def point(cls, point: float) -> AxisRange:
        """Return a range holding the single value ``point``."""
        return cls(point, point)

    @classmethod
    def range(cls, start: float, end: float) -> AxisRange:
        """Return the range ``[start, end]``; raises ValueError if end < start."""
        return cls(start, end)

    def intersects(self, other: AxisRange) -> bool:
        """True when the two closed ranges share at least one value."""
        return other.end >= self.start and self.end >= other.start

    def is_point(self) -> bool:
        return self.start == self.end

    def is_range(self) -> bool:
        return self.start != self.end

    def __str__(self) -> str:
        return f"[{self.start:g}, {self.end:g}]"