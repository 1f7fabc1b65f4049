from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from .cells import CellBlock, is_number, single_row
from .errors import MalformedSpec


@dataclass(frozen=True)
class Point:
    """2-4 ordinates: x, y, optional z, optional time/measure."""

    x: float
    y: float
    z: Optional[float] = None
    m: Optional[float] = None

    @property
    def dimension(self) -> int:
        if self.m is not None:
            return 4
        return 3 if self.z is not None else 2

    def as_tuple(self) -> Tuple[float, ...]:
        return tuple(v for v in (self.x, self.y, self.z, self.m) if v is not None)

    @classmethod
    def from_row(cls, cells: CellBlock, what: str = "point") -> "Point":
        row = single_row(cells, what, 2, 4)
        for v in row:
            if not is_number(v):
                raise MalformedSpec(what, f"{v!r} is not a number")
        return cls(*(float(v) for v in row))


__all__ = ["Point"]
