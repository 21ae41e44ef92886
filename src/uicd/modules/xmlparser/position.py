"""Screen coordinates and node bounds."""
from __future__ import annotations

import re
from typing import Optional

from pydantic import Field

from ...core.schema import CamelModel

_BOUNDS_RE = re.compile(r"\[(-?\d+),(-?\d+)\]\[(-?\d+),(-?\d+)\]")


class Position(CamelModel):
    """A point on screen.

    ``is_physical`` distinguishes device pixels from UI tree (logical) pixels;
    logical positions are scaled by the device ratios before a tap.
    """

    x: float = -1
    y: float = -1
    is_physical: bool = Field(default=False, alias="isPhysicalPos")

    @classmethod
    def invalid(cls) -> "Position":
        return cls(x=-1, y=-1)

    def is_valid(self) -> bool:
        return self.x >= 0 and self.y >= 0

    def offset(self, relative: Optional["Position"]) -> "Position":
        """Shift by a relative offset; the physical flag is kept."""
        if relative is None:
            return self.model_copy()
        return Position(x=self.x + relative.x, y=self.y + relative.y, is_physical=self.is_physical)

    def scaled(self, width_ratio: float, height_ratio: float) -> "Position":
        """Convert a logical position to device pixels."""
        return Position(x=self.x * width_ratio, y=self.y * height_ratio, is_physical=True)

    def __str__(self) -> str:
        return f"({self.x:g}, {self.y:g})"


class Bounds(CamelModel):
    left: int = 0
    top: int = 0
    right: int = 0
    bottom: int = 0

    @classmethod
    def from_string(cls, text: Optional[str]) -> Optional["Bounds"]:
        """Parse the dumper's ``[l,t][r,b]`` notation."""
        match = _BOUNDS_RE.search(text or "")
        if not match:
            return None
        left, top, right, bottom = (int(v) for v in match.groups())
        return cls(left=left, top=top, right=right, bottom=bottom)

    def to_short_string(self) -> str:
        return f"[{self.left},{self.top}][{self.right},{self.bottom}]"

    @property
    def width(self) -> int:
        return self.right - self.left

    @property
    def height(self) -> int:
        return self.bottom - self.top

    def center(self) -> Position:
        return Position(x=(self.left + self.right) / 2, y=(self.top + self.bottom) / 2)

    def contains(self, pos: Position) -> bool:
        return self.left <= pos.x <= self.right and self.top <= pos.y <= self.bottom

    def __str__(self) -> str:
        return self.to_short_string()
