"""OCR result data structures."""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..xmlparser.position import Position


@dataclass
class OcrBox:
    """A single recognized text region."""

    text: str
    confidence: float
    # Four corner points [(x1,y1), (x2,y2), (x3,y3), (x4,y4)] in screenshot pixels
    box: List[Tuple[int, int]]

    @property
    def center(self) -> Tuple[int, int]:
        xs = [p[0] for p in self.box]
        ys = [p[1] for p in self.box]
        return (sum(xs) // len(xs), sum(ys) // len(ys))

    def position(self) -> Position:
        """Box center as a device-pixel Position (screenshots are physical)."""
        if not self.box:
            return Position.invalid()
        x, y = self.center
        return Position(x=x, y=y, is_physical=True)


@dataclass
class OcrResult:
    boxes: List[OcrBox]

    def find(self, keyword: str) -> Optional[OcrBox]:
        """Exact match first, then the most confident box containing the keyword."""
        for b in self.boxes:
            if b.text == keyword:
                return b
        partial = [b for b in self.boxes if keyword in b.text]
        if not partial:
            return None
        return max(partial, key=lambda b: b.confidence)
