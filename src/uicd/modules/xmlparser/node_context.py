"""Captured description of a located UI element."""
from __future__ import annotations

from typing import Optional
from xml.etree.ElementTree import Element

from pydantic import Field

from ...core import constants as c
from ...core.schema import CamelModel
from .position import Bounds, Position


class NodeContext(CamelModel):
    """Snapshot of a node taken at authoring time.

    The saved bounds are not guaranteed to be tight around the element, so a
    click is replayed as the matched node's center plus ``relative_pos``
    rather than the plain center.
    """

    bounds: Optional[Bounds] = None
    relative_pos: Position = Field(default_factory=lambda: Position(x=0, y=0))
    clicked_pos: Position = Field(default_factory=Position.invalid)
    text: str = ""
    content_desc: str = ""
    resource_id: str = ""
    class_name: str = ""

    @classmethod
    def from_element(cls, element: Element, clicked_pos: Optional[Position] = None) -> "NodeContext":
        bounds = Bounds.from_string(element.get(c.XML_ATTR_BOUNDS))
        ctx = cls(
            bounds=bounds,
            text=element.get(c.XML_ATTR_TEXT, ""),
            content_desc=element.get(c.XML_ATTR_CONTENT_DESC, ""),
            resource_id=element.get(c.XML_ATTR_RESOURCE_ID, ""),
            class_name=element.get(c.XML_ATTR_CLASS, ""),
        )
        if clicked_pos is not None:
            ctx.clicked_pos = clicked_pos
            if bounds is not None:
                center = bounds.center()
                ctx.relative_pos = Position(x=clicked_pos.x - center.x, y=clicked_pos.y - center.y)
        return ctx

    def has_identity(self) -> bool:
        return bool(self.text or self.content_desc or self.resource_id)

    def display_estimate(self) -> str:
        """Best human readable name for the node."""
        for value in (self.text, self.content_desc, self.resource_id, self.class_name):
            if value:
                return value
        return str(self.bounds) if self.bounds else ""
