"""
UI tree snapshot parsing.

The device-side dumper writes a ``<hierarchy>`` document whose node elements
carry ``text``, ``class``, ``content-desc``, ``resource-id``, ``bounds`` and
the boolean state attributes. When dumped with class names, each element's tag
is the node class name with punctuation stripped instead of ``node``.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple
from xml.etree import ElementTree as ET

from ...core import constants as c

_HIERARCHY_RE = re.compile(r"<hierarchy[^>]*>.*</hierarchy>", re.DOTALL)
_UNSAFE_TAG_CHARS = re.compile(r"[!@#$%^&*(),.?\":{}|<>]")


class UiTreeError(ValueError):
    """The dump could not be parsed as a UI hierarchy."""


def extract_hierarchy(xml_text: Optional[str]) -> Optional[str]:
    """Cut the ``<hierarchy>`` document out of raw command output."""
    if not xml_text:
        return None
    xml_text = xml_text.replace("\x00", "")
    match = _HIERARCHY_RE.search(xml_text)
    if not match:
        return None
    return match.group(0).strip()


def safe_tag(class_name: Optional[str]) -> str:
    tag = _UNSAFE_TAG_CHARS.sub("", class_name or "")
    return tag or "node"


@dataclass
class UiTree:
    """Parsed snapshot of the current screen."""

    root: ET.Element
    with_class_name: bool = False

    @classmethod
    def parse(cls, xml_text: str, with_class_name: bool = False) -> "UiTree":
        document = extract_hierarchy(xml_text)
        if document is None:
            raise UiTreeError("no <hierarchy> element in dump")
        try:
            root = ET.fromstring(document)
        except ET.ParseError as e:
            raise UiTreeError(f"malformed UI dump: {e}") from e
        if with_class_name:
            for element in root.iter():
                if element is root:
                    continue
                if element.tag == "node" and element.get(c.XML_ATTR_CLASS):
                    element.tag = safe_tag(element.get(c.XML_ATTR_CLASS))
        return cls(root=root, with_class_name=with_class_name)

    def nodes(self) -> Iterator[ET.Element]:
        """All node elements (anything carrying bounds), document order."""
        for element in self.root.iter():
            if element is self.root:
                continue
            if element.get(c.XML_ATTR_BOUNDS) is not None:
                yield element

    def node_list(self) -> List[ET.Element]:
        return list(self.nodes())

    @property
    def rotation(self) -> int:
        """Display rotation the dump was taken in (0-3, quarter turns)."""
        try:
            return int(self.root.get("rotation", "0")) % 4
        except ValueError:
            return 0

    def display_size(self) -> Optional[Tuple[int, int]]:
        """Size of the coordinate space the dumper reported, if it did.

        Node bounds are screen pixels in the current orientation; only a
        dumper that scales its output declares its own width and height.
        """
        try:
            width = int(self.root.get("width", "0"))
            height = int(self.root.get("height", "0"))
        except ValueError:
            return None
        if width <= 0 or height <= 0:
            return None
        return width, height
