"""
Locator strategies over a UI tree snapshot.

- find_nodes(tree, strategy, selector): matching elements, document order
- find_position_by_locator(...): device-pixel center of the first match
- find_best_match(tree, node_context): node that best fits a saved snapshot
"""
from __future__ import annotations

import re
from typing import Callable, Dict, List, Optional, Tuple
from xml.etree.ElementTree import Element

from ...core import constants as c
from ...core.constants import StrategyType
from ...core.logger import logger
from .node_context import NodeContext
from .position import Bounds, Position
from .tree import UiTree

_log = logger.bind(module="locator")


def _attr_equals(attr: str) -> Callable[[Element, str], bool]:
    def _match(element: Element, selector: str) -> bool:
        return element.get(attr, "") == selector
    return _match


def _attr_regex(attr: str) -> Callable[[Element, str], bool]:
    def _match(element: Element, selector: str) -> bool:
        try:
            return re.fullmatch(selector, element.get(attr, "")) is not None
        except re.error:
            return False
    return _match


_ATTRIBUTE_STRATEGIES: Dict[StrategyType, Callable[[Element, str], bool]] = {
    StrategyType.RESOURCEID: _attr_equals(c.XML_ATTR_RESOURCE_ID),
    StrategyType.RESOURCEID_REGEX: _attr_regex(c.XML_ATTR_RESOURCE_ID),
    StrategyType.TEXT: _attr_equals(c.XML_ATTR_TEXT),
    StrategyType.TEXT_REGEX: _attr_regex(c.XML_ATTR_TEXT),
    StrategyType.CONTENTDESC: _attr_equals(c.XML_ATTR_CONTENT_DESC),
    StrategyType.CONTENTDESC_REGEX: _attr_regex(c.XML_ATTR_CONTENT_DESC),
    StrategyType.CLASSNAME: _attr_equals(c.XML_ATTR_CLASS),
}


def _xpath_to_etree(selector: str) -> str:
    """ElementTree only evaluates paths relative to the root element."""
    if selector.startswith("//"):
        return "." + selector
    if selector.startswith("/"):
        path = selector
        if path.startswith("/hierarchy"):
            path = path[len("/hierarchy"):]
        return "." + path if path else "."
    return selector


def _find_by_xpath(tree: UiTree, selector: str) -> List[Element]:
    try:
        found = tree.root.findall(_xpath_to_etree(selector))
    except (SyntaxError, KeyError) as e:
        _log.warning(f"Unsupported xpath '{selector}': {e}")
        return []
    return [el for el in found if el.get(c.XML_ATTR_BOUNDS) is not None]


def find_nodes(tree: UiTree, strategy: StrategyType, selector: str) -> List[Element]:
    if not selector:
        return []
    strategy = StrategyType(strategy)
    if strategy == StrategyType.XPATH:
        return _find_by_xpath(tree, selector)
    matcher = _ATTRIBUTE_STRATEGIES[strategy]
    return [el for el in tree.nodes() if matcher(el, selector)]


def element_bounds(element: Element) -> Optional[Bounds]:
    return Bounds.from_string(element.get(c.XML_ATTR_BOUNDS))


def find_position_by_locator(
    tree: UiTree,
    strategy: StrategyType,
    selector: str,
    width_ratio: float,
    height_ratio: float,
) -> Position:
    """Center of the first matching node in device pixels, or the invalid sentinel."""
    for element in find_nodes(tree, strategy, selector):
        bounds = element_bounds(element)
        if bounds is None:
            continue
        return bounds.center().scaled(width_ratio, height_ratio)
    return Position.invalid()


def _match_score(element: Element, ctx: NodeContext) -> int:
    score = 0
    if ctx.resource_id and element.get(c.XML_ATTR_RESOURCE_ID, "") == ctx.resource_id:
        score += 4
    if ctx.text and element.get(c.XML_ATTR_TEXT, "") == ctx.text:
        score += 3
    if ctx.content_desc and element.get(c.XML_ATTR_CONTENT_DESC, "") == ctx.content_desc:
        score += 3
    if score and ctx.class_name and element.get(c.XML_ATTR_CLASS, "") == ctx.class_name:
        score += 1
    return score


def _distance(a: Position, b: Position) -> float:
    return (a.x - b.x) ** 2 + (a.y - b.y) ** 2


def find_best_match(tree: UiTree, ctx: NodeContext) -> Optional[Tuple[Element, Bounds]]:
    """Find the node a saved NodeContext refers to on the current screen.

    Identity attributes (resource-id, text, content-desc) decide; ties go to
    the node closest to where the snapshot was taken. A snapshot without any
    identity only matches a node with exactly the same bounds.
    """
    saved_center = ctx.bounds.center() if ctx.bounds else None
    best: Optional[Tuple[int, float, Element, Bounds]] = None
    for element in tree.nodes():
        bounds = element_bounds(element)
        if bounds is None:
            continue
        if ctx.has_identity():
            score = _match_score(element, ctx)
        else:
            score = 1 if ctx.bounds is not None and bounds == ctx.bounds else 0
        if score <= 0:
            continue
        dist = _distance(bounds.center(), saved_center) if saved_center else 0.0
        if best is None or score > best[0] or (score == best[0] and dist < best[1]):
            best = (score, dist, element, bounds)
    if best is None:
        return None
    return best[2], best[3]
