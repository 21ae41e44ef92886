from .position import Bounds, Position
from .node_context import NodeContext
from .tree import UiTree, UiTreeError, extract_hierarchy, safe_tag
from .locator import find_best_match, find_nodes, find_position_by_locator

__all__ = [
    "Bounds",
    "Position",
    "NodeContext",
    "UiTree",
    "UiTreeError",
    "extract_hierarchy",
    "safe_tag",
    "find_best_match",
    "find_nodes",
    "find_position_by_locator",
]
