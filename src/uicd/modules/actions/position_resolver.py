"""
Turns an action's target description into a screen position.

Strategies:
- locator: strategy + selector against the current UI tree (device pixels)
- ocr: selector text on a fresh screenshot (device pixels)
- snapshot: a saved NodeContext re-found in the current tree, clicked at its
  center plus the saved relative offset (tree pixels)
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Optional

from ...core.constants import StrategyType
from ...core.logger import logger
from ..ocr.recognize import find_text_position
from ..xmlparser import NodeContext, Position, find_best_match

if TYPE_CHECKING:
    from ..emu.adapter import DeviceAdapter

OcrFinder = Callable[[bytes, str], Position]


class PositionResolver:
    def __init__(self, ocr_finder: Optional[OcrFinder] = None) -> None:
        self._ocr_finder = ocr_finder

    def by_locator(self, device: "DeviceAdapter", strategy: StrategyType, selector: str) -> Position:
        tree = device.fetch_current_xml(with_class_name=True)
        return device.find_position_by_locator(
            tree,
            strategy,
            selector,
            device.width_ratio(),
            device.height_ratio(),
        )

    def by_ocr(self, device: "DeviceAdapter", text: str) -> Position:
        finder = self._ocr_finder or find_text_position
        screenshot = device.capture()
        pos = finder(screenshot, text)
        logger.bind(device=device.device_id()).info(
            f"Position from ocr engine for '{text}': {pos}"
        )
        return pos

    def by_locator_or_ocr(self, device: "DeviceAdapter", strategy: StrategyType, selector: str) -> Position:
        pos = self.by_locator(device, strategy, selector)
        if pos.is_valid():
            return pos
        pos = self.by_ocr(device, selector)
        logger.bind(device=device.device_id()).info(f"Fallback to ocr engine: {pos}")
        return pos

    def by_snapshot(self, device: "DeviceAdapter", node_context: Optional[NodeContext]) -> Position:
        if node_context is None:
            return Position.invalid()
        tree = device.fetch_current_xml(with_class_name=False)
        match = find_best_match(tree, node_context)
        if match is None:
            return Position.invalid()
        _, bounds = match
        return bounds.center().offset(node_context.relative_pos)
