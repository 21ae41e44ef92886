"""
Device adapter: the per-device session every action plays against.

Interface:
- device_id()
- click_device(position, is_double_click=False)
- fetch_current_xml(with_class_name=True) -> UiTree
- find_position_by_locator(tree, strategy, selector, width_ratio, height_ratio) -> Position
- width_ratio() / height_ratio()
- capture() -> PNG bytes
- exec_adb(command_line, timeout) -> CommandResult
"""
from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Optional, Tuple

from ...core.config import settings
from ...core.constants import StrategyType
from ...core.logger import logger
from ..xmlparser import Position, UiTree, find_position_by_locator
from .adb import Adb
from .process import CommandResult


@dataclass
class AdapterConfig:
    adb_addr: str
    adb_path: str = ""

    def __post_init__(self) -> None:
        if not self.adb_path:
            self.adb_path = settings.adb_path


class DeviceAdapter:
    def __init__(self, cfg: AdapterConfig) -> None:
        self.cfg = cfg
        self.adb = Adb(cfg.adb_path)
        self.logger = logger.bind(device=cfg.adb_addr, module="DeviceAdapter")
        self._lock = threading.Lock()
        self._physical_size: Optional[Tuple[int, int]] = None
        # declared by the dumper only when it scales its output
        self._logical_size: Optional[Tuple[int, int]] = None
        self._rotation = 0

    def device_id(self) -> str:
        return self.cfg.adb_addr

    # ── geometry ──

    def _ensure_physical_size(self) -> Optional[Tuple[int, int]]:
        with self._lock:
            if self._physical_size is not None:
                return self._physical_size
        size = self.adb.wm_size(self.cfg.adb_addr, timeout=settings.adb_timeout_sec)
        with self._lock:
            self._physical_size = size
        return size

    def _ratios(self) -> Tuple[float, float]:
        with self._lock:
            logical = self._logical_size
            rotation = self._rotation
        if not logical:
            return 1.0, 1.0
        physical = self._ensure_physical_size()
        if not physical:
            return 1.0, 1.0
        # wm size reports the natural (portrait) orientation
        width, height = physical
        if rotation in (1, 3):
            width, height = height, width
        return width / logical[0], height / logical[1]

    def width_ratio(self) -> float:
        return self._ratios()[0]

    def height_ratio(self) -> float:
        return self._ratios()[1]

    # ── input ──

    def click_device(self, position: Position, is_double_click: bool = False) -> None:
        pos = position
        if not pos.is_physical:
            pos = pos.scaled(self.width_ratio(), self.height_ratio())
        x, y = int(round(pos.x)), int(round(pos.y))
        self.logger.info(f"{'Double click' if is_double_click else 'Click'} at ({x}, {y})")
        if is_double_click:
            self.adb.double_tap(self.cfg.adb_addr, x, y, timeout=settings.adb_timeout_sec)
        else:
            self.adb.tap(self.cfg.adb_addr, x, y, timeout=settings.adb_timeout_sec)

    # ── UI tree ──

    def fetch_current_xml(self, with_class_name: bool = True) -> UiTree:
        raw = self.adb.dump_ui(
            self.cfg.adb_addr,
            settings.xml_dump_command,
            timeout=settings.xml_dump_timeout_sec,
        )
        tree = UiTree.parse(raw, with_class_name=with_class_name)
        with self._lock:
            self._logical_size = tree.display_size()
            self._rotation = tree.rotation
        return tree

    def find_position_by_locator(
        self,
        tree: UiTree,
        strategy: StrategyType,
        selector: str,
        width_ratio: float,
        height_ratio: float,
    ) -> Position:
        return find_position_by_locator(tree, strategy, selector, width_ratio, height_ratio)

    # ── screen / commands ──

    def capture(self) -> bytes:
        return self.adb.screencap(self.cfg.adb_addr, timeout=settings.screencap_timeout_sec)

    def exec_adb(self, command_line: str, timeout: float) -> CommandResult:
        return self.adb.exec_command(self.cfg.adb_addr, command_line, timeout=timeout)
