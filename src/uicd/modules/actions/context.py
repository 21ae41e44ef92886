"""
Per-run playback state shared by every device of the run.
"""
from __future__ import annotations

import threading
from typing import Dict, Optional

from ...core.constants import PlayStatus
from ..variables import GlobalVariableMap


class ActionContext:
    """Device id -> PlayStatus table plus the run's GlobalVariableMap.

    A device is READY until an action fails it. FAIL sticks until an action
    explicitly clears it (only ConditionClickAction does so).
    """

    def __init__(self, global_variable_map: Optional[GlobalVariableMap] = None) -> None:
        self._lock = threading.Lock()
        self._status: Dict[str, PlayStatus] = {}
        self._variables = global_variable_map if global_variable_map is not None else GlobalVariableMap()

    @property
    def global_variable_map(self) -> GlobalVariableMap:
        return self._variables

    def get_play_status(self, device_id: str) -> PlayStatus:
        with self._lock:
            return self._status.get(device_id, PlayStatus.READY)

    def set_fail_status(self, device_id: str) -> None:
        with self._lock:
            self._status[device_id] = PlayStatus.FAIL

    def set_success_status(self, device_id: str) -> None:
        """Mark a finished device; a failed device stays failed."""
        with self._lock:
            if self._status.get(device_id) != PlayStatus.FAIL:
                self._status[device_id] = PlayStatus.SUCCESS

    def remove_status(self, device_id: str) -> None:
        """Clear whatever was recorded; the device is READY again."""
        with self._lock:
            self._status.pop(device_id, None)

    def is_failed(self, device_id: str) -> bool:
        return self.get_play_status(device_id) == PlayStatus.FAIL

    def statuses(self) -> Dict[str, PlayStatus]:
        with self._lock:
            return dict(self._status)

    def reset(self) -> None:
        with self._lock:
            self._status.clear()

    def expand_uicd_global_variable(self, text: Optional[str], device_id: str) -> Optional[str]:
        return self._variables.expand(text, device_id)
