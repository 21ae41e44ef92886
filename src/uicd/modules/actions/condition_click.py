"""
Conditional click: click the validated node only when the screen matches.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Literal

from ...core.constants import ActionType, PlayStatus
from .context import ActionContext
from .screen_validation import ScreenContentValidationAction

if TYPE_CHECKING:
    from ..emu.adapter import DeviceAdapter


class ConditionClickAction(ScreenContentValidationAction):
    action_type: Literal[ActionType.CONDITION_CLICK] = ActionType.CONDITION_CLICK

    def play(self, device: "DeviceAdapter", context: ActionContext) -> int:
        super().play(device, context)

        found = self.found_node_context
        if self.play_status != PlayStatus.FAIL and found is not None and found.bounds is not None:
            pos = found.bounds.center()
            # A saved snapshot may cover a large area; its center is not precise enough
            if self.saved_node_context is not None:
                pos = pos.offset(self.saved_node_context.relative_pos)
            device.click_device(pos)

        # Whatever happened, the device is re-armed for the next action
        context.remove_status(device.device_id())
        self.play_status = PlayStatus.READY
        return 0
