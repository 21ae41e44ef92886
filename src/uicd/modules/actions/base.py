"""
Action base class
"""
from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from pydantic import Field

from ...core.constants import ActionType, PlayStatus
from ...core.logger import logger
from ...core.schema import CamelModel
from .context import ActionContext
from .result import ActionExecutionResult

if TYPE_CHECKING:
    from ..emu.adapter import DeviceAdapter


class BaseAction(CamelModel, ABC):
    """Unit of work in a script.

    Variants implement ``play`` and ``update_action``; the remaining
    capabilities have defaults here. Expected failures (target not found,
    validation mismatch) are reported through ``play_status`` and a non-zero
    return from ``play``; only transport and process faults raise.
    """

    action_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str = ""
    action_type: ActionType
    action_description: str = ""
    delay_after_action_ms: int = 0
    play_status: PlayStatus = PlayStatus.READY

    @abstractmethod
    def play(self, device: "DeviceAdapter", context: ActionContext) -> int:
        """
        Perform the action on one device

        Returns:
            0 when the action proceeded normally, non-zero on a local failure
        """

    @abstractmethod
    def update_action(self, other: "BaseAction") -> None:
        """Copy the editable fields of ``other`` into this action, keeping its identity."""

    def validate(self, context: ActionContext, device: "DeviceAdapter") -> bool:
        return True

    def get_display(self) -> str:
        return self.name or self.action_type.value

    def update_common_fields(self, other: "BaseAction") -> None:
        self.name = other.name
        self.action_description = other.action_description
        self.delay_after_action_ms = other.delay_after_action_ms

    def gen_action_execution_results(
        self, device: "DeviceAdapter", context: ActionContext
    ) -> ActionExecutionResult:
        device_id = device.device_id()
        return ActionExecutionResult.regular(
            self.action_id,
            self.play_status,
            context.expand_uicd_global_variable(self.get_display(), device_id) or "",
            action_type=self.action_type.value,
            device_id=device_id,
        )

    def mark_failed(self, device: "DeviceAdapter", context: ActionContext) -> None:
        context.set_fail_status(device.device_id())
        self.play_status = PlayStatus.FAIL

    def bind_logger(self, device_id: str):
        return logger.bind(device=device_id, module=self.action_type.value, action_id=self.action_id)
