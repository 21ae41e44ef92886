"""
Action runner

Plays a script on one or more devices. Each device replays its own copy of the
actions on its own I/O thread, while the ActionContext (statuses and global
variables) is shared by all of them.
"""
from __future__ import annotations

import asyncio
import threading
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence

from ...core.config import settings
from ...core.constants import PlayStatus
from ...core.logger import get_device_logger
from ...core.thread_pool import run_in_device_io
from ..emu.adb import AdbError, DeviceConnectionResetError
from ..emu.process import ExternalCommandError
from ..xmlparser import UiTreeError
from .base import BaseAction
from .context import ActionContext
from .result import ActionExecutionResult

if TYPE_CHECKING:
    from ..emu.adapter import DeviceAdapter


class ActionRunner:
    def __init__(
        self,
        context: Optional[ActionContext] = None,
        retry_count: Optional[int] = None,
        stop_on_fail: bool = False,
    ) -> None:
        self.context = context if context is not None else ActionContext()
        self.retry_count = settings.transport_retry_count if retry_count is None else retry_count
        self.stop_on_fail = stop_on_fail
        self._cancel = threading.Event()

    def cancel(self) -> None:
        """Stop every sequence before its next action; running calls finish on their own timeouts."""
        self._cancel.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    def _fail_result(self, action: BaseAction, device: "DeviceAdapter", error: Exception) -> ActionExecutionResult:
        device_id = device.device_id()
        action.mark_failed(device, self.context)
        display = self.context.expand_uicd_global_variable(action.get_display(), device_id) or ""
        return ActionExecutionResult.regular(
            action.action_id,
            PlayStatus.FAIL,
            f"{display}: {error}",
            action_type=action.action_type.value,
            device_id=device_id,
        )

    def play_action(self, action: BaseAction, device: "DeviceAdapter") -> ActionExecutionResult:
        """Play one action and build its result; transport resets are retried."""
        device_id = device.device_id()
        log = get_device_logger(device_id)
        attempts = max(self.retry_count, 0) + 1

        for attempt in range(1, attempts + 1):
            action.play_status = PlayStatus.READY
            try:
                log.info(f"Play {action.action_type.value}: {action.get_display()}")
                action.play(device, self.context)
                break
            except DeviceConnectionResetError as e:
                if attempt < attempts:
                    log.warning(f"Device connection reset, retrying ({attempt}/{attempts - 1}): {e}")
                    continue
                log.error(f"Device connection reset, giving up: {e}")
                return self._fail_result(action, device, e)
            except (AdbError, ExternalCommandError, UiTreeError) as e:
                log.error(f"{action.action_type.value} failed: {e}")
                return self._fail_result(action, device, e)
            except Exception as e:
                log.exception(f"{action.action_type.value} raised unexpectedly: {e}")
                return self._fail_result(action, device, e)

        if action.play_status == PlayStatus.READY:
            action.play_status = PlayStatus.SUCCESS
        return action.gen_action_execution_results(device, self.context)

    def _wait_after(self, action: BaseAction) -> None:
        delay_ms = action.delay_after_action_ms or settings.default_delay_after_action_ms
        if delay_ms > 0:
            self._cancel.wait(delay_ms / 1000.0)

    def play_sequence(self, actions: Sequence[BaseAction], device: "DeviceAdapter") -> List[ActionExecutionResult]:
        device_id = device.device_id()
        log = get_device_logger(device_id)
        results: List[ActionExecutionResult] = []

        for action in actions:
            if self._cancel.is_set():
                log.warning("Playback cancelled")
                break
            result = self.play_action(action, device)
            results.append(result)
            if self.stop_on_fail and self.context.is_failed(device_id):
                log.warning(f"Stopping after failed action: {result.text}")
                break
            self._wait_after(action)

        if self._cancel.is_set():
            # an unfinished sequence keeps whatever status it had
            log.info(f"Playback stopped: {self.context.get_play_status(device_id).value}")
            return results
        self.context.set_success_status(device_id)
        log.info(f"Playback finished: {self.context.get_play_status(device_id).value}")
        return results

    async def play(
        self, actions: Sequence[BaseAction], devices: Sequence["DeviceAdapter"]
    ) -> Dict[str, List[ActionExecutionResult]]:
        """Play the script on every device at once, one I/O thread per device."""

        async def _one(device: "DeviceAdapter") -> List[ActionExecutionResult]:
            copies = [action.model_copy(deep=True) for action in actions]
            return await run_in_device_io(device.device_id(), self.play_sequence, copies, device)

        outcomes = await asyncio.gather(*(_one(device) for device in devices))
        return {device.device_id(): results for device, results in zip(devices, outcomes)}
