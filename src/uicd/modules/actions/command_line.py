"""
Command line action: a local process or an adb command.

Output lines carrying ``uicd_shell_output:`` publish global variables, e.g.::

    uicd_shell_output:{"$uicd_var1": {"value": "app uicd", "exportFiled": false}}
"""
from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, List, Literal, Optional

from pydantic import PrivateAttr

from ...core.config import settings
from ...core.constants import ActionType, PlayStatus
from ..emu.process import CommandResult, run_command
from .base import BaseAction
from .context import ActionContext
from .result import ActionExecutionResult

if TYPE_CHECKING:
    from ..emu.adapter import DeviceAdapter


class CommandLineAction(BaseAction):
    action_type: Literal[ActionType.COMMAND_LINE] = ActionType.COMMAND_LINE
    command_line: Optional[str] = None
    is_adb_command: bool = False
    log_output: bool = False
    # compared as a string: "007" does not match an exit code of 7
    expected_return_code: Optional[str] = None
    commandline_execution_timeout_sec: Optional[int] = None
    need_shell_output: bool = True

    _exit_value: Optional[str] = PrivateAttr(default=None)
    _output_path: Optional[str] = PrivateAttr(default=None)
    _output: List[str] = PrivateAttr(default_factory=list)

    @classmethod
    def create(
        cls,
        command_line: str,
        is_adb_command: bool = False,
        expected_return_code: Optional[str] = None,
        timeout_sec: Optional[int] = None,
        need_shell_output: bool = True,
        log_output: bool = False,
    ) -> "CommandLineAction":
        return cls(
            name=command_line,
            command_line=command_line,
            is_adb_command=is_adb_command,
            expected_return_code=expected_return_code,
            commandline_execution_timeout_sec=timeout_sec,
            need_shell_output=need_shell_output,
            log_output=log_output,
        )

    @property
    def exit_value(self) -> Optional[str]:
        return self._exit_value

    @exit_value.setter
    def exit_value(self, value: Optional[str]) -> None:
        self._exit_value = value

    @property
    def output(self) -> List[str]:
        return list(self._output)

    @property
    def output_path(self) -> Optional[str]:
        return self._output_path

    def get_display(self) -> str:
        return "None" if self.command_line is None else self.command_line

    def update_action(self, other: BaseAction) -> None:
        self.update_common_fields(other)
        if isinstance(other, CommandLineAction):
            self.command_line = other.command_line
            self.expected_return_code = other.expected_return_code
            self.commandline_execution_timeout_sec = other.commandline_execution_timeout_sec
            self.need_shell_output = other.need_shell_output
            self.is_adb_command = other.is_adb_command
            self.log_output = other.log_output

    def _timeout(self) -> int:
        return self.commandline_execution_timeout_sec or settings.command_timeout_sec

    def _execute(self, device: "DeviceAdapter", command: str) -> CommandResult:
        if self.is_adb_command:
            return device.exec_adb(command, timeout=self._timeout())
        return run_command(command, timeout=self._timeout(), shell=True)

    def _write_output(self, device_id: str, command: str, lines: List[str]) -> str:
        out_dir = Path(settings.output_dir) / device_id.replace(":", "_").replace("/", "_")
        out_dir.mkdir(parents=True, exist_ok=True)
        path = out_dir / f"{self.action_id}.log"
        path.write_text("\n".join([f"$ {command}", *lines]) + "\n", encoding="utf-8")
        return str(path)

    def play(self, device: "DeviceAdapter", context: ActionContext) -> int:
        device_id = device.device_id()
        log = self.bind_logger(device_id)
        command = context.expand_uicd_global_variable(self.command_line, device_id) or ""

        result = self._execute(device, command)
        self._output = result.lines
        code = 0
        if self.is_adb_command:
            # adb does not relay the remote exit status reliably
            self._exit_value = None
        else:
            self._exit_value = str(result.returncode)
            if not self.validate(context, device):
                log.warning(
                    f"Exit code {self._exit_value} does not match expected {self.expected_return_code}: {command}"
                )
                self.mark_failed(device, context)
                code = -1

        for line in result.lines:
            log.info(line)
        if self.log_output:
            self._output_path = self._write_output(device_id, command, result.lines)
        if self.need_shell_output:
            context.global_variable_map.capture_shell_output(result.lines)
        return code

    def validate(self, context: ActionContext, device: "DeviceAdapter") -> bool:
        if self.expected_return_code is None or len(self.expected_return_code) == 0:
            return True
        return self._exit_value == self.expected_return_code

    def gen_action_execution_results(
        self, device: "DeviceAdapter", context: ActionContext
    ) -> ActionExecutionResult:
        device_id = device.device_id()
        display = context.expand_uicd_global_variable(self.command_line, device_id) or self.get_display()
        if self.play_status == PlayStatus.FAIL and self.expected_return_code:
            display = f"{display} (expected return code: {self.expected_return_code}, actual: {self._exit_value})"
        if self.log_output and self._output_path:
            return ActionExecutionResult.logged(
                self.action_id,
                self.play_status,
                self._output_path,
                display,
                action_type=self.action_type.value,
                device_id=device_id,
            )
        return ActionExecutionResult.regular(
            self.action_id,
            self.play_status,
            display,
            action_type=self.action_type.value,
            device_id=device_id,
        )
