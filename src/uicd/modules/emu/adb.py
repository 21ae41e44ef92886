"""
ADB wrapper

Basic device operations on top of the configured adb binary:
- connect(addr) / devices()
- screencap(addr) -> PNG bytes
- tap(addr, x, y)
- dump_ui(addr) -> hierarchy XML
- wm_size(addr) -> (width, height)
- exec_command(addr, command_line, timeout) -> CommandResult
"""
from __future__ import annotations

import re
import shlex
import subprocess
from typing import List, Optional, Tuple

from .process import CommandResult, ExternalCommandError, run_command

# adb client diagnostics for a lost or missing transport
_RESET_PREFIXES = (
    "error: device offline",
    "error: device still authorizing",
    "error: device '",
    "error: no devices/emulators found",
    "error: closed",
    "error: protocol fault",
    "adb: device offline",
)


class AdbError(RuntimeError):
    pass


class DeviceConnectionResetError(AdbError):
    """The device connection dropped mid-call; the whole action may be retried."""


def _is_reset(text: str) -> bool:
    """Whether adb itself reported the transport gone.

    adb prints its diagnostic before any device output or after the stream
    breaks, so only the first and last lines are considered; whatever the
    command itself printed in between is never classified.
    """
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    if not lines:
        return False
    return any(line.startswith(_RESET_PREFIXES) for line in {lines[0], lines[-1]})


class Adb:
    def __init__(self, adb_path: str = "adb") -> None:
        self.adb = adb_path

    def _run(self, args: List[str], timeout: float = 10.0) -> subprocess.CompletedProcess:
        try:
            cp = subprocess.run(
                [self.adb, *args],
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                timeout=timeout,
            )
        except FileNotFoundError as e:
            raise AdbError(f"adb executable not found: {self.adb}") from e
        except subprocess.TimeoutExpired as e:
            raise DeviceConnectionResetError(f"adb timed out after {timeout}s: {' '.join(args)}") from e
        if cp.returncode != 0:
            err = (cp.stderr or b"").decode(errors="ignore")
            if _is_reset(err):
                raise DeviceConnectionResetError(err.strip())
        return cp

    def _check(self, cp: subprocess.CompletedProcess) -> None:
        if cp.returncode != 0:
            raise AdbError((cp.stderr or b"").decode(errors="ignore"))

    def connect(self, addr: str, timeout: float = 10.0) -> bool:
        cp = self._run(["connect", addr], timeout=timeout)
        out = (cp.stdout or b"").decode(errors="ignore").lower()
        return cp.returncode == 0 and ("connected" in out or "already" in out)

    def devices(self, timeout: float = 10.0) -> List[str]:
        cp = self._run(["devices"], timeout=timeout)
        out = (cp.stdout or b"").decode(errors="ignore").splitlines()
        result = []
        for line in out:
            line = line.strip()
            if not line or line.lower().startswith("list of devices"):
                continue
            parts = line.split()
            if len(parts) >= 2 and parts[1] == "device":
                result.append(parts[0])
        return result

    def screencap(self, addr: str, timeout: float = 15.0) -> bytes:
        cp = self._run(["-s", addr, "exec-out", "screencap", "-p"], timeout=timeout)
        self._check(cp)
        return cp.stdout or b""

    def tap(self, addr: str, x: int, y: int, timeout: float = 10.0) -> None:
        cp = self._run(["-s", addr, "shell", "input", "tap", str(x), str(y)], timeout=timeout)
        self._check(cp)

    def double_tap(self, addr: str, x: int, y: int, timeout: float = 10.0) -> None:
        # Both taps in one shell call so the interval stays below the double tap timeout
        cmd = f"input tap {x} {y} && input tap {x} {y}"
        cp = self._run(["-s", addr, "shell", cmd], timeout=timeout)
        self._check(cp)

    def shell(self, addr: str, cmd: str, timeout: float = 10.0) -> tuple[int, str]:
        """Run adb shell, return (returncode, output)."""
        cp = self._run(["-s", addr, "shell", cmd], timeout=timeout)
        out = (cp.stdout or b"").decode(errors="ignore")
        return cp.returncode, out

    def dump_ui(self, addr: str, command: str, timeout: float = 30.0) -> str:
        cp = self._run(["-s", addr, *shlex.split(command)], timeout=timeout)
        self._check(cp)
        return (cp.stdout or b"").decode("utf-8", errors="replace")

    def wm_size(self, addr: str, timeout: float = 10.0) -> Optional[Tuple[int, int]]:
        """Physical display size; an override size wins when set."""
        code, out = self.shell(addr, "wm size", timeout=timeout)
        if code != 0:
            return None
        size = None
        for line in out.splitlines():
            m = re.search(r"(\d+)x(\d+)", line)
            if not m:
                continue
            size = (int(m.group(1)), int(m.group(2)))
            if "override" in line.lower():
                break
        return size

    def exec_command(self, addr: str, command_line: str, timeout: float) -> CommandResult:
        """Run ``adb -s <addr> <command_line>`` with combined output.

        A timeout or a missing adb binary is an ExternalCommandError; the exit
        code is returned but carries no reliable meaning for shell commands.
        """
        args = [self.adb, "-s", addr, *shlex.split(command_line)]
        result = run_command(args, timeout=timeout)
        if result.returncode != 0 and _is_reset(result.output):
            raise DeviceConnectionResetError(result.output.strip())
        return result


__all__ = [
    "Adb",
    "AdbError",
    "DeviceConnectionResetError",
    "ExternalCommandError",
]
