"""
Bounded external process execution.

Output is captured combined (stdout + stderr) and split into lines. A process
that outlives its timeout is killed and reported as ExternalCommandError.
"""
from __future__ import annotations

import subprocess
from dataclasses import dataclass, field
from typing import List, Sequence, Union


class ExternalCommandError(RuntimeError):
    """The process could not be started or did not finish in time."""


@dataclass
class CommandResult:
    returncode: int
    lines: List[str] = field(default_factory=list)

    @property
    def output(self) -> str:
        return "\n".join(self.lines)


def run_command(
    command: Union[str, Sequence[str]],
    timeout: float,
    shell: bool = False,
) -> CommandResult:
    try:
        cp = subprocess.run(
            command,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            timeout=timeout,
            shell=shell,
        )
    except FileNotFoundError as e:
        raise ExternalCommandError(f"Executable not found: {command}") from e
    except PermissionError as e:
        raise ExternalCommandError(f"Permission denied: {command}") from e
    except subprocess.TimeoutExpired as e:
        # subprocess.run kills the child before re-raising
        raise ExternalCommandError(f"Command timed out after {timeout}s: {command}") from e
    out = (cp.stdout or b"").decode(errors="ignore")
    return CommandResult(returncode=cp.returncode, lines=out.splitlines())
