"""Outcome record of one action execution."""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Optional

from ...core.constants import PlayStatus


@dataclass(frozen=True)
class ActionExecutionResult:
    action_id: str
    play_status: PlayStatus
    action_type: str = ""
    # inline output, or the path of a logged output artifact plus its display line
    regular_output: Optional[str] = None
    output_path: Optional[str] = None
    display: Optional[str] = None
    device_id: Optional[str] = None

    @classmethod
    def regular(cls, action_id: str, play_status: PlayStatus, output: str, **kwargs) -> "ActionExecutionResult":
        return cls(action_id=action_id, play_status=play_status, regular_output=output, **kwargs)

    @classmethod
    def logged(
        cls, action_id: str, play_status: PlayStatus, output_path: str, display: str, **kwargs
    ) -> "ActionExecutionResult":
        return cls(
            action_id=action_id,
            play_status=play_status,
            output_path=output_path,
            display=display,
            **kwargs,
        )

    @property
    def text(self) -> str:
        """What an operator reads for this step."""
        if self.output_path is not None:
            return f"{self.display or ''} (output: {self.output_path})"
        return self.regular_output or ""

    def to_dict(self) -> dict:
        data = asdict(self)
        data["play_status"] = self.play_status.value
        return data
