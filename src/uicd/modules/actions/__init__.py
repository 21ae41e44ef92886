"""
Action model and playback
"""
from .base import BaseAction
from .click import ClickAction
from .command_line import CommandLineAction
from .condition_click import ConditionClickAction
from .context import ActionContext
from .position_resolver import PositionResolver
from .registry import dump_actions, load_script, parse_action, parse_actions, save_script
from .result import ActionExecutionResult
from .runner import ActionRunner
from .screen_validation import ScreenContentValidationAction, ValidationReqDetails

__all__ = [
    "BaseAction",
    "ClickAction",
    "CommandLineAction",
    "ConditionClickAction",
    "ScreenContentValidationAction",
    "ValidationReqDetails",
    "ActionContext",
    "PositionResolver",
    "ActionExecutionResult",
    "ActionRunner",
    "parse_action",
    "parse_actions",
    "dump_actions",
    "load_script",
    "save_script",
]
