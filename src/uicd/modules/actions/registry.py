"""
Script (de)serialization.

A script is a JSON list of action objects; ``actionType`` selects the class.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, Any, Iterable, List, Union

from pydantic import Field, TypeAdapter

from .base import BaseAction
from .click import ClickAction
from .command_line import CommandLineAction
from .condition_click import ConditionClickAction
from .screen_validation import ScreenContentValidationAction

AnyAction = Annotated[
    Union[ClickAction, ScreenContentValidationAction, ConditionClickAction, CommandLineAction],
    Field(discriminator="action_type"),
]

_action_adapter: TypeAdapter = TypeAdapter(AnyAction)
_script_adapter: TypeAdapter = TypeAdapter(List[AnyAction])


def parse_action(data: Any) -> BaseAction:
    return _action_adapter.validate_python(data)


def parse_actions(data: Any) -> List[BaseAction]:
    return _script_adapter.validate_python(data)


def dump_actions(actions: Iterable[BaseAction]) -> List[dict]:
    return [action.to_dict() for action in actions]


def load_script(path: Union[str, Path]) -> List[BaseAction]:
    """Load a script file; pydantic.ValidationError on unknown kinds or bad fields."""
    with open(path, "r", encoding="utf-8") as f:
        return parse_actions(json.load(f))


def save_script(path: Union[str, Path], actions: Iterable[BaseAction]) -> None:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    with open(target, "w", encoding="utf-8") as f:
        json.dump(dump_actions(actions), f, ensure_ascii=False, indent=2)
