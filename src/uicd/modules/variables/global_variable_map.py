"""
Global variable store shared by every device of a playback run.

Variables are referenced in action parameters as ``$uicd<name>`` and stored
under the name without the leading ``$``. Commands publish updates by
printing a line such as::

    uicd_shell_output:{"$uicd_var1": {"value": "app uicd", "exportFiled": false}}
"""
from __future__ import annotations

import json
import re
import threading
from typing import Dict, Iterable, List, Optional, Tuple

from pydantic import Field

from ...core import constants as c
from ...core.logger import logger
from ...core.schema import CamelModel

_TOKEN_RE = re.compile(r"\$" + re.escape(c.GLOBAL_VARIABLE_PREFIX) + r"[A-Za-z0-9_]*")

_log = logger.bind(module="GlobalVariableMap")


class UicdVariable(CamelModel):
    value: str = ""
    export_field: bool = Field(default=False, alias=c.EXPORT_FIELD_KEY)


def normalize_name(name: str) -> str:
    return name[1:] if name.startswith("$") else name


def is_variable_key(key: str) -> bool:
    """Update keys must be written as ``$uicd...``."""
    return isinstance(key, str) and key.startswith(c.GLOBAL_VARIABLE_TOKEN)


def contains_shell_output_keyword(line: str) -> bool:
    return any(keyword in line for keyword in c.SHELL_OUTPUT_KEYWORD_LIST)


def strip_shell_output_keyword(line: str) -> str:
    for keyword in c.SHELL_OUTPUT_KEYWORD_LIST:
        line = line.replace(keyword, "")
    return line.strip()


def contains_variable_token(text: str) -> bool:
    return c.GLOBAL_VARIABLE_TOKEN in text


class GlobalVariableMap:
    """Thread safe name -> UicdVariable mapping.

    Updates are parsed completely before being applied under the lock, so a
    concurrent ``expand`` sees either none or all of one payload.
    """

    def __init__(self, variables: Optional[Dict[str, str]] = None) -> None:
        self._lock = threading.RLock()
        self._vars: Dict[str, UicdVariable] = {}
        for name, value in (variables or {}).items():
            self.set(name, value)

    def set(self, name: str, value: str, export_field: bool = False) -> None:
        key = normalize_name(name)
        if not key.startswith(c.GLOBAL_VARIABLE_PREFIX):
            raise ValueError(f"Global variable names must start with {c.GLOBAL_VARIABLE_TOKEN}: {name}")
        with self._lock:
            self._vars[key] = UicdVariable(value=str(value), export_field=export_field)

    def get(self, name: str) -> Optional[str]:
        with self._lock:
            var = self._vars.get(normalize_name(name))
        return var.value if var is not None else None

    def get_variable(self, name: str) -> Optional[UicdVariable]:
        with self._lock:
            var = self._vars.get(normalize_name(name))
            return var.model_copy() if var is not None else None

    def remove(self, name: str) -> None:
        with self._lock:
            self._vars.pop(normalize_name(name), None)

    def clear(self) -> None:
        with self._lock:
            self._vars.clear()

    def names(self) -> List[str]:
        with self._lock:
            return list(self._vars)

    def snapshot(self) -> Dict[str, str]:
        with self._lock:
            return {k: v.value for k, v in self._vars.items()}

    def exported(self) -> Dict[str, str]:
        with self._lock:
            return {k: v.value for k, v in self._vars.items() if v.export_field}

    def __contains__(self, name: str) -> bool:
        with self._lock:
            return normalize_name(name) in self._vars

    def __len__(self) -> int:
        with self._lock:
            return len(self._vars)

    # ----- expansion -----

    def expand(self, text: Optional[str], device_id: Optional[str] = None) -> Optional[str]:
        """Replace every known ``$uicd...`` token; unknown tokens stay as written.

        Substituted values are not expanded again.
        """
        if not text or c.GLOBAL_VARIABLE_TOKEN not in text:
            return text
        values = self.snapshot()
        if device_id is not None and c.DEVICE_ID_VARIABLE not in values:
            values[c.DEVICE_ID_VARIABLE] = device_id

        def _replace(match: re.Match) -> str:
            token = match.group(0)
            value = values.get(token[1:])
            return token if value is None else value

        return _TOKEN_RE.sub(_replace, text)

    # ----- capture -----

    def fill_raw_map_by_json_or_plain_str(self, raw: str) -> int:
        """Merge an update payload; returns how many variables were applied.

        The payload is one or more concatenated JSON objects, or the plain form
        ``$uicd_a=1,$uicd_b=2``. Keys without the ``$uicd`` prefix are dropped.
        """
        updates = _parse_json_payload(raw)
        if updates is None:
            updates = _parse_plain_payload(raw)
        if not updates:
            _log.warning(f"Dropped malformed variable payload: {raw}")
            return 0
        with self._lock:
            for key, variable in updates:
                self._vars[normalize_name(key)] = variable
        _log.debug(f"Applied {len(updates)} global variable update(s)")
        return len(updates)

    def capture_shell_output(self, lines: Iterable[str]) -> int:
        """Collect payload lines from command output and merge them."""
        fragments: List[str] = []
        for line in lines:
            if not contains_shell_output_keyword(line):
                continue
            content = strip_shell_output_keyword(line)
            if contains_variable_token(content):
                fragments.append(content)
            else:
                _log.warning(f"Keys should start with {c.GLOBAL_VARIABLE_TOKEN}, instead found {content}")
        if not fragments:
            return 0
        return self.fill_raw_map_by_json_or_plain_str("".join(fragments))

    # ----- persistence -----

    def to_json(self) -> str:
        with self._lock:
            payload = {
                "$" + k: v.model_dump(by_alias=True) for k, v in self._vars.items()
            }
        return json.dumps(payload, ensure_ascii=False)

    @classmethod
    def from_json(cls, raw: str) -> "GlobalVariableMap":
        instance = cls()
        if raw and raw.strip() not in ("", "{}"):
            instance.fill_raw_map_by_json_or_plain_str(raw)
        return instance


def _to_variable(value) -> UicdVariable:
    if isinstance(value, dict):
        return UicdVariable(
            value=str(value.get("value", "")),
            export_field=bool(value.get(c.EXPORT_FIELD_KEY, False)),
        )
    return UicdVariable(value="" if value is None else str(value))


def _accept(key: str) -> bool:
    if is_variable_key(key):
        return True
    _log.warning(f"Ignored global variable update with invalid key: {key}")
    return False


def _parse_json_payload(raw: str) -> Optional[List[Tuple[str, UicdVariable]]]:
    """Decode back-to-back JSON objects; None when the text is not JSON."""
    decoder = json.JSONDecoder()
    text = raw.strip()
    if not text.startswith("{"):
        return None
    updates: List[Tuple[str, UicdVariable]] = []
    pos = 0
    while pos < len(text):
        try:
            obj, end = decoder.raw_decode(text, pos)
        except json.JSONDecodeError:
            if not updates:
                return None
            _log.warning(f"Ignored unparsable tail of variable payload: {text[pos:]}")
            return updates
        if not isinstance(obj, dict):
            return None
        for key, value in obj.items():
            if _accept(key):
                updates.append((key, _to_variable(value)))
        pos = end
        while pos < len(text) and text[pos] in " \t\r\n,":
            pos += 1
    return updates


def _parse_plain_payload(raw: str) -> List[Tuple[str, UicdVariable]]:
    updates: List[Tuple[str, UicdVariable]] = []
    for part in raw.split(","):
        if "=" not in part:
            continue
        key, value = part.split("=", 1)
        key = key.strip()
        if _accept(key):
            updates.append((key, UicdVariable(value=value.strip())))
    return updates
