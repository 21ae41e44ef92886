from .global_variable_map import (
    GlobalVariableMap,
    UicdVariable,
    contains_shell_output_keyword,
    is_variable_key,
)

__all__ = [
    "GlobalVariableMap",
    "UicdVariable",
    "contains_shell_output_keyword",
    "is_variable_key",
]
