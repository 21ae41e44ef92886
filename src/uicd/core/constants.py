"""
Constants and enum definitions
"""
from enum import Enum


class PlayStatus(str, Enum):
    """Per-device (and per-action) playback outcome"""
    READY = "READY"
    FAIL = "FAIL"
    SUCCESS = "SUCCESS"


class ActionType(str, Enum):
    """Discriminator written into serialized scripts"""
    CLICK = "ClickAction"
    SCREEN_CONTENT_VALIDATION = "ScreenContentValidationAction"
    CONDITION_CLICK = "ConditionClickAction"
    COMMAND_LINE = "CommandLineAction"


class StrategyType(str, Enum):
    """Locator strategies understood by the UI tree matcher"""
    RESOURCEID = "RESOURCEID"
    RESOURCEID_REGEX = "RESOURCEID_REGEX"
    TEXT = "TEXT"
    TEXT_REGEX = "TEXT_REGEX"
    CONTENTDESC = "CONTENTDESC"
    CONTENTDESC_REGEX = "CONTENTDESC_REGEX"
    CLASSNAME = "CLASSNAME"
    XPATH = "XPATH"


class ContentMatchType(str, Enum):
    """What a screen content validation compares against"""
    TEXT = "TEXT"
    TEXT_REGEX = "TEXT_REGEX"
    RESOURCE_ID = "RESOURCE_ID"
    CONTENT_DESC = "CONTENT_DESC"
    CLASS_NAME = "CLASS_NAME"


class StopType(str, Enum):
    """When a validation counts as failed"""
    STOP_TEST_IF_FALSE = "STOP_TEST_IF_FALSE"
    STOP_TEST_IF_TRUE = "STOP_TEST_IF_TRUE"


# Global variables: referenced as $uicd..., stored without the leading "$"
GLOBAL_VARIABLE_PREFIX = "uicd"
GLOBAL_VARIABLE_TOKEN = "$" + GLOBAL_VARIABLE_PREFIX
DEVICE_ID_VARIABLE = "uicd_device_id"

# Marker a command prints in front of a variable-update payload
SHELL_OUTPUT_KEYWORD_LIST = ["uicd_shell_output:"]

# Wire name of the export flag (spelling kept for script compatibility)
EXPORT_FIELD_KEY = "exportFiled"

# Node attributes written by the device-side tree dumper
XML_ATTR_INDEX = "index"
XML_ATTR_TEXT = "text"
XML_ATTR_CLASS = "class"
XML_ATTR_PACKAGE = "package"
XML_ATTR_CONTENT_DESC = "content-desc"
XML_ATTR_CHECKABLE = "checkable"
XML_ATTR_CHECKED = "checked"
XML_ATTR_CLICKABLE = "clickable"
XML_ATTR_ENABLED = "enabled"
XML_ATTR_FOCUSABLE = "focusable"
XML_ATTR_FOCUSED = "focused"
XML_ATTR_SCROLLABLE = "scrollable"
XML_ATTR_LONG_CLICKABLE = "long-clickable"
XML_ATTR_PASSWORD = "password"
XML_ATTR_SELECTED = "selected"
XML_ATTR_BOUNDS = "bounds"
XML_ATTR_RESOURCE_ID = "resource-id"
XML_ATTR_NAF = "NAF"
