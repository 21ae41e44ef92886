"""
Screen content validation: checks that the current screen does (or does not)
show a node matching some text, id, description or class.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Literal, Optional

from pydantic import Field, PrivateAttr

from ...core.constants import ActionType, ContentMatchType, PlayStatus, StopType, StrategyType
from ...core.schema import CamelModel
from ..xmlparser import Bounds, NodeContext, UiTree, find_best_match, find_nodes
from ..xmlparser.locator import element_bounds
from .base import BaseAction
from .context import ActionContext
from .result import ActionExecutionResult

if TYPE_CHECKING:
    from ..emu.adapter import DeviceAdapter

_MATCH_STRATEGY = {
    ContentMatchType.TEXT: StrategyType.TEXT,
    ContentMatchType.TEXT_REGEX: StrategyType.TEXT_REGEX,
    ContentMatchType.RESOURCE_ID: StrategyType.RESOURCEID,
    ContentMatchType.CONTENT_DESC: StrategyType.CONTENTDESC,
    ContentMatchType.CLASS_NAME: StrategyType.CLASSNAME,
}


class ValidationReqDetails(CamelModel):
    content_match_type: ContentMatchType = ContentMatchType.TEXT
    text_value: str = ""
    # only nodes whose center lies inside this area count
    bounds: Optional[Bounds] = None
    stop_type: StopType = StopType.STOP_TEST_IF_FALSE


class ScreenContentValidationAction(BaseAction):
    action_type: Literal[ActionType.SCREEN_CONTENT_VALIDATION] = ActionType.SCREEN_CONTENT_VALIDATION
    validation_req_details: ValidationReqDetails = Field(default_factory=ValidationReqDetails)
    saved_node_context: Optional[NodeContext] = None

    _found_node_context: Optional[NodeContext] = PrivateAttr(default=None)
    _expected: str = PrivateAttr(default="")

    @property
    def found_node_context(self) -> Optional[NodeContext]:
        return self._found_node_context

    def update_action(self, other: BaseAction) -> None:
        self.update_common_fields(other)
        if isinstance(other, ScreenContentValidationAction):
            self.validation_req_details = other.validation_req_details.model_copy(deep=True)
            if other.saved_node_context is not None:
                self.saved_node_context = other.saved_node_context.model_copy(deep=True)

    def get_display(self) -> str:
        details = self.validation_req_details
        target = details.text_value or (
            self.saved_node_context.display_estimate() if self.saved_node_context else ""
        )
        return f"{details.content_match_type.value}: {target}"

    def _find_node(self, tree: UiTree, expected: str) -> Optional[NodeContext]:
        details = self.validation_req_details
        if not expected and self.saved_node_context is not None:
            match = find_best_match(tree, self.saved_node_context)
            return NodeContext.from_element(match[0]) if match else None
        for element in find_nodes(tree, _MATCH_STRATEGY[details.content_match_type], expected):
            bounds = element_bounds(element)
            if bounds is None:
                continue
            if details.bounds is not None and not details.bounds.contains(bounds.center()):
                continue
            return NodeContext.from_element(element)
        return None

    def play(self, device: "DeviceAdapter", context: ActionContext) -> int:
        device_id = device.device_id()
        self._expected = context.expand_uicd_global_variable(
            self.validation_req_details.text_value, device_id
        ) or ""
        tree = device.fetch_current_xml(with_class_name=False)
        self._found_node_context = self._find_node(tree, self._expected)
        if not self.validate(context, device):
            self.bind_logger(device_id).info(f"Screen validation failed: {self.get_display()}")
            self.mark_failed(device, context)
            return -1
        return 0

    def validate(self, context: ActionContext, device: "DeviceAdapter") -> bool:
        found = self._found_node_context is not None
        if self.validation_req_details.stop_type == StopType.STOP_TEST_IF_TRUE:
            return not found
        return found

    def gen_action_execution_results(
        self, device: "DeviceAdapter", context: ActionContext
    ) -> ActionExecutionResult:
        if self.play_status != PlayStatus.FAIL:
            return super().gen_action_execution_results(device, context)
        details = self.validation_req_details
        expected = self._expected or self.get_display()
        if details.stop_type == StopType.STOP_TEST_IF_TRUE:
            message = f"Found unexpected {details.content_match_type.value} on screen: '{expected}'"
        else:
            message = f"Can not find {details.content_match_type.value} on screen, looking for: '{expected}'"
        return ActionExecutionResult.regular(
            self.action_id,
            self.play_status,
            message,
            action_type=self.action_type.value,
            device_id=device.device_id(),
        )
