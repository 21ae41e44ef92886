"""
Click action
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Literal, Optional

from pydantic import Field, PrivateAttr

from ...core.constants import ActionType, PlayStatus, StrategyType
from ..xmlparser import NodeContext, Position
from .base import BaseAction
from .context import ActionContext
from .position_resolver import PositionResolver
from .result import ActionExecutionResult

if TYPE_CHECKING:
    from ..emu.adapter import DeviceAdapter


class ClickAction(BaseAction):
    """Click by raw position, by locator, by OCR, or by a saved node snapshot."""

    action_type: Literal[ActionType.CLICK] = ActionType.CLICK
    node_context: Optional[NodeContext] = None
    is_raw_xy: bool = Field(default=False, alias="isRawXY")
    is_double_click: bool = False
    # Legacy scripts skip the step when nothing is found; new clicks fail fast
    fail_test_if_not_found: bool = False
    is_by_element: bool = False
    is_ocr_mode: bool = False
    strategy: Optional[StrategyType] = None
    selector: Optional[str] = None

    _resolver: Optional[PositionResolver] = PrivateAttr(default=None)
    _looking_for: str = PrivateAttr(default="")

    @classmethod
    def from_node_context(cls, node_context: Optional[NodeContext], is_double_click: bool = False) -> "ClickAction":
        action = cls(node_context=node_context, is_double_click=is_double_click, fail_test_if_not_found=True)
        if node_context is not None:
            action.name = node_context.display_estimate()
        return action

    @classmethod
    def raw_xy(cls, x: float, y: float, is_double_click: bool = False) -> "ClickAction":
        ctx = NodeContext(clicked_pos=Position(x=x, y=y, is_physical=True))
        return cls(node_context=ctx, is_raw_xy=True, is_double_click=is_double_click, fail_test_if_not_found=True)

    @classmethod
    def by_element(
        cls, strategy: StrategyType, selector: str, fail_test_if_not_found: bool = True
    ) -> "ClickAction":
        return cls(
            strategy=strategy,
            selector=selector,
            is_by_element=True,
            fail_test_if_not_found=fail_test_if_not_found,
        )

    @classmethod
    def by_ocr(cls, selector: str, fail_test_if_not_found: bool = True) -> "ClickAction":
        return cls(
            strategy=StrategyType.TEXT,
            selector=selector,
            is_ocr_mode=True,
            fail_test_if_not_found=fail_test_if_not_found,
        )

    def set_resolver(self, resolver: PositionResolver) -> None:
        self._resolver = resolver

    def update_action(self, other: BaseAction) -> None:
        self.update_common_fields(other)
        if isinstance(other, ClickAction):
            self.is_raw_xy = other.is_raw_xy
            self.is_double_click = other.is_double_click
            self.strategy = other.strategy
            self.selector = other.selector
            self.is_by_element = other.is_by_element
            self.is_ocr_mode = other.is_ocr_mode
            if other.node_context is not None:
                self.node_context = other.node_context.model_copy(deep=True)
            # an edited click always opts into failing fast
            self.fail_test_if_not_found = True

    def get_display(self) -> str:
        if self.is_double_click:
            return "Double Click"
        strategy = self.strategy.value if self.strategy else ""
        if self.is_ocr_mode:
            return f"{strategy}(OCR mode) - {self.selector}"
        if self.is_by_element:
            return f"Click by {strategy} - {self.selector}"
        clicked_pos = ""
        if self.node_context is not None and self.node_context.clicked_pos.is_valid():
            clicked_pos = str(self.node_context.clicked_pos)
        if self.is_raw_xy:
            return clicked_pos
        if not clicked_pos:
            return f"Click Action, {self.selector}"
        return f"{self.name}, {clicked_pos}"

    def _target_description(self, expanded_selector: Optional[str]) -> str:
        if self.is_ocr_mode or self.is_by_element:
            return expanded_selector or ""
        if self.is_raw_xy and self.node_context is not None:
            return str(self.node_context.clicked_pos)
        if self.node_context is not None:
            return self.node_context.display_estimate()
        return self.selector or ""

    def _resolve(self, device: "DeviceAdapter", selector: str) -> Position:
        resolver = self._resolver or PositionResolver()
        if self.is_ocr_mode:
            return resolver.by_ocr(device, selector)
        if self.is_by_element:
            return resolver.by_locator_or_ocr(device, self.strategy or StrategyType.TEXT, selector)
        return resolver.by_snapshot(device, self.node_context)

    def play(self, device: "DeviceAdapter", context: ActionContext) -> int:
        device_id = device.device_id()
        log = self.bind_logger(device_id)

        if self.is_raw_xy:
            if self.node_context is None or not self.node_context.clicked_pos.is_valid():
                pos = Position.invalid()
            else:
                pos = self.node_context.clicked_pos.model_copy(update={"is_physical": True})
            self._looking_for = self._target_description(None)
        else:
            selector = context.expand_uicd_global_variable(self.selector, device_id) or ""
            self._looking_for = self._target_description(selector)
            pos = self._resolve(device, selector)

        if not pos.is_valid():
            if self.fail_test_if_not_found:
                log.warning(f"Element not found, failing: '{self._looking_for}'")
                self.mark_failed(device, context)
                return -1
            log.warning(f"Element not found, skipping step: '{self._looking_for}'")
            return 0

        device.click_device(pos, self.is_double_click)
        return 0

    def gen_action_execution_results(
        self, device: "DeviceAdapter", context: ActionContext
    ) -> ActionExecutionResult:
        if self.play_status != PlayStatus.FAIL:
            return super().gen_action_execution_results(device, context)
        target = self._looking_for or self._target_description(
            context.expand_uicd_global_variable(self.selector, device.device_id())
        )
        return ActionExecutionResult.regular(
            self.action_id,
            self.play_status,
            f"Can not find element in xml, looking for: '{target}'",
            action_type=self.action_type.value,
            device_id=device.device_id(),
        )
