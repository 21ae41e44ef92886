import pytest

from uicd.core.constants import PlayStatus, StrategyType
from uicd.modules.actions import ActionContext, ClickAction, PositionResolver
from uicd.modules.actions import position_resolver as resolver_module
from uicd.modules.variables import GlobalVariableMap
from uicd.modules.xmlparser import Bounds, NodeContext, Position, UiTree, find_position_by_locator

DUMP = (
    '<hierarchy rotation="0">'
    '<node index="0" text="" class="android.widget.FrameLayout" bounds="[0,0][1080,1920]">'
    '<node index="0" text="OK" resource-id="app:id/ok" class="android.widget.Button" bounds="[100,100][300,200]" />'
    "</node></hierarchy>"
)


class _FakeDevice:
    def __init__(self, xml=DUMP, device_id="emulator-5554"):
        self.xml = xml
        self._id = device_id
        self.clicks = []

    def device_id(self):
        return self._id

    def fetch_current_xml(self, with_class_name=True):
        return UiTree.parse(self.xml, with_class_name=with_class_name)

    def find_position_by_locator(self, tree, strategy, selector, width_ratio, height_ratio):
        return find_position_by_locator(tree, strategy, selector, width_ratio, height_ratio)

    def width_ratio(self):
        return 1.0

    def height_ratio(self):
        return 1.0

    def capture(self):
        return b"png"

    def click_device(self, position, is_double_click=False):
        self.clicks.append((position.x, position.y, position.is_physical, is_double_click))


@pytest.fixture()
def ocr_calls(monkeypatch):
    calls = []

    def _miss(screenshot, text):
        calls.append(text)
        return Position.invalid()

    monkeypatch.setattr(resolver_module, "find_text_position", _miss)
    return calls


def test_raw_xy_clicks_physical_position():
    device = _FakeDevice()
    action = ClickAction.raw_xy(540, 960, is_double_click=True)

    assert action.play(device, ActionContext()) == 0
    assert device.clicks == [(540, 960, True, True)]


def test_by_element_clicks_locator_match(ocr_calls):
    device = _FakeDevice()
    action = ClickAction.by_element(StrategyType.RESOURCEID, "app:id/ok")

    assert action.play(device, ActionContext()) == 0
    assert device.clicks == [(200, 150, True, False)]
    assert ocr_calls == []


def test_selector_is_variable_expanded(ocr_calls):
    device = _FakeDevice()
    context = ActionContext(GlobalVariableMap({"uicd_button": "OK"}))
    action = ClickAction.by_element(StrategyType.TEXT, "$uicd_button")

    assert action.play(device, context) == 0
    assert device.clicks == [(200, 150, True, False)]


def test_locator_miss_falls_back_to_ocr(monkeypatch):
    device = _FakeDevice()
    monkeypatch.setattr(
        resolver_module,
        "find_text_position",
        lambda screenshot, text: Position(x=10, y=20, is_physical=True),
    )
    action = ClickAction.by_element(StrategyType.TEXT, "Not in tree")

    assert action.play(device, ActionContext()) == 0
    assert device.clicks == [(10, 20, True, False)]


def test_not_found_with_fail_flag_marks_fail(ocr_calls):
    device = _FakeDevice()
    context = ActionContext()
    action = ClickAction.by_element(StrategyType.TEXT, "Missing", fail_test_if_not_found=True)

    assert action.play(device, context) == -1
    assert action.play_status == PlayStatus.FAIL
    assert context.get_play_status("emulator-5554") == PlayStatus.FAIL
    assert ocr_calls == ["Missing"]
    assert device.clicks == []

    result = action.gen_action_execution_results(device, context)
    assert result.play_status == PlayStatus.FAIL
    assert "Missing" in result.text
    assert result.text.startswith("Can not find element in xml")


def test_not_found_without_fail_flag_skips(ocr_calls):
    device = _FakeDevice()
    context = ActionContext()
    action = ClickAction.by_element(StrategyType.TEXT, "Missing", fail_test_if_not_found=False)

    assert action.play(device, context) == 0
    assert action.play_status == PlayStatus.READY
    assert context.get_play_status("emulator-5554") == PlayStatus.READY
    assert device.clicks == []


def test_ocr_mode_skips_locator(monkeypatch):
    device = _FakeDevice(xml="not xml at all")
    monkeypatch.setattr(
        resolver_module,
        "find_text_position",
        lambda screenshot, text: Position(x=1, y=2, is_physical=True),
    )
    action = ClickAction.by_ocr("OK")

    assert action.play(device, ActionContext()) == 0
    assert device.clicks == [(1, 2, True, False)]


def test_snapshot_click_uses_center_plus_relative_offset():
    device = _FakeDevice()
    ctx = NodeContext(
        text="OK",
        bounds=Bounds(left=100, top=100, right=300, bottom=200),
        relative_pos=Position(x=30, y=-10),
    )
    action = ClickAction.from_node_context(ctx)

    assert action.fail_test_if_not_found
    assert action.play(device, ActionContext()) == 0
    assert device.clicks == [(230, 140, False, False)]


def test_snapshot_miss_names_node():
    device = _FakeDevice()
    context = ActionContext()
    action = ClickAction.from_node_context(NodeContext(text="Gone"))

    assert action.play(device, context) == -1
    assert "'Gone'" in action.gen_action_execution_results(device, context).text


def test_legacy_default_does_not_fail():
    assert ClickAction().fail_test_if_not_found is False


def test_get_display():
    assert ClickAction(is_double_click=True).get_display() == "Double Click"
    assert ClickAction.by_ocr("Login").get_display() == "TEXT(OCR mode) - Login"
    assert ClickAction.raw_xy(10, 20).get_display() == "(10, 20)"
    assert ClickAction(selector="sel").get_display() == "Click Action, sel"
    action = ClickAction(name="OK", node_context=NodeContext(clicked_pos=Position(x=1, y=2)))
    assert action.get_display() == "OK, (1, 2)"


def test_update_action_copies_fields_and_opts_into_fail():
    target = ClickAction(name="old")
    source = ClickAction.by_element(StrategyType.TEXT_REGEX, "OK.*", fail_test_if_not_found=False)
    source.name = "new"
    action_id = target.action_id

    target.update_action(source)

    assert target.action_id == action_id
    assert target.name == "new"
    assert target.strategy == StrategyType.TEXT_REGEX
    assert target.selector == "OK.*"
    assert target.is_by_element
    assert target.fail_test_if_not_found is True


def test_injected_ocr_finder():
    device = _FakeDevice()
    seen = []

    def _finder(screenshot, text):
        seen.append((screenshot, text))
        return Position(x=7, y=8, is_physical=True)

    action = ClickAction.by_ocr("Next")
    action.set_resolver(PositionResolver(ocr_finder=_finder))

    assert action.play(device, ActionContext()) == 0
    assert seen == [(b"png", "Next")]
    assert device.clicks == [(7, 8, True, False)]
