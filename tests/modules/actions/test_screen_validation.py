from uicd.core.constants import ContentMatchType, PlayStatus, StopType
from uicd.modules.actions import (
    ActionContext,
    ConditionClickAction,
    ScreenContentValidationAction,
    ValidationReqDetails,
)
from uicd.modules.variables import GlobalVariableMap
from uicd.modules.xmlparser import Bounds, NodeContext, Position, UiTree

DUMP = (
    '<hierarchy rotation="0">'
    '<node index="0" text="" class="android.widget.FrameLayout" bounds="[0,0][1080,1920]">'
    '<node index="0" text="Welcome" resource-id="app:id/title" class="android.widget.TextView" bounds="[0,100][1080,200]" />'
    '<node index="1" text="Continue" resource-id="app:id/next" class="android.widget.Button" bounds="[100,1500][500,1600]" />'
    "</node></hierarchy>"
)


class _FakeDevice:
    def __init__(self, xml=DUMP):
        self.xml = xml
        self.clicks = []

    def device_id(self):
        return "emulator-5554"

    def fetch_current_xml(self, with_class_name=True):
        return UiTree.parse(self.xml, with_class_name=with_class_name)

    def click_device(self, position, is_double_click=False):
        self.clicks.append((position.x, position.y))


def _validation(cls=ScreenContentValidationAction, **details):
    return cls(validation_req_details=ValidationReqDetails(**details))


def test_text_present_passes():
    context = ActionContext()
    action = _validation(text_value="Welcome")

    assert action.play(_FakeDevice(), context) == 0
    assert action.play_status == PlayStatus.READY
    assert action.found_node_context.resource_id == "app:id/title"


def test_text_missing_fails_with_expected_in_result():
    device = _FakeDevice()
    context = ActionContext(GlobalVariableMap({"uicd_title": "Goodbye"}))
    action = _validation(text_value="$uicd_title")

    assert action.play(device, context) == -1
    assert context.is_failed("emulator-5554")
    assert "Goodbye" in action.gen_action_execution_results(device, context).text


def test_stop_if_true_fails_when_present():
    context = ActionContext()
    action = _validation(text_value="Continue", stop_type=StopType.STOP_TEST_IF_TRUE)

    assert action.play(_FakeDevice(), context) == -1
    assert action.play_status == PlayStatus.FAIL


def test_search_area_restricts_matches():
    action = _validation(
        content_match_type=ContentMatchType.RESOURCE_ID,
        text_value="app:id/next",
        bounds=Bounds(left=0, top=0, right=1080, bottom=960),
    )

    assert action.play(_FakeDevice(), ActionContext()) == -1


def test_regex_match_type():
    action = _validation(content_match_type=ContentMatchType.TEXT_REGEX, text_value="Wel.*")

    assert action.play(_FakeDevice(), ActionContext()) == 0


def test_condition_click_clicks_found_node():
    device = _FakeDevice()
    action = _validation(ConditionClickAction, text_value="Continue")

    assert action.play(device, ActionContext()) == 0
    assert device.clicks == [(300, 1550)]
    assert action.play_status == PlayStatus.READY


def test_condition_click_applies_saved_offset():
    device = _FakeDevice()
    action = _validation(ConditionClickAction, text_value="Continue")
    action.saved_node_context = NodeContext(relative_pos=Position(x=-100, y=10))

    action.play(device, ActionContext())

    assert device.clicks == [(200, 1560)]


def test_condition_click_miss_clears_fail_and_stays_ready():
    device = _FakeDevice()
    context = ActionContext()
    context.set_fail_status("emulator-5554")
    action = _validation(ConditionClickAction, text_value="Not there")

    assert action.play(device, context) == 0
    assert device.clicks == []
    assert action.play_status == PlayStatus.READY
    assert context.get_play_status("emulator-5554") == PlayStatus.READY


def test_update_action_copies_details():
    target = ScreenContentValidationAction()
    source = _validation(text_value="X", stop_type=StopType.STOP_TEST_IF_TRUE)

    target.update_action(source)

    assert target.validation_req_details.text_value == "X"
    assert target.validation_req_details is not source.validation_req_details
