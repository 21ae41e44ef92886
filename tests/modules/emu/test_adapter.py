from uicd.core.constants import StrategyType
from uicd.modules.actions import ActionContext, ClickAction
from uicd.modules.emu.adapter import AdapterConfig, DeviceAdapter
from uicd.modules.xmlparser import Position

PORTRAIT_PARTIAL = (
    '<hierarchy rotation="0">'
    '<node index="0" text="" class="android.widget.FrameLayout" bounds="[0,0][1080,2274]">'
    '<node index="0" text="OK" class="android.widget.Button" bounds="[440,2100][640,2200]" />'
    "</node></hierarchy>"
)

LANDSCAPE = (
    '<hierarchy rotation="1">'
    '<node index="0" text="" class="android.widget.FrameLayout" bounds="[0,0][2400,1080]">'
    '<node index="0" text="OK" class="android.widget.Button" bounds="[2000,500][2200,600]" />'
    "</node></hierarchy>"
)

SCALED = (
    '<hierarchy rotation="0" width="540" height="1200">'
    '<node index="0" text="OK" class="android.widget.Button" bounds="[100,100][200,200]" />'
    "</hierarchy>"
)


class _FakeAdb:
    def __init__(self, xml, size=(1080, 2400)):
        self.xml = xml
        self.size = size
        self.taps = []
        self.double_taps = []

    def wm_size(self, addr, timeout=10.0):
        return self.size

    def dump_ui(self, addr, command, timeout=30.0):
        return self.xml

    def tap(self, addr, x, y, timeout=10.0):
        self.taps.append((x, y))

    def double_tap(self, addr, x, y, timeout=10.0):
        self.double_taps.append((x, y))


def _adapter(xml, size=(1080, 2400)):
    adapter = DeviceAdapter(AdapterConfig(adb_addr="emulator-5554", adb_path="adb"))
    adapter.adb = _FakeAdb(xml, size)
    return adapter


def _click_ok(adapter):
    action = ClickAction.by_element(StrategyType.TEXT, "OK")
    assert action.play(adapter, ActionContext()) == 0
    return adapter.adb.taps


def test_ratios_default_to_one_before_first_dump():
    adapter = _adapter(PORTRAIT_PARTIAL)

    assert adapter.width_ratio() == 1.0
    assert adapter.height_ratio() == 1.0


def test_tree_ending_above_nav_bar_is_not_stretched():
    adapter = _adapter(PORTRAIT_PARTIAL)

    assert _click_ok(adapter) == [(540, 2150)]
    assert (adapter.width_ratio(), adapter.height_ratio()) == (1.0, 1.0)


def test_landscape_dump_taps_screen_coordinates():
    adapter = _adapter(LANDSCAPE)

    assert _click_ok(adapter) == [(2100, 550)]


def test_declared_dump_size_is_scaled_to_device():
    adapter = _adapter(SCALED)
    adapter.fetch_current_xml()

    assert (adapter.width_ratio(), adapter.height_ratio()) == (2.0, 2.0)
    assert _click_ok(adapter) == [(300, 300)]


def test_declared_size_in_landscape_swaps_wm_size():
    xml = SCALED.replace('rotation="0" width="540" height="1200"', 'rotation="3" width="1200" height="540"')
    adapter = _adapter(xml)
    adapter.fetch_current_xml()

    assert (adapter.width_ratio(), adapter.height_ratio()) == (2.0, 2.0)


def test_logical_click_is_scaled():
    adapter = _adapter(SCALED)
    adapter.fetch_current_xml()

    adapter.click_device(Position(x=150, y=150))

    assert adapter.adb.taps == [(300, 300)]


def test_physical_click_is_not_scaled():
    adapter = _adapter(SCALED)
    adapter.fetch_current_xml()

    adapter.click_device(Position(x=150, y=150, is_physical=True), is_double_click=True)

    assert adapter.adb.double_taps == [(150, 150)]


def test_config_falls_back_to_settings_adb_path(monkeypatch):
    from uicd.core.config import settings

    monkeypatch.setattr(settings, "adb_path", "/opt/adb")

    assert AdapterConfig(adb_addr="x").adb_path == "/opt/adb"
