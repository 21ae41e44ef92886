import pytest

from uicd.core.constants import StrategyType
from uicd.modules.xmlparser import (
    Bounds,
    NodeContext,
    Position,
    UiTree,
    UiTreeError,
    find_best_match,
    find_nodes,
    find_position_by_locator,
)

DUMP = """UI hierchary dumped to: /dev/tty
<?xml version='1.0' encoding='UTF-8' standalone='yes' ?><hierarchy rotation="0">
  <node index="0" text="" resource-id="" class="android.widget.FrameLayout" package="com.example" content-desc="" bounds="[0,0][1080,1920]">
    <node index="0" text="Sign in" resource-id="com.example:id/login" class="android.widget.Button" package="com.example" content-desc="" bounds="[100,200][300,260]" />
    <node index="1" text="Cancel" resource-id="com.example:id/cancel" class="android.widget.Button" package="com.example" content-desc="close" bounds="[400,200][600,260]" />
    <node index="2" text="Sign in" resource-id="" class="android.widget.TextView" package="com.example" content-desc="" bounds="[100,900][300,960]" />
  </node>
</hierarchy>"""


@pytest.fixture()
def tree():
    return UiTree.parse(DUMP)


def test_parse_ignores_surrounding_output(tree):
    assert len(tree.node_list()) == 4
    assert tree.rotation == 0
    assert tree.display_size() is None


def test_parse_rejects_output_without_hierarchy():
    with pytest.raises(UiTreeError):
        UiTree.parse("ERROR: could not get idle state.")


def test_parse_with_class_name_retags_nodes():
    tree = UiTree.parse(DUMP, with_class_name=True)

    tags = [el.tag for el in tree.nodes()]
    assert tags[0] == "androidwidgetFrameLayout"
    assert "androidwidgetButton" in tags


@pytest.mark.parametrize(
    "strategy, selector, expected",
    [
        (StrategyType.TEXT, "Sign in", 2),
        (StrategyType.TEXT_REGEX, "Sign.*", 2),
        (StrategyType.TEXT_REGEX, "Sign", 0),
        (StrategyType.RESOURCEID, "com.example:id/cancel", 1),
        (StrategyType.RESOURCEID_REGEX, r".*id/(login|cancel)", 2),
        (StrategyType.CONTENTDESC, "close", 1),
        (StrategyType.CLASSNAME, "android.widget.Button", 2),
    ],
)
def test_attribute_strategies(tree, strategy, selector, expected):
    assert len(find_nodes(tree, strategy, selector)) == expected


def test_xpath_strategy_on_class_name_tree():
    tree = UiTree.parse(DUMP, with_class_name=True)

    found = find_nodes(tree, StrategyType.XPATH, "//androidwidgetButton[@text='Cancel']")

    assert [el.get("resource-id") for el in found] == ["com.example:id/cancel"]


def test_unsupported_xpath_returns_nothing(tree):
    assert find_nodes(tree, StrategyType.XPATH, "//node[contains(@text,'x')]") == []


def test_find_position_scales_first_match(tree):
    pos = find_position_by_locator(tree, StrategyType.TEXT, "Sign in", 2.0, 0.5)

    assert pos.is_physical
    assert (pos.x, pos.y) == (400, 115)


def test_find_position_miss_is_invalid(tree):
    assert not find_position_by_locator(tree, StrategyType.TEXT, "Nope", 1.0, 1.0).is_valid()


def test_best_match_prefers_identity_then_nearest(tree):
    ctx = NodeContext(text="Sign in", bounds=Bounds(left=100, top=880, right=300, bottom=980))

    element, bounds = find_best_match(tree, ctx)

    assert element.get("class") == "android.widget.TextView"
    assert bounds == Bounds(left=100, top=900, right=300, bottom=960)


def test_best_match_resource_id_outweighs_text(tree):
    ctx = NodeContext(text="Sign in", resource_id="com.example:id/login")

    element, _ = find_best_match(tree, ctx)

    assert element.get("resource-id") == "com.example:id/login"


def test_best_match_without_identity_needs_same_bounds(tree):
    ctx = NodeContext(class_name="android.widget.Button", bounds=Bounds(left=1, top=1, right=2, bottom=2))

    assert find_best_match(tree, ctx) is None


def test_node_context_relative_pos_from_click(tree):
    element = find_nodes(tree, StrategyType.RESOURCEID, "com.example:id/login")[0]

    ctx = NodeContext.from_element(element, clicked_pos=Position(x=120, y=230))

    assert (ctx.relative_pos.x, ctx.relative_pos.y) == (-80, 0)
    assert ctx.display_estimate() == "Sign in"
