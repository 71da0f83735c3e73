import pytest

from axq.bridge import AXBridge, normalize_role
from axq.memory import MemoryNode, MemoryProvider, RichText
from axq.provider import Rect


@pytest.fixture
def node():
    return MemoryNode(
        "AXSlider",
        title=None,
        description="Volume",
        AXValue=2.5,
        AXWhole=3.0,
        AXFlag=True,
        AXZero=0,
        AXLabel=RichText("rich label"),
        frame=Rect(1, 2, 3, 4),
        AXBogusFrame="{{1, 2}, {3, 4}}",
    )


@pytest.fixture
def b():
    return AXBridge(MemoryProvider())


def test_string_chain(b, node):
    assert b.string(node, "AXLabel") == "rich label"
    assert b.string(node, "AXValue") == "2.5"
    assert b.string(node, "AXWhole") == "3"
    assert b.string(node, "AXFlag") == "1"
    assert b.string(node, "AXMissing") is None
    assert b.string(node, "AXFrame") is None


def test_boolean_accepts_numbers(b, node):
    assert b.boolean(node, "AXFlag") is True
    assert b.boolean(node, "AXZero") is False
    assert b.boolean(node, "AXValue") is True
    assert b.boolean(node, "AXLabel") is None


def test_number_accepts_booleans(b, node):
    assert b.number(node, "AXFlag") == 1
    assert b.number(node, "AXValue") == 2.5
    assert b.number(node, "AXLabel") is None


def test_frame_only_from_rect(b, node):
    assert b.frame(node) == {"x": 1.0, "y": 2.0, "width": 3.0, "height": 4.0}
    assert b.get(node, "AXBogusFrame", "frame") is None


def test_unknown_kind_rejected(b, node):
    with pytest.raises(ValueError):
        b.get(node, "AXValue", "colour")


def test_none_node_reads_nothing(b):
    assert b.string(None, "AXTitle") is None
    assert b.children(None) == []


def test_title_falls_back_to_description(b, node):
    assert b.title(node) == "Volume"
    assert b.title(MemoryNode("AXButton", title="OK", description="Confirm")) == "OK"
    assert b.title(MemoryNode("AXGroup")) is None


def test_text_candidates_title_only_for_text_roles(b):
    button = MemoryNode("AXButton", title="Save", description="Save file")
    heading = MemoryNode("AXHeading", title="Chapter 1", value="x")
    assert b.text_candidates(button) == ["Save file"]
    assert b.text_candidates(heading) == ["x", "Chapter 1"]


def test_collect_text_dedupes_and_caps(b):
    leaves = [MemoryNode("AXStaticText", value=f" item {i % 4} ") for i in range(20)]
    root = MemoryNode("AXGroup", description="group", children=leaves)
    assert b.collect_text(root) == ["group", "item 0", "item 1", "item 2", "item 3"]
    assert b.collect_text(root, limit=2) == ["group", "item 0"]


def test_normalize_role():
    assert normalize_role("Button") == "AXButton"
    assert normalize_role("AXButton") == "AXButton"


def test_element_info(bridge, finder):
    ok = finder.children[0].children[0]
    assert bridge.element_info(ok, 42, [0, 0, 0]) == {
        "id": "ax://42/0.0.0",
        "role": "AXButton",
        "title": "OK",
        "identifier": "ok-button",
        "enabled": True,
        "frame": {"x": 10.0, "y": 10.0, "width": 80.0, "height": 20.0},
    }


def test_element_info_depth(bridge, finder):
    group = finder.children[0].children[1]
    shallow = bridge.element_info(group, 42, [0, 0, 1])
    assert "children" not in shallow
    deep = bridge.element_info(group, 42, [0, 0, 1], depth=1)
    assert deep["children"] == [
        {"id": "ax://42/0.0.1.0", "role": "AXStaticText", "title": "Hello World"},
    ]


def test_press_uses_actions(bridge, finder):
    ok = finder.children[0].children[0]
    assert bridge.press(ok) is True
    assert ok.performed == ["AXPress"]
    assert bridge.press(finder.children[0].children[1]) is False
