import json

from axq.bridge import AXBridge
from axq.memory import MemoryNode, MemoryProvider, RecordingActuator, load_fixture, provider_from_dict
from axq.provider import BOOLEAN, NODE_LIST, NONE, NUMBER, RECT, RICH_TEXT, TEXT, Rect

DUMP = {
    "trusted": True,
    "apps": [
        {"pid": 5, "name": "TextEdit", "bundleId": "com.apple.TextEdit", "root": {
            "role": "AXApplication",
            "title": "TextEdit",
            "children": [{
                "role": "AXWindow",
                "title": "Untitled",
                "frame": {"x": 0, "y": 0, "width": 500, "height": 400},
                "attributes": {"AXWindowNumber": 3},
                "children": [
                    {"role": "AXTextArea", "attributes": {"AXValue": {"rich": "Hello"}},
                     "frame": {"x": 10, "y": 10, "width": 100, "height": 100}},
                ],
            }],
        }},
        {"pid": 9, "name": "Notes", "frontmost": True},
    ],
}


def test_tagging():
    node = MemoryNode("AXCheckBox", value=True, AXCount=3, frame=Rect(0, 0, 1, 1))
    p = MemoryProvider()
    assert p.copy_attribute(node, "AXRole").kind == TEXT
    assert p.copy_attribute(node, "AXValue").kind == BOOLEAN
    assert p.copy_attribute(node, "AXCount").kind == NUMBER
    assert p.copy_attribute(node, "AXFrame").kind == RECT
    assert p.copy_attribute(node, "AXChildren").kind == NODE_LIST
    assert p.copy_attribute(node, "AXNothing").kind == NONE


def test_provider_from_dict():
    p = provider_from_dict(DUMP)
    b = AXBridge(p)
    assert [a.name for a in p.running_apps()] == ["TextEdit", "Notes"]
    assert p.frontmost_app().pid == 9
    root = p.app_element(5)
    window = b.elements(root, "AXWindows")[0]
    assert b.number(window, "AXWindowNumber") == 3
    area = b.children(window)[0]
    assert p.copy_attribute(area, "AXValue").kind == RICH_TEXT
    assert b.string(area, "AXValue") == "Hello"
    assert b.element(area, "AXParent") is window


def test_load_fixture(tmp_path):
    path = tmp_path / "tree.json"
    path.write_text(json.dumps(DUMP), encoding="utf-8")
    p = load_fixture(path)
    assert p.find_app(bundle_id="com.apple.TextEdit").pid == 5


def test_find_app_order():
    p = provider_from_dict(DUMP)
    assert p.find_app(pid=5).name == "TextEdit"
    assert p.find_app(pid=6) is None
    assert p.find_app(name="com.apple.TextEdit").pid == 5
    assert p.find_app(name="Notes").pid == 9
    assert p.find_app(name="Safari") is None
    assert p.find_app().pid == 9


def test_element_at_returns_deepest():
    p = provider_from_dict(DUMP)
    hit = p.element_at(20, 20)
    assert p.copy_attribute(hit, "AXRole").payload == "AXTextArea"
    assert p.pid_of(hit) == 5
    assert p.copy_attribute(p.element_at(300, 300), "AXRole").payload == "AXWindow"
    assert p.element_at(900, 900) is None


def test_set_position_moves_frame():
    p = MemoryProvider()
    window = MemoryNode("AXWindow", frame=Rect(0, 0, 10, 10))
    assert p.set_attribute(window, "AXPosition", (5, 6))
    assert p.set_attribute(window, "AXSize", (50, 60))
    assert window.attributes["AXFrame"] == Rect(5, 6, 50, 60)
    window.read_only = True
    assert not p.set_attribute(window, "AXValue", "x")


def test_recording_actuator_keys():
    act = RecordingActuator()
    assert act.key("cmd+shift+a")
    assert act.key("raw:122")
    assert not act.key("cmd+hyper")
    assert not act.key("cmd")
    assert act.calls == [("key", "cmd+shift+a"), ("key", "raw:122")]
