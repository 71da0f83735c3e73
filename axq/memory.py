"""
In-memory node provider.

Backs the test suite and `axq --fixture tree.json` dry runs with a static
tree instead of the live AX API. Nodes hold attributes under their AX names;
a few attributes are derived when not set explicitly, mirroring how apps
expose them:

    AXChildren  -> node.children
    AXParent    -> node.parent
    AXWindows   -> children with role AXWindow
    AXMenuBar   -> first child with role AXMenuBar
    AXMenu      -> first child with role AXMenu

Fixture JSON layout:

    {"trusted": true,
     "system": {...node...},
     "apps": [{"pid": 42, "name": "Finder", "bundleId": "com.apple.finder",
               "frontmost": true, "root": {...node...}}]}

    node = {"role": "AXButton", "title": "OK", "value": ..., "description": ...,
            "identifier": ..., "enabled": true, "focused": false,
            "frame": {"x": 0, "y": 0, "width": 10, "height": 10},
            "actions": ["AXPress"], "attributes": {"AXWindowNumber": 7},
            "children": [...]}

An attribute value of {"rich": "..."} is served as an attributed string.
"""

import json
from collections.abc import Mapping
from pathlib import Path
from typing import List, Optional

from .actuator import parse_shortcut, raw_keycode
from .provider import (
    BOOLEAN, MISSING, NODE, NODE_LIST, NUMBER, RECT, RICH_TEXT, TEXT,
    AppRecord, AXValue, NodeProvider, Rect,
)

SHORT_NAMES = {
    "role": "AXRole",
    "title": "AXTitle",
    "value": "AXValue",
    "description": "AXDescription",
    "identifier": "AXIdentifier",
    "enabled": "AXEnabled",
    "focused": "AXFocused",
    "selected": "AXSelected",
    "frame": "AXFrame",
}


class RichText:
    """Stand-in for an attributed string: only its plain content matters."""

    def __init__(self, string):
        self.string = string

    def __repr__(self):
        return f"RichText({self.string!r})"


class MemoryNode:
    def __init__(self, role=None, children=None, actions=("AXPress",), **attrs):
        self.attributes = {}
        if role is not None:
            self.attributes["AXRole"] = role
        for key, value in attrs.items():
            self.attributes[SHORT_NAMES.get(key, key)] = value
        self.actions = list(actions or [])
        self.performed = []
        self.on_action = None
        self.read_only = False
        self.parent = None
        self.children = []
        for child in children or []:
            self.add(child)

    def add(self, child):
        child.parent = self
        self.children.append(child)
        return child

    def __repr__(self):
        role = self.attributes.get("AXRole")
        title = self.attributes.get("AXTitle")
        return f"MemoryNode({role!r}, title={title!r})"


def _tag(value) -> AXValue:
    if value is None:
        return MISSING
    if isinstance(value, RichText):
        return AXValue(RICH_TEXT, value.string)
    if isinstance(value, bool):
        return AXValue(BOOLEAN, value)
    if isinstance(value, (int, float)):
        return AXValue(NUMBER, value)
    if isinstance(value, str):
        return AXValue(TEXT, value)
    if isinstance(value, Rect):
        return AXValue(RECT, value)
    if isinstance(value, MemoryNode):
        return AXValue(NODE, value)
    if isinstance(value, (list, tuple)) and all(isinstance(v, MemoryNode) for v in value):
        return AXValue(NODE_LIST, list(value))
    return MISSING


def _contains(frame, x, y):
    return frame.x <= x < frame.x + frame.width and frame.y <= y < frame.y + frame.height


class MemoryProvider(NodeProvider):
    def __init__(self, system=None, trusted=True):
        self.system = system if system is not None else MemoryNode("AXSystemWide")
        self.trusted = trusted
        self.frontmost = None
        self._apps = {}
        self.writes = []

    def add_app(self, pid, root, name=None, bundle_id=None, frontmost=False):
        self._apps[int(pid)] = (AppRecord(int(pid), name, bundle_id), root)
        if frontmost or self.frontmost is None:
            self.frontmost = int(pid)
        return root

    # ---------------- Apps ----------------
    def is_trusted(self):
        return self.trusted

    def running_apps(self) -> List[AppRecord]:
        return [rec for rec, _ in self._apps.values()]

    def frontmost_app(self) -> Optional[AppRecord]:
        if self.frontmost is None or self.frontmost not in self._apps:
            return None
        return self._apps[self.frontmost][0]

    def app_element(self, pid):
        entry = self._apps.get(int(pid))
        return entry[1] if entry else None

    def system_wide(self):
        return self.system

    # ---------------- Attributes ----------------
    def copy_attribute(self, node, name) -> AXValue:
        if name == "AXChildren":
            return AXValue(NODE_LIST, list(node.children))
        if name == "AXParent":
            return _tag(node.parent)
        if name in node.attributes:
            return _tag(node.attributes[name])
        if name == "AXWindows":
            wins = [c for c in node.children if c.attributes.get("AXRole") == "AXWindow"]
            return AXValue(NODE_LIST, wins) if wins else MISSING
        if name in ("AXMenuBar", "AXMenu"):
            for c in node.children:
                if c.attributes.get("AXRole") == name:
                    return AXValue(NODE, c)
        return MISSING

    def set_attribute(self, node, name, value) -> bool:
        if node is None or node.read_only:
            return False
        self.writes.append((node, name, value))
        frame = node.attributes.get("AXFrame")
        if name == "AXPosition" and isinstance(frame, Rect):
            node.attributes["AXFrame"] = Rect(value[0], value[1], frame.width, frame.height)
        elif name == "AXSize" and isinstance(frame, Rect):
            node.attributes["AXFrame"] = Rect(frame.x, frame.y, value[0], value[1])
        node.attributes[name] = value
        return True

    def perform_action(self, node, action) -> bool:
        if node is None or action not in node.actions:
            return False
        node.performed.append(action)
        if node.on_action is not None:
            node.on_action(node, action)
        return True

    def same_node(self, a, b):
        return a is b

    # ---------------- Geometry / ownership ----------------
    def _walk(self, node):
        yield node
        for child in node.children:
            yield from self._walk(child)

    def element_at(self, x, y):
        for _, root in self._apps.values():
            hit = None
            for node in self._walk(root):
                frame = node.attributes.get("AXFrame")
                if isinstance(frame, Rect) and _contains(frame, x, y):
                    hit = node
            if hit is not None:
                return hit
        return None

    def pid_of(self, node):
        for pid, (_, root) in self._apps.items():
            if any(n is node for n in self._walk(root)):
                return pid
        return None


# ---------------- Actuator ----------------
class RecordingActuator:
    """Actuator that records requests instead of posting events."""

    def __init__(self, keys=("return", "tab", "escape", "a", "c", "v", "f12")):
        self.calls = []
        self.keys = list(keys)

    def click(self, point, button="left", count=1):
        self.calls.append(("click", (float(point[0]), float(point[1])), button, count))

    def type_text(self, text, delay_ms=0):
        self.calls.append(("type", text, delay_ms))
        return True

    def key(self, shortcut) -> bool:
        _, key = parse_shortcut(shortcut)
        if key is None:
            return False
        if raw_keycode(key) is None and key not in self.keys:
            return False
        self.calls.append(("key", shortcut))
        return True

    def scroll(self, delta):
        self.calls.append(("scroll", delta))

    def supported_keys(self):
        return list(self.keys)


# ---------------- Fixture loading ----------------
def _attr_value(value):
    if isinstance(value, Mapping):
        if "rich" in value:
            return RichText(value["rich"])
        if all(k in value for k in ("x", "y", "width", "height")):
            return Rect(value["x"], value["y"], value["width"], value["height"])
    return value


def node_from_dict(d) -> MemoryNode:
    attrs = {}
    for short, ax_name in SHORT_NAMES.items():
        if short in d and short != "role":
            attrs[ax_name] = _attr_value(d[short])
    for name, value in (d.get("attributes") or {}).items():
        attrs[name] = _attr_value(value)
    node = MemoryNode(d.get("role"), actions=d.get("actions", ["AXPress"]), **attrs)
    for child in d.get("children") or []:
        node.add(node_from_dict(child))
    return node


def provider_from_dict(data) -> MemoryProvider:
    system = node_from_dict(data["system"]) if data.get("system") else None
    provider = MemoryProvider(system=system, trusted=data.get("trusted", True))
    for app in data.get("apps") or []:
        provider.add_app(
            app["pid"],
            node_from_dict(app.get("root") or {"role": "AXApplication"}),
            name=app.get("name"),
            bundle_id=app.get("bundleId"),
            frontmost=bool(app.get("frontmost")),
        )
    return provider


def load_fixture(path) -> MemoryProvider:
    with open(Path(path).expanduser(), encoding="utf-8") as f:
        return provider_from_dict(json.load(f))
