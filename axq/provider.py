"""
Node provider interface.

A provider owns access to the live accessibility tree. Everything above it
(bridge, address codec, query engine, menus) only talks to this interface, so
the same code runs against the macOS AX API (axq.macos) or an in-memory
fixture tree (axq.memory).

Attribute values cross this boundary as a tagged AXValue. The same semantic
attribute can arrive in several representations (plain string, attributed
string, NSNumber, boxed CGRect ...); the provider only tags what it got, the
bridge decides how to coerce it.
"""

from abc import ABC, abstractmethod
from typing import Any, List, NamedTuple, Optional

# ---------------- Value kinds ----------------
TEXT = "text"
RICH_TEXT = "rich_text"
NUMBER = "number"
BOOLEAN = "boolean"
RECT = "rect"
NODE = "node"
NODE_LIST = "node_list"
NONE = "none"

VALUE_KINDS = (TEXT, RICH_TEXT, NUMBER, BOOLEAN, RECT, NODE, NODE_LIST, NONE)


class AXValue(NamedTuple):
    """Tagged attribute value. For RICH_TEXT the payload is the plain content."""
    kind: str
    payload: Any = None


MISSING = AXValue(NONE)


class Rect(NamedTuple):
    x: float
    y: float
    width: float
    height: float

    @property
    def center(self):
        return (self.x + self.width / 2.0, self.y + self.height / 2.0)


class AppRecord(NamedTuple):
    pid: int
    name: Optional[str] = None
    bundle_id: Optional[str] = None

    def to_dict(self):
        return {"name": self.name or "", "pid": int(self.pid), "bundleId": self.bundle_id or ""}


# ---------------- Provider ----------------
class NodeProvider(ABC):
    """Access to one host's accessibility tree."""

    @abstractmethod
    def is_trusted(self) -> bool:
        """True when this process may read the tree."""

    @abstractmethod
    def running_apps(self) -> List[AppRecord]:
        ...

    @abstractmethod
    def frontmost_app(self) -> Optional[AppRecord]:
        ...

    @abstractmethod
    def app_element(self, pid: int):
        """Root node of the application owning `pid`."""

    @abstractmethod
    def system_wide(self):
        """System-wide element (hit testing, global menu bar)."""

    @abstractmethod
    def copy_attribute(self, node, name: str) -> AXValue:
        """Read one attribute; MISSING when absent or unreadable."""

    @abstractmethod
    def set_attribute(self, node, name: str, value) -> bool:
        ...

    @abstractmethod
    def perform_action(self, node, action: str) -> bool:
        ...

    @abstractmethod
    def same_node(self, a, b) -> bool:
        """Native identity comparison of two handles."""

    @abstractmethod
    def element_at(self, x: float, y: float):
        """Deepest node under a screen point, or None."""

    @abstractmethod
    def pid_of(self, node) -> Optional[int]:
        ...

    def find_app(self, pid=None, bundle_id=None, name=None) -> Optional[AppRecord]:
        """Resolve a running app by pid, then bundle id, then name; else frontmost."""
        apps = self.running_apps()
        if pid is not None:
            for app in apps:
                if app.pid == pid:
                    return app
            return None
        if bundle_id:
            for app in apps:
                if app.bundle_id == bundle_id:
                    return app
            return None
        if name:
            # A bare name may also be a bundle identifier.
            for app in apps:
                if app.bundle_id == name:
                    return app
            for app in apps:
                if app.name == name:
                    return app
            return None
        return self.frontmost_app()
