"""
axq commands.

Each command reads live state through the bridge and ends in exactly one
outcome: it returns a document (or None for "ok, nothing to report") or raises
one AXQueryError subclass. Rendering and exit codes are the CLI's job.
"""

import sys
import time
from dataclasses import dataclass
from typing import List, Optional

from . import address
from .bridge import AXBridge
from .errors import (
    AppNotFound, ContainerNotFound, InvalidAddress, InvalidArguments,
    InvalidPredicate, NotFound, PermissionDenied, WaitTimeout,
)
from .menus import (
    find_menu_container, find_status_bar_item, list_items, menu_children,
    menu_tree, status_bar_items, status_item_info, system_menu_bar,
)
from .output import TEXT
from .query import (
    POLL_INTERVAL, Predicate, ancestor_with_role, find_elements, find_outline,
    find_window_root, outline_rows as outline_row_nodes, wait_for,
)
from .titles import EXACT, MatchOptions

# ---------------- Constants ----------------
DEFAULT_TIMEOUT = 5.0
ELEMENT_DEPTH = 3

# Lines per scroll "amount" unit
SCROLL_STEP = 10

# Status item menus appear asynchronously after AXPress
MENU_OPEN_DELAY = 0.1

LABEL_SEPARATOR = " · "

WINDOW_ACTIONS = ("focus", "minimize", "fullscreen", "resize", "move")


@dataclass
class Options:
    """Per-invocation settings shared by every command."""
    app: Optional[str] = None
    pid: Optional[int] = None
    bundle: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT
    verbose: bool = False
    quiet: bool = False
    format: str = TEXT
    fixture: Optional[str] = None


class Context:
    def __init__(self, provider, actuator, options=None):
        self.provider = provider
        self.bridge = AXBridge(provider)
        self.actuator = actuator
        self.options = options or Options()

    def debug(self, tag, msg):
        if self.options.verbose:
            print(f"[{tag}] {msg}", file=sys.stderr)

    # ---------------- Resolution ----------------
    def require_trust(self):
        if not self.provider.is_trusted():
            raise PermissionDenied()

    def resolve_app(self):
        opts = self.options
        app = self.provider.find_app(pid=opts.pid, bundle_id=opts.bundle, name=opts.app)
        if app is None:
            raise AppNotFound()
        self.debug("APP", f"{app.name} pid={app.pid}")
        return app

    def app_element(self, app):
        element = self.provider.app_element(app.pid)
        if element is None:
            raise AppNotFound()
        return element

    def resolve_root(self, window_title=None):
        """(app, root, path): the app element, or the first window whose title contains `window_title`."""
        app = self.resolve_app()
        app_el = self.app_element(app)
        if not window_title:
            return app, app_el, [0]
        found = find_window_root(self.bridge, app_el, window_title)
        if found is None:
            raise ContainerNotFound("Window not found")
        window, path = found
        self.debug("WINDOW", f"'{window_title}' -> {path}")
        return app, window, path

    def element_from_id(self, element_id):
        if address.decode_address(element_id) is None:
            raise InvalidAddress(f"Invalid element id: {element_id}")
        element = address.element_from_address(self.bridge, element_id)
        if element is None:
            raise NotFound()
        return element

    def try_click(self, element) -> bool:
        """AXPress, else a synthetic click at the centre of the node's frame."""
        if self.bridge.press(element):
            self.debug("CLICK", "AXPress ok")
            return True
        frame = self.bridge.frame(element)
        if frame is None:
            self.debug("CLICK", "no AXPress and no frame")
            return False
        point = (frame["x"] + frame["width"] / 2.0, frame["y"] + frame["height"] / 2.0)
        self.debug("CLICK", f"fallback to frame centre {point}")
        self.actuator.click(point)
        return True

    def query(self, predicate: Predicate, window_title=None):
        """(app, matches) for a predicate over the app or one of its windows."""
        predicate.validate()
        app, root, path = self.resolve_root(window_title)
        matches = find_elements(self.bridge, root, predicate, root_path=path)
        self.debug("FIND", f"{predicate} -> {len(matches)} match(es)")
        return app, matches


# ---------------- Apps ----------------
def apps(ctx: Context):
    return [app.to_dict() for app in ctx.provider.running_apps()]


# ---------------- Tree ----------------
def elements(ctx: Context, depth=ELEMENT_DEPTH, window=None):
    ctx.require_trust()
    app, root, path = ctx.resolve_root(window)
    return [ctx.bridge.element_info(root, app.pid, path, depth)]


def outline_rows(ctx: Context, outline=None, window=None):
    ctx.require_trust()
    bridge = ctx.bridge
    app, root, _ = ctx.resolve_root(window)
    node = find_outline(bridge, root, outline)
    if node is None:
        raise ContainerNotFound("Outline not found")
    rows = outline_row_nodes(bridge, node)
    selected_rows = bridge.elements(node, "AXSelectedRows")
    app_el = ctx.app_element(app)

    data = []
    for index, row in enumerate(rows):
        entry = {"index": index}
        role = bridge.role(row)
        if role is not None:
            entry["role"] = role
        enabled = bridge.boolean(row, "AXEnabled")
        if enabled is not None:
            entry["enabled"] = enabled
        if selected_rows:
            entry["selected"] = any(bridge.same(row, s) for s in selected_rows)
        else:
            selected = bridge.boolean(row, "AXSelected")
            if selected is not None:
                entry["selected"] = selected
        labels = bridge.collect_text(row)
        if labels:
            entry["label"] = LABEL_SEPARATOR.join(labels)
        path = address.path_of(bridge, row, app_el)
        if path is not None:
            entry["id"] = address.encode_address(app.pid, path)
        data.append(entry)
    return data


def find(ctx: Context, predicate: Predicate, window=None, ancestor_role=None, click=False):
    ctx.require_trust()
    app, matches = ctx.query(predicate, window)
    if not matches:
        raise NotFound()
    if click:
        target, target_path = matches[0]
        if ancestor_role:
            target = ancestor_with_role(ctx.bridge, target_path, ctx.app_element(app), ancestor_role)
            if target is None:
                raise NotFound("Ancestor not found")
        if not ctx.try_click(target):
            raise NotFound("Failed to click element")
    return [ctx.bridge.element_info(m.node, app.pid, m.path) for m in matches]


def element_at(ctx: Context, x, y):
    ctx.require_trust()
    found = ctx.provider.element_at(x, y)
    if found is None:
        raise NotFound()
    pid = ctx.provider.pid_of(found)
    if pid is None:
        raise NotFound()
    app_el = ctx.provider.app_element(pid)
    path = address.path_of(ctx.bridge, found, app_el) if app_el is not None else None
    return [ctx.bridge.element_info(found, pid, path or [0])]


def exists(ctx: Context, predicate: Predicate, window=None):
    ctx.require_trust()
    _, matches = ctx.query(predicate, window)
    if not matches:
        raise NotFound()
    return None


def wait(ctx: Context, predicate: Predicate, window=None, gone=False, timeout=None,
         clock=time.monotonic, sleep=time.sleep):
    ctx.require_trust()
    predicate.validate()
    app = ctx.resolve_app()
    bridge = ctx.bridge

    def probe():
        app_el = ctx.provider.app_element(app.pid)
        if app_el is None:
            return False
        if window:
            found = find_window_root(bridge, app_el, window)
            if found is None:
                return False
            root, path = found
        else:
            root, path = app_el, [0]
        return bool(find_elements(bridge, root, predicate, root_path=path))

    if timeout is None:
        timeout = ctx.options.timeout
    ctx.debug("WAIT", f"{'gone' if gone else 'present'} within {timeout}s")
    if not wait_for(probe, gone=gone, timeout=timeout, interval=POLL_INTERVAL, clock=clock, sleep=sleep):
        raise WaitTimeout()
    return None


def assert_element(ctx: Context, predicate: Predicate, window=None, enabled=False,
                   checked=False, value=None):
    ctx.require_trust()
    _, matches = ctx.query(predicate, window)
    if not matches:
        raise NotFound()
    bridge = ctx.bridge
    element = matches[0].node
    if enabled and bridge.boolean(element, "AXEnabled") is not True:
        raise NotFound("Expected enabled")
    if checked:
        state = bridge.boolean(element, "AXValue")
        if state is None:
            state = bridge.boolean(element, "AXSelected")
        if state is not True:
            raise NotFound("Expected checked")
    if value is not None and bridge.string(element, "AXValue") != value:
        raise NotFound("Value mismatch")
    return None


# ---------------- Actions ----------------
def click(ctx: Context, target=None, predicate: Optional[Predicate] = None, window=None):
    """Click an ax:// address, or the first node matching a query."""
    ctx.require_trust()
    if target and target.startswith(address.SCHEME):
        element = ctx.element_from_id(target)
    else:
        _, matches = ctx.query(predicate or Predicate(), window)
        if not matches:
            raise NotFound()
        element = matches[0].node
    if not ctx.try_click(element):
        raise NotFound("Failed to click element")
    return None


def click_at(ctx: Context, x, y, double=False, right=False):
    ctx.actuator.click((x, y), button="right" if right else "left", count=2 if double else 1)
    return None


def type_text(ctx: Context, text, delay=0):
    if not text:
        raise InvalidArguments("Usage: type <text>")
    if not ctx.actuator.type_text(text, delay):
        raise NotFound("Failed to type text")
    return None


def key(ctx: Context, shortcut=None, raw=None, list_keys=False):
    if list_keys:
        return keys(ctx)
    if raw is not None:
        shortcut = f"raw:{int(raw)}"
    if not shortcut:
        raise InvalidArguments("Usage: key <shortcut>")
    if not ctx.actuator.key(shortcut):
        raise InvalidArguments("Unknown key")
    ctx.debug("KEY", shortcut)
    return None


def keys(ctx: Context):
    return {"keys": ctx.actuator.supported_keys()}


def set_value(ctx: Context, element_id, value):
    ctx.require_trust()
    element = ctx.element_from_id(element_id)
    if not ctx.bridge.set(element, "AXValue", value):
        raise NotFound("Failed to set value")
    return None


def scroll(ctx: Context, direction="down", amount=1, element=None):
    if direction not in ("up", "down"):
        raise InvalidArguments("Usage: scroll [up|down] [--amount N] [--element ID]")
    if element:
        node = address.element_from_address(ctx.bridge, element)
        action = "AXScrollUp" if direction == "up" else "AXScrollDown"
        if node is not None and ctx.bridge.perform(node, action):
            ctx.debug("SCROLL", f"{action} on {element}")
            return None
        ctx.debug("SCROLL", f"{action} unavailable on {element}, posting wheel event")
    delta = amount * SCROLL_STEP if direction == "up" else -amount * SCROLL_STEP
    ctx.actuator.scroll(delta)
    return None


# ---------------- Windows ----------------
def windows(ctx: Context):
    ctx.require_trust()
    bridge = ctx.bridge
    app = ctx.resolve_app()
    data = []
    for window in bridge.elements(ctx.app_element(app), "AXWindows"):
        entry = {}
        title = bridge.string(window, "AXTitle")
        if title is not None:
            entry["title"] = title
        frame = bridge.frame(window)
        if frame is not None:
            entry["frame"] = frame
        number = bridge.number(window, "AXWindowNumber")
        if number is not None:
            entry["id"] = address.window_address(number)
        data.append(entry)
    return data


def window(ctx: Context, action, window_id, a=None, b=None):
    if action not in WINDOW_ACTIONS:
        raise InvalidArguments("Unknown window action")
    if action in ("resize", "move") and (a is None or b is None):
        usage = "<width> <height>" if action == "resize" else "<x> <y>"
        raise InvalidArguments(f"Usage: window {action} <id> {usage}")
    ctx.require_trust()

    is_window_id = window_id.startswith(address.WINDOW_PREFIX)
    if is_window_id and address.parse_window_address(window_id) is None:
        raise InvalidAddress(f"Invalid window id: {window_id}")
    if not is_window_id and address.decode_address(window_id) is None:
        raise InvalidAddress(f"Invalid window id: {window_id}")

    app = None
    if is_window_id:
        opts = ctx.options
        app = ctx.provider.find_app(pid=opts.pid, bundle_id=opts.bundle, name=opts.app)
    node = address.window_from_address(ctx.bridge, window_id, app.pid if app else None)
    if node is None:
        raise ContainerNotFound("Window not found")

    bridge = ctx.bridge
    if action == "focus":
        bridge.set(node, "AXMain", True)
        bridge.set(node, "AXFocused", True)
    elif action == "minimize":
        bridge.set(node, "AXMinimized", True)
    elif action == "fullscreen":
        bridge.set(node, "AXFullScreen", True)
    elif action == "resize":
        bridge.set(node, "AXSize", (float(a), float(b)))
    elif action == "move":
        bridge.set(node, "AXPosition", (float(a), float(b)))
    ctx.debug("WINDOW", f"{action} {window_id}")
    return None


# ---------------- Menus ----------------
def _app_menu_bar(ctx: Context):
    app = ctx.resolve_app()
    menu_bar = ctx.bridge.element(ctx.app_element(app), "AXMenuBar")
    if menu_bar is None:
        raise ContainerNotFound("Menu bar not found")
    return menu_bar


def menus(ctx: Context):
    ctx.require_trust()
    return menu_tree(ctx.bridge, _app_menu_bar(ctx))


def menu(ctx: Context, path: List[str], match: MatchOptions = EXACT, list_children=False):
    ctx.require_trust()
    if not path and not list_children:
        raise InvalidPredicate("Usage: menu <path...>")
    menu_bar = _app_menu_bar(ctx)
    container = find_menu_container(ctx.bridge, menu_bar, path, match)
    ctx.debug("MENU", f"{' > '.join(path) or '(menu bar)'} -> {'found' if container is not None else 'missing'}")
    if container is None:
        if list_children:
            raise ContainerNotFound("Menu item not found")
        raise NotFound("Menu item not found")
    if list_children:
        return list_items(ctx.bridge, menu_children(ctx.bridge, container))
    if not ctx.bridge.press(container):
        raise NotFound("Menu item not found")
    return None


def statusbar(ctx: Context, name=None, match: MatchOptions = EXACT, list_all=False,
              list_menu=False, sleep=time.sleep):
    ctx.require_trust()
    bridge = ctx.bridge
    menu_bar = system_menu_bar(bridge)
    if menu_bar is None:
        raise ContainerNotFound("Menu bar not found")
    items = status_bar_items(bridge, menu_bar)
    if list_all:
        return [status_item_info(bridge, item) for item in items]
    if not name:
        raise InvalidArguments("Usage: statusbar --list | statusbar <item> | statusbar --menu <item>")
    target = find_status_bar_item(bridge, items, name, match)
    if target is None:
        raise NotFound("Status bar item not found")
    if list_menu:
        if bridge.element(target, "AXMenu") is None:
            bridge.press(target)
            sleep(MENU_OPEN_DELAY)
        opened = bridge.element(target, "AXMenu")
        if opened is None:
            raise ContainerNotFound("Menu not found")
        return list_items(bridge, bridge.children(opened))
    if not bridge.press(target):
        raise NotFound("Failed to click status bar item")
    return None
