"""
Menu bar and status bar resolution.

Menu paths are resolved one labelled segment at a time: a segment is looked
up among the current container's children, and the match's submenu becomes
the next container. The first segment without a match fails the whole path,
even if a later segment would match something elsewhere.
"""

from typing import List, Optional, Sequence

from .titles import EXACT, MatchOptions, title_matches

# Levels rendered by menu_tree()
MENU_DEPTH = 3


def menu_children(bridge, element) -> List:
    """Items of a menu-bearing node: children of its AXMenu if it has one."""
    menu = bridge.element(element, "AXMenu")
    if menu is not None:
        return bridge.children(menu)
    return bridge.children(element)


def menu_tree(bridge, element, depth=MENU_DEPTH) -> List[dict]:
    if depth <= 0:
        return []
    out = []
    for child in bridge.children(element):
        entry = {}
        title = bridge.string(child, "AXTitle")
        if title is not None:
            entry["title"] = title
        role = bridge.role(child)
        if role is not None:
            entry["role"] = role
        sub = menu_tree(bridge, child, depth - 1)
        if sub:
            entry["children"] = sub
        out.append(entry)
    return out


def find_menu_container(bridge, menu_bar, path: Sequence[str], options: MatchOptions = EXACT):
    """Node reached by walking `path` from `menu_bar`; the menu bar itself for an empty path."""
    if not path:
        return menu_bar
    current = bridge.children(menu_bar)
    for index, name in enumerate(path):
        match = None
        for el in current:
            title = bridge.string(el, "AXTitle")
            if title is not None and title_matches(title, name, options):
                match = el
                break
        if match is None:
            return None
        if index == len(path) - 1:
            return match
        current = menu_children(bridge, match)
    return None


def list_items(bridge, elements) -> List[dict]:
    """title/role documents for menu entries."""
    out = []
    for el in elements:
        entry = {}
        title = bridge.string(el, "AXTitle")
        if title is not None:
            entry["title"] = title
        role = bridge.role(el)
        if role is not None:
            entry["role"] = role
        out.append(entry)
    return out


# ---------------- Status bar ----------------
def system_menu_bar(bridge):
    """System-wide menu bar, else the frontmost app's menu bar."""
    provider = bridge.provider
    menu_bar = bridge.element(provider.system_wide(), "AXMenuBar")
    if menu_bar is not None:
        return menu_bar
    app = provider.frontmost_app()
    if app is None:
        return None
    return bridge.element(provider.app_element(app.pid), "AXMenuBar")


def status_bar_items(bridge, menu_bar) -> List:
    return [el for el in bridge.children(menu_bar) if bridge.role(el) == "AXMenuBarItem"]


def find_status_bar_item(bridge, items, name: str, options: MatchOptions = EXACT) -> Optional[object]:
    for item in items:
        candidates = []
        title = bridge.string(item, "AXTitle")
        if title is not None:
            candidates.append(title)
        desc = bridge.string(item, "AXDescription")
        if desc is not None:
            candidates.append(desc)
        if any(title_matches(c, name, options) for c in candidates):
            return item
    return None


def status_item_info(bridge, item) -> dict:
    entry = {}
    title = bridge.string(item, "AXTitle")
    if title is not None:
        entry["title"] = title
    desc = bridge.string(item, "AXDescription")
    if desc is not None:
        entry["description"] = desc
    role = bridge.role(item)
    if role is not None:
        entry["role"] = role
    frame = bridge.frame(item)
    if frame is not None:
        entry["frame"] = frame
    return entry
