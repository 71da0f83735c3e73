"""
Attribute Bridge
================

Typed, best-effort accessors over an opaque node handle.

Every getter returns None when the attribute is missing or cannot be coerced
to the requested type; nothing here raises for a missing attribute. Values
come from the provider as a tagged AXValue and are coerced here:

    string : text -> rich text plain content -> number string form
    bool   : boolean, or any number by truthiness
    number : number, or boolean as 0/1
    frame  : boxed rect only (never guessed from other shapes)
    node   : node handle
    nodes  : list of node handles
"""

from typing import Dict, List, Optional

from . import address
from .provider import (
    BOOLEAN, NODE, NODE_LIST, NUMBER, RECT, RICH_TEXT, TEXT,
)

# Semantic types a caller can request from get()
STRING = "string"
BOOL = "bool"
NUMERIC = "number"
FRAME = "frame"
ELEMENT = "node"
ELEMENTS = "nodes"

# Roles whose AXTitle is display text rather than a control label
TEXT_DISPLAY_ROLES = {"AXStaticText", "AXHeading"}

# Max distinct strings gathered by collect_text
COLLECT_TEXT_LIMIT = 6


def normalize_role(role: str) -> str:
    """'Button' and 'AXButton' name the same role."""
    if role.startswith("AX"):
        return role
    return "AX" + role


def _number_text(v):
    """String form of a numeric wrapper (NSNumber.stringValue style)."""
    if isinstance(v, bool):
        return "1" if v else "0"
    if isinstance(v, float) and v.is_integer():
        return str(int(v))
    return str(v)


class AXBridge:
    """Typed access to nodes of one provider."""

    def __init__(self, provider):
        self.provider = provider

    # ---------------- Typed getters ----------------
    def get(self, node, name, kind=STRING):
        """Read `name` from `node` coerced to `kind`; None when absent."""
        if node is None:
            return None
        value = self.provider.copy_attribute(node, name)
        tag, payload = value.kind, value.payload

        if kind == STRING:
            if tag == TEXT:
                return str(payload)
            if tag == RICH_TEXT:
                return str(payload)
            if tag in (NUMBER, BOOLEAN):
                return _number_text(payload)
            return None

        if kind == BOOL:
            if tag == BOOLEAN:
                return bool(payload)
            if tag == NUMBER:
                return bool(payload)
            return None

        if kind == NUMERIC:
            if tag == NUMBER:
                return payload
            if tag == BOOLEAN:
                return 1 if payload else 0
            return None

        if kind == FRAME:
            if tag != RECT:
                return None
            x, y, w, h = payload
            return {"x": float(x), "y": float(y), "width": float(w), "height": float(h)}

        if kind == ELEMENT:
            return payload if tag == NODE else None

        if kind == ELEMENTS:
            return list(payload) if tag == NODE_LIST else None

        raise ValueError(f"unknown attribute kind: {kind!r}")

    def string(self, node, name) -> Optional[str]:
        return self.get(node, name, STRING)

    def boolean(self, node, name) -> Optional[bool]:
        return self.get(node, name, BOOL)

    def number(self, node, name):
        return self.get(node, name, NUMERIC)

    def frame(self, node) -> Optional[Dict[str, float]]:
        return self.get(node, "AXFrame", FRAME)

    def element(self, node, name):
        return self.get(node, name, ELEMENT)

    def elements(self, node, name) -> List:
        return self.get(node, name, ELEMENTS) or []

    # ---------------- Common attributes ----------------
    def children(self, node) -> List:
        return self.elements(node, "AXChildren")

    def role(self, node) -> Optional[str]:
        return self.string(node, "AXRole")

    def title(self, node) -> Optional[str]:
        """Human label: AXTitle, else AXDescription."""
        title = self.string(node, "AXTitle")
        if title is not None:
            return title
        return self.string(node, "AXDescription")

    def identifier(self, node) -> Optional[str]:
        return self.string(node, "AXIdentifier")

    def text_candidates(self, node, role=None) -> List[str]:
        """Label-bearing strings considered by text search."""
        if role is None:
            role = self.role(node) or ""
        candidates = []
        value = self.string(node, "AXValue")
        if value is not None:
            candidates.append(value)
        desc = self.string(node, "AXDescription")
        if desc is not None:
            candidates.append(desc)
        if role in TEXT_DISPLAY_ROLES:
            title = self.string(node, "AXTitle")
            if title is not None:
                candidates.append(title)
        return candidates

    def collect_text(self, node, limit=COLLECT_TEXT_LIMIT) -> List[str]:
        """First `limit` distinct non-empty text candidates of a subtree, depth-first."""
        results = []

        def walk(el):
            if len(results) >= limit:
                return
            for cand in self.text_candidates(el):
                s = cand.strip()
                if s and s not in results:
                    results.append(s)
                if len(results) >= limit:
                    return
            for ch in self.children(el):
                walk(ch)
                if len(results) >= limit:
                    return

        walk(node)
        return results

    # ---------------- Writes / actions ----------------
    def set(self, node, name, value) -> bool:
        return bool(self.provider.set_attribute(node, name, value))

    def perform(self, node, action) -> bool:
        return bool(self.provider.perform_action(node, action))

    def press(self, node) -> bool:
        return self.perform(node, "AXPress")

    def same(self, a, b) -> bool:
        return self.provider.same_node(a, b)

    # ---------------- Documents ----------------
    def element_info(self, node, pid, path, depth=0) -> dict:
        """Document for one node; children are included while depth > 0."""
        info = {"id": address.encode_address(pid, path)}
        role = self.role(node)
        if role is not None:
            info["role"] = role
        title = self.title(node)
        if title is not None:
            info["title"] = title
        ident = self.identifier(node)
        if ident is not None:
            info["identifier"] = ident
        enabled = self.boolean(node, "AXEnabled")
        if enabled is not None:
            info["enabled"] = enabled
        focused = self.boolean(node, "AXFocused")
        if focused is not None:
            info["focused"] = focused
        frame = self.frame(node)
        if frame is not None:
            info["frame"] = frame
        if depth > 0:
            kids = self.children(node)
            if kids:
                info["children"] = [
                    self.element_info(ch, pid, list(path) + [i], depth - 1)
                    for i, ch in enumerate(kids)
                ]
        return info
