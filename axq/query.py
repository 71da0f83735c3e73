"""
Query Engine
============

Depth-first, pre-order search over the live tree.

- find_elements(): every node of a subtree matching a Predicate, parents
  before children, siblings in child order. No early exit, no reordering;
  callers that want "the first match" take matches[0].
- ancestor_with_role(): replay a path and return the nearest node on it with
  a given role.
- wait_for(): the poll loop used by `wait`.

Nothing is cached: every attribute read hits the provider, so the tree may
change between two reads of the same query. That is accepted, not handled.
"""

import time
from dataclasses import dataclass
from typing import List, NamedTuple, Optional, Sequence

from . import address
from .bridge import normalize_role
from .errors import InvalidPredicate
from .titles import title_matches

# Poll interval of wait_for (seconds)
POLL_INTERVAL = 0.2


@dataclass
class Predicate:
    """Conjunction of optional conditions; absent ones always hold."""
    role: Optional[str] = None
    title: Optional[str] = None
    identifier: Optional[str] = None
    text: Optional[str] = None
    text_descendants: bool = False

    def validate(self):
        if self.text_descendants and self.text is None:
            raise InvalidPredicate("--descendants requires --text")
        return self


class Match(NamedTuple):
    node: object
    path: List[int]

    def address(self, pid):
        return address.encode_address(pid, self.path)


# ---------------- Predicate evaluation ----------------
def _candidate_hit(candidates, needle, match_options):
    if match_options is None:
        return any(needle in c.lower() for c in candidates)
    return any(title_matches(c, needle, match_options) for c in candidates)


def matches_text(bridge, node, text, role=None, include_descendants=False, match_options=None):
    """True if a text candidate of `node` (or, optionally, of a descendant) contains `text`."""
    needle = text.lower() if match_options is None else text
    return _matches_text(bridge, node, role, needle, include_descendants, match_options)


def _matches_text(bridge, node, role, needle, include_descendants, match_options):
    if _candidate_hit(bridge.text_candidates(node, role), needle, match_options):
        return True
    if not include_descendants:
        return False
    for child in bridge.children(node):
        if _matches_text(bridge, child, None, needle, True, match_options):
            return True
    return False


def match_element(bridge, node, predicate: Predicate, match_options=None) -> bool:
    actual_role = bridge.role(node) or ""
    if predicate.role is not None and normalize_role(predicate.role) != actual_role:
        return False
    if predicate.title is not None and predicate.title != (bridge.title(node) or ""):
        return False
    if predicate.identifier is not None and predicate.identifier != (bridge.identifier(node) or ""):
        return False
    if predicate.text is not None:
        if not matches_text(bridge, node, predicate.text, role=actual_role,
                            include_descendants=predicate.text_descendants,
                            match_options=match_options):
            return False
    return True


# ---------------- Traversal ----------------
def find_elements(bridge, root, predicate: Predicate, root_path: Sequence[int] = (0,),
                  match_options=None) -> List[Match]:
    """All matches under `root` (root included) in pre-order."""
    matches = []

    def walk(el, path):
        if match_element(bridge, el, predicate, match_options):
            matches.append(Match(el, path))
        for idx, child in enumerate(bridge.children(el)):
            walk(child, path + [idx])

    walk(root, list(root_path))
    return matches


def ancestor_with_role(bridge, path: Sequence[int], root, role: str):
    """Nearest node with `role` on the lineage root -> ... -> path target."""
    lineage = [root]
    current = root
    for index in list(path)[1:]:
        kids = bridge.children(current)
        if index < 0 or index >= len(kids):
            break
        current = kids[index]
        lineage.append(current)
    wanted = normalize_role(role)
    for el in reversed(lineage):
        if (bridge.role(el) or "") == wanted:
            return el
    return None


# ---------------- Containers ----------------
def find_window_root(bridge, app_el, window_title: str):
    """(window, path) of the first window whose title contains `window_title`, case-insensitive."""
    wanted = window_title.casefold()
    for window in bridge.elements(app_el, "AXWindows"):
        title = bridge.string(window, "AXTitle")
        if title is not None and wanted in title.casefold():
            path = address.path_of(bridge, window, app_el) or [0]
            return window, path
    return None


def _collect_role(bridge, root, role):
    found = []

    def walk(el):
        if bridge.role(el) == role:
            found.append(el)
        for ch in bridge.children(el):
            walk(ch)

    walk(root)
    return found


def find_outline(bridge, root, title: Optional[str] = None):
    outlines = _collect_role(bridge, root, "AXOutline")
    if not title:
        return outlines[0] if outlines else None
    wanted = title.casefold()
    for outline in outlines:
        if wanted in (bridge.title(outline) or "").casefold():
            return outline
    return None


def outline_rows(bridge, outline):
    return _collect_role(bridge, outline, "AXRow")


# ---------------- Polling ----------------
def wait_for(probe, gone=False, timeout=5.0, interval=POLL_INTERVAL,
             clock=time.monotonic, sleep=time.sleep) -> bool:
    """Re-run `probe` until it reports found (or not found when `gone`).

    Returns False once `timeout` seconds have elapsed without that outcome.
    """
    deadline = clock() + timeout
    while True:
        found = bool(probe())
        if found != gone:
            return True
        if clock() >= deadline:
            return False
        sleep(interval)
