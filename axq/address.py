"""
Address Codec
=============

Stable textual identity for a node: the owning process id plus the ordered
child-index path from that process's application element.

    ax://<pid>/<i0>.<i1>...<in>

Paths produced by the query engine start with 0, which names the application
element itself; resolution skips that leading 0. An address is only as stable
as the tree: re-resolving against an unchanged tree yields the same node,
after a mutation it may fail or land on a different node.

Window addresses (ax://win/<windowNumber>) name a window by its AXWindowNumber
instead of a path.
"""

import re
from typing import List, Optional, Sequence, Tuple

SCHEME = "ax://"
WINDOW_PREFIX = SCHEME + "win/"

_INT = re.compile(r"[+-]?\d+")


def encode_address(pid: int, path: Sequence[int]) -> str:
    """Format an address; an empty path renders as 'ax://<pid>/'."""
    return f"{SCHEME}{int(pid)}/" + ".".join(str(int(i)) for i in path)


def decode_address(s: str) -> Optional[Tuple[int, List[int]]]:
    """Parse an address into (pid, path).

    None when the scheme is missing or the owner is not an integer.
    Non-numeric path segments are dropped, not rejected.
    """
    if not isinstance(s, str) or not s.startswith(SCHEME):
        return None
    rest = s[len(SCHEME):]
    owner, sep, path_part = rest.partition("/")
    if not sep or not _INT.fullmatch(owner):
        return None
    path = [int(seg) for seg in path_part.split(".") if _INT.fullmatch(seg)]
    return int(owner), path


def resolve_address(bridge, pid: int, path: Sequence[int]):
    """Replay `path` from the app element of `pid`; None on any out-of-range index."""
    element = bridge.provider.app_element(pid)
    if element is None:
        return None
    indices = list(path)
    if indices and indices[0] == 0:
        indices = indices[1:]
    for index in indices:
        kids = bridge.children(element)
        if index < 0 or index >= len(kids):
            return None
        element = kids[index]
    return element


def element_from_address(bridge, s: str):
    parsed = decode_address(s)
    if parsed is None:
        return None
    pid, path = parsed
    return resolve_address(bridge, pid, path)


def path_of(bridge, target, root, current=(0,)) -> Optional[List[int]]:
    """First depth-first index path from `root` to `target` (by provider identity)."""
    current = list(current)
    if bridge.same(target, root):
        return current
    for index, child in enumerate(bridge.children(root)):
        found = path_of(bridge, target, child, current + [index])
        if found is not None:
            return found
    return None


# ---------------- Window addresses ----------------
def window_address(number: int) -> str:
    return f"{WINDOW_PREFIX}{int(number)}"


def parse_window_address(s: str) -> Optional[int]:
    if not isinstance(s, str) or not s.startswith(WINDOW_PREFIX):
        return None
    num = s[len(WINDOW_PREFIX):]
    return int(num) if _INT.fullmatch(num) else None


def window_from_address(bridge, s: str, app_pid: Optional[int]):
    """Window named by ax://win/<n> among the app's windows, or any element address."""
    if isinstance(s, str) and s.startswith(WINDOW_PREFIX):
        target = parse_window_address(s)
        if target is None or app_pid is None:
            return None
        app_el = bridge.provider.app_element(app_pid)
        for window in bridge.elements(app_el, "AXWindows"):
            number = bridge.number(window, "AXWindowNumber")
            if number is not None and int(number) == target:
                return window
        return None
    return element_from_address(bridge, s)
