"""
Title matching for menus and status items.

macOS menu titles are inconsistent: "Settings…" with the ellipsis glyph in
one app, "Settings..." in another, stray double spaces in localized builds.
MatchOptions select how forgiving a comparison is; both sides of a
comparison always go through the same normalization.
"""

import re
from dataclasses import dataclass

_WS = re.compile(r"\s+")


@dataclass(frozen=True)
class MatchOptions:
    contains: bool = False
    case_insensitive: bool = False
    normalize_ellipsis: bool = False


EXACT = MatchOptions()


def normalize_title(text: str, options: MatchOptions = EXACT) -> str:
    """Trim, optionally fold '…' to '...', collapse whitespace, optionally case-fold."""
    value = text.strip()
    if options.normalize_ellipsis:
        value = value.replace("…", "...")
    value = _WS.sub(" ", value).strip()
    if options.case_insensitive:
        value = value.casefold()
    return value


def title_matches(candidate: str, query: str, options: MatchOptions = EXACT) -> bool:
    lhs = normalize_title(candidate, options)
    rhs = normalize_title(query, options)
    if options.contains:
        return rhs in lhs
    return lhs == rhs
