"""
Document Serializer
===================

Renders result documents (scalars, dicts, lists nested arbitrarily) either as
JSON envelopes or as an indented text report.

JSON
    success -> {"ok": true, "data": ...} on stdout ({"ok": true} without data)
    failure -> {"ok": false, "error": "..."} on stderr
    If a document cannot be encoded, a fixed error envelope is written instead.

Text
    scalars print as-is (true/false, decimals, null); lists print one "- item"
    per line; a dict inside a list is headed by its first scalar label key
    (title, name, label, id) with the remaining keys nested below; dict keys
    print sorted. Two keys get special layouts: a "frame" rect collapses to one
    line, and "children" wrapping a single AXMenu is replaced by the menu's own
    children.

The format is always passed in by the caller.
"""

import json
import sys
from collections.abc import Mapping

from .errors import EncodingFailure

TEXT = "text"
JSON = "json"
FORMATS = (TEXT, JSON)

INDENT = 2
LABEL_KEYS = ("title", "name", "label", "id")
FRAME_KEYS = ("x", "y", "width", "height")
MENU_CONTAINER_ROLE = "AXMenu"

ENCODING_FALLBACK = '{"ok":false,"error":"Failed to encode JSON"}'


def parse_format(value):
    """'text' or 'json' (any case); None for anything else."""
    v = (value or "").lower()
    return v if v in FORMATS else None


# ---------------- Envelopes ----------------
def ok_payload(data=None):
    if data is not None:
        return {"ok": True, "data": data}
    return {"ok": True}


def error_payload(message):
    return {"ok": False, "error": message}


def encode_json(obj) -> str:
    try:
        return json.dumps(obj, ensure_ascii=False, allow_nan=False, separators=(",", ":"))
    except (TypeError, ValueError) as e:
        raise EncodingFailure(f"Failed to encode JSON: {e}") from e


# ---------------- Text rendering ----------------
def _is_list(value):
    return isinstance(value, (list, tuple))


def is_scalar(value):
    return value is None or isinstance(value, (str, bool, int, float))


def render_scalar(value):
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    return str(value)


def render_text(value, indent=0):
    """Lines for any document value at the given indent."""
    if isinstance(value, Mapping):
        return _render_dict(value, indent)
    if _is_list(value):
        return _render_list(value, indent)
    return [" " * indent + render_scalar(value)]


def _first_label(d):
    for key in LABEL_KEYS:
        if key in d and is_scalar(d[key]):
            return key, d[key]
    return None


def _render_dict_item(d, indent):
    prefix = " " * indent
    label = _first_label(d)
    if label is not None:
        key, value = label
        lines = [f"{prefix}- {render_scalar(value)}"]
        rest = {k: v for k, v in d.items() if k != key}
        if rest:
            lines.extend(render_text(rest, indent + INDENT))
        return lines
    return [prefix + "-"] + render_text(d, indent + INDENT)


def _frame_inline(value):
    if not isinstance(value, Mapping):
        return None
    if not all(k in value for k in FRAME_KEYS):
        return None
    x, y, w, h = (render_scalar(value[k]) for k in FRAME_KEYS)
    return f"frame: x={x} y={y} w={w} h={h}"


def _flatten_menu_children(value):
    if not _is_list(value) or len(value) != 1:
        return None
    menu = value[0]
    if not isinstance(menu, Mapping) or menu.get("role") != MENU_CONTAINER_ROLE:
        return None
    return menu.get("children")


def _render_dict(d, indent):
    prefix = " " * indent
    if not d:
        return [prefix + "{}"]
    lines = []
    for key in sorted(d):
        entry = d[key]
        if key == "frame" and _frame_inline(entry) is not None:
            lines.append(prefix + _frame_inline(entry))
            continue
        if key == "children":
            flattened = _flatten_menu_children(entry)
            if flattened is not None:
                lines.append(prefix + "children:")
                lines.extend(render_text(flattened, indent + INDENT))
                continue
        if is_scalar(entry):
            lines.append(f"{prefix}{key}: {render_scalar(entry)}")
        else:
            lines.append(f"{prefix}{key}:")
            lines.extend(render_text(entry, indent + INDENT))
    return lines


def _render_list(items, indent):
    prefix = " " * indent
    if not items:
        return [prefix + "[]"]
    lines = []
    for item in items:
        if is_scalar(item):
            lines.append(f"{prefix}- {render_scalar(item)}")
        elif isinstance(item, Mapping):
            lines.extend(_render_dict_item(item, indent))
        else:
            lines.append(prefix + "-")
            lines.extend(render_text(item, indent + INDENT))
    return lines


def render(data, fmt=TEXT) -> str:
    """Full success output (without trailing newline); '' when text mode has nothing to say."""
    if fmt == JSON:
        try:
            return encode_json(ok_payload(data))
        except EncodingFailure:
            return ENCODING_FALLBACK
    if data is None:
        return ""
    return "\n".join(render_text(data))


# ---------------- Emitters ----------------
def _write(stream, text):
    stream.write(text + "\n")
    stream.flush()


def emit_ok(data=None, fmt=TEXT, quiet=False, stream=None):
    if quiet:
        return
    stream = stream or sys.stdout
    if fmt == JSON:
        _write(stream, render(data, JSON))
        return
    if data is None:
        return
    _write(stream, render(data, TEXT))


def emit_error(message, fmt=TEXT, quiet=False, stream=None):
    if quiet:
        return
    stream = stream or sys.stderr
    if fmt == JSON:
        try:
            _write(stream, encode_json(error_payload(message)))
        except EncodingFailure:
            _write(stream, ENCODING_FALLBACK)
        return
    _write(stream, f"error: {message}")
