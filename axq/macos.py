"""
Live macOS node provider over the AX API (pyobjc).

Raw CoreFoundation values are tagged into AXValue here and nowhere else:

    NSString / CFString            -> text
    NSAttributedString             -> rich_text (plain .string())
    CFBoolean                      -> boolean
    NSNumber                       -> number
    AXValue of type CGRect         -> rect
    AXUIElement                    -> node
    CFArray of AXUIElement         -> node_list

Everything else (points, sizes, ranges, URLs ...) is reported as none.
"""

from typing import List, Optional

from .errors import ProviderUnavailable
from .provider import (
    BOOLEAN, MISSING, NODE, NODE_LIST, NUMBER, RECT, RICH_TEXT, TEXT,
    AppRecord, AXValue, NodeProvider, Rect,
)

# ---------------- Accessibility ----------------
AX_DIRECT_OK = True
try:
    from ApplicationServices import (
        AXIsProcessTrusted, AXIsProcessTrustedWithOptions,
        AXUIElementCopyAttributeValue, AXUIElementCopyElementAtPosition,
        AXUIElementCreateApplication, AXUIElementCreateSystemWide,
        AXUIElementGetPid, AXUIElementGetTypeID, AXUIElementPerformAction,
        AXUIElementSetAttributeValue,
        AXValueCreate, AXValueGetType, AXValueGetTypeID, AXValueGetValue,
        kAXTrustedCheckOptionPrompt,
        kAXValueCGPointType, kAXValueCGRectType, kAXValueCGSizeType,
    )
    from CoreFoundation import CFArrayGetTypeID, CFEqual, CFGetTypeID
    from Quartz import CGPoint, CGSize
except Exception:
    AX_DIRECT_OK = False

try:
    from AppKit import NSAttributedString, NSWorkspace
except Exception:
    NSAttributedString = None
    NSWorkspace = None

kAXErrorSuccess = 0

# Attributes written as boxed CGPoint / CGSize
POINT_ATTRIBUTES = {"AXPosition"}
SIZE_ATTRIBUTES = {"AXSize"}


def _err_code(res):
    """AX calls return either an error code or (error, value) depending on the binding."""
    if isinstance(res, tuple):
        return res[0]
    return res


def _type_id(v):
    try:
        return CFGetTypeID(v)
    except Exception:
        return None


def _is_element(v):
    return v is not None and _type_id(v) == AXUIElementGetTypeID()


def _is_array(v):
    if isinstance(v, (list, tuple)):
        return True
    return _type_id(v) == CFArrayGetTypeID()


def _decode_rect(v) -> Optional[Rect]:
    """Unbox an AXValue holding a CGRect."""
    if _type_id(v) != AXValueGetTypeID():
        return None
    try:
        if AXValueGetType(v) != kAXValueCGRectType:
            return None
        out = AXValueGetValue(v, kAXValueCGRectType, None)
        rect = out[1] if isinstance(out, tuple) else out
        if not rect:
            return None
        (x, y), (w, h) = rect
        return Rect(float(x), float(y), float(w), float(h))
    except Exception:
        return None


def tag_value(v) -> AXValue:
    if v is None:
        return MISSING
    if NSAttributedString is not None and isinstance(v, NSAttributedString):
        return AXValue(RICH_TEXT, str(v.string()))
    if isinstance(v, str):
        return AXValue(TEXT, str(v))
    if isinstance(v, bool):
        return AXValue(BOOLEAN, bool(v))
    if isinstance(v, (int, float)):
        return AXValue(NUMBER, v)
    if _is_element(v):
        return AXValue(NODE, v)
    if _is_array(v):
        items = list(v)
        if all(_is_element(i) for i in items):
            return AXValue(NODE_LIST, items)
        return MISSING
    rect = _decode_rect(v)
    if rect is not None:
        return AXValue(RECT, rect)
    return MISSING


def _app_record(app) -> AppRecord:
    name = app.localizedName()
    bundle = app.bundleIdentifier()
    return AppRecord(
        int(app.processIdentifier()),
        str(name) if name else None,
        str(bundle) if bundle else None,
    )


class MacProvider(NodeProvider):
    """Reads and writes the live AX tree of this Mac."""

    def __init__(self, prompt=True):
        if not AX_DIRECT_OK or NSWorkspace is None:
            raise ProviderUnavailable()
        self.prompt = prompt
        self._system = None

    # ---------------- Trust ----------------
    def is_trusted(self):
        try:
            if AXIsProcessTrusted():
                return True
            if self.prompt:
                AXIsProcessTrustedWithOptions({kAXTrustedCheckOptionPrompt: True})
            return bool(AXIsProcessTrusted())
        except Exception:
            return False

    # ---------------- Apps ----------------
    def running_apps(self) -> List[AppRecord]:
        apps = NSWorkspace.sharedWorkspace().runningApplications() or []
        return [_app_record(app) for app in apps]

    def frontmost_app(self) -> Optional[AppRecord]:
        app = NSWorkspace.sharedWorkspace().frontmostApplication()
        return _app_record(app) if app is not None else None

    def app_element(self, pid):
        try:
            return AXUIElementCreateApplication(int(pid))
        except Exception:
            return None

    def system_wide(self):
        if self._system is None:
            self._system = AXUIElementCreateSystemWide()
        return self._system

    # ---------------- Attributes ----------------
    def _copy(self, el, attr):
        try:
            err, v = AXUIElementCopyAttributeValue(el, attr, None)
            return v if err == kAXErrorSuccess else None
        except Exception:
            return None

    def copy_attribute(self, node, name) -> AXValue:
        if node is None:
            return MISSING
        return tag_value(self._copy(node, name))

    def _box(self, name, value):
        if name in POINT_ATTRIBUTES:
            return AXValueCreate(kAXValueCGPointType, CGPoint(float(value[0]), float(value[1])))
        if name in SIZE_ATTRIBUTES:
            return AXValueCreate(kAXValueCGSizeType, CGSize(float(value[0]), float(value[1])))
        return value

    def set_attribute(self, node, name, value) -> bool:
        if node is None:
            return False
        try:
            err = AXUIElementSetAttributeValue(node, name, self._box(name, value))
            return _err_code(err) == kAXErrorSuccess
        except Exception:
            return False

    def perform_action(self, node, action) -> bool:
        if node is None:
            return False
        try:
            return _err_code(AXUIElementPerformAction(node, action)) == kAXErrorSuccess
        except Exception:
            return False

    def same_node(self, a, b):
        if a is None or b is None:
            return False
        try:
            return bool(CFEqual(a, b))
        except Exception:
            return False

    # ---------------- Geometry / ownership ----------------
    def element_at(self, x, y):
        try:
            err, el = AXUIElementCopyElementAtPosition(self.system_wide(), float(x), float(y), None)
        except Exception:
            return None
        if err != kAXErrorSuccess:
            return None
        return el

    def pid_of(self, node):
        try:
            maybe = AXUIElementGetPid(node, None)
        except Exception:
            return None
        if isinstance(maybe, tuple):
            err, pid = maybe
            return int(pid) if err == kAXErrorSuccess else None
        return int(maybe)
