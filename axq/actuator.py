"""
Synthetic input: pointer clicks, scrolling, typing and key chords.

Pointer and scroll events are posted as Quartz CGEvents. Named key chords go
through pyautogui; raw virtual key codes are posted as CGEvents. Typing
pastes through the clipboard (pyperclip + Cmd+V) unless a per-character
delay is requested, in which case pyautogui types it out.
"""

import sys
import time

from .errors import ProviderUnavailable

# ---------------- CoreGraphics ----------------
QUARTZ_OK = True
try:
    import Quartz
    from Quartz import (
        CGEventCreateKeyboardEvent, CGEventCreateMouseEvent,
        CGEventCreateScrollWheelEvent, CGEventPost, CGEventSetFlags,
        CGEventSetIntegerValueField,
        kCGEventFlagMaskAlternate, kCGEventFlagMaskCommand,
        kCGEventFlagMaskControl, kCGEventFlagMaskSecondaryFn,
        kCGEventFlagMaskShift,
        kCGEventLeftMouseDown, kCGEventLeftMouseUp, kCGEventMouseMoved,
        kCGHIDEventTap, kCGMouseButtonLeft, kCGMouseEventClickState,
        kCGScrollEventUnitLine,
    )
except Exception:
    QUARTZ_OK = False

# ---------------- Constants ----------------
HOVER_DELAY = 0.06
CLICK_DELAY = 0.02
PASTE_SETTLE = 0.1
KEY_DELAY = 0.05

# Virtual key code of 'v'
KEYCODE_V = 9

# Chord part -> pyautogui modifier name
MODIFIERS = {
    "cmd": "command",
    "command": "command",
    "shift": "shift",
    "alt": "option",
    "option": "option",
    "ctrl": "ctrl",
    "control": "ctrl",
    "fn": "fn",
    "function": "fn",
}

RAW_PREFIX = "raw:"


def parse_shortcut(shortcut: str):
    """'cmd+shift+p' -> (['command', 'shift'], 'p'); key is None when only modifiers are given."""
    modifiers = []
    key = None
    for part in (shortcut or "").lower().split("+"):
        part = part.strip()
        if not part:
            continue
        if part in MODIFIERS:
            mod = MODIFIERS[part]
            if mod not in modifiers:
                modifiers.append(mod)
        else:
            key = part
    return modifiers, key


def raw_keycode(key):
    """Integer code of a 'raw:<n>' key, else None."""
    if not key or not key.startswith(RAW_PREFIX):
        return None
    try:
        return int(key[len(RAW_PREFIX):])
    except ValueError:
        return None


def _log(debug, msg):
    if debug:
        print(msg, file=sys.stderr)


class Actuator:
    def __init__(self, debug=False):
        if not QUARTZ_OK:
            raise ProviderUnavailable("Quartz event bindings unavailable (requires macOS and pyobjc)")
        self.debug = debug

    # ---------------- Mouse ----------------
    def hover(self, point):
        CGEventPost(kCGHIDEventTap, CGEventCreateMouseEvent(None, kCGEventMouseMoved, point, 0))
        time.sleep(HOVER_DELAY)

    def click(self, point, button="left", count=1):
        pt = (float(point[0]), float(point[1]))
        if button == "right":
            down_type, up_type = Quartz.kCGEventRightMouseDown, Quartz.kCGEventRightMouseUp
            mouse_button = Quartz.kCGMouseButtonRight
        else:
            down_type, up_type = kCGEventLeftMouseDown, kCGEventLeftMouseUp
            mouse_button = kCGMouseButtonLeft
        self.hover(pt)
        for n in range(1, max(1, int(count)) + 1):
            down = CGEventCreateMouseEvent(None, down_type, pt, mouse_button)
            up = CGEventCreateMouseEvent(None, up_type, pt, mouse_button)
            CGEventSetIntegerValueField(down, kCGMouseEventClickState, n)
            CGEventSetIntegerValueField(up, kCGMouseEventClickState, n)
            CGEventPost(kCGHIDEventTap, down)
            time.sleep(CLICK_DELAY)
            CGEventPost(kCGHIDEventTap, up)
        _log(self.debug, f"[CLICK] {button} x{count} at ({pt[0]:.1f}, {pt[1]:.1f})")

    def scroll(self, delta):
        event = CGEventCreateScrollWheelEvent(None, kCGScrollEventUnitLine, 1, int(delta))
        CGEventPost(kCGHIDEventTap, event)
        _log(self.debug, f"[SCROLL] delta={delta}")

    # ---------------- Keyboard ----------------
    def _paste(self, text):
        import pyperclip

        old_clipboard = pyperclip.paste()
        pyperclip.copy(text)
        time.sleep(PASTE_SETTLE)

        v_down = CGEventCreateKeyboardEvent(None, KEYCODE_V, True)
        CGEventSetFlags(v_down, kCGEventFlagMaskCommand)
        CGEventPost(kCGHIDEventTap, v_down)
        time.sleep(KEY_DELAY)
        v_up = CGEventCreateKeyboardEvent(None, KEYCODE_V, False)
        CGEventPost(kCGHIDEventTap, v_up)

        time.sleep(PASTE_SETTLE)
        pyperclip.copy(old_clipboard)

    def type_text(self, text, delay_ms=0) -> bool:
        if not text:
            return False
        if not delay_ms:
            try:
                self._paste(text)
                _log(self.debug, f"[TYPE] paste: '{text}'")
                return True
            except Exception as e:
                _log(self.debug, f"[TYPE] paste failed: {e}")
        try:
            import pyautogui
            pyautogui.typewrite(text, interval=(delay_ms or 50) / 1000.0)
            _log(self.debug, f"[TYPE] typewrite: '{text}'")
            return True
        except Exception as e:
            _log(self.debug, f"[TYPE] failed: {e}")
            return False

    def _post_raw(self, code, modifiers):
        flags = 0
        for mod in modifiers:
            if mod == "command":
                flags |= kCGEventFlagMaskCommand
            elif mod == "shift":
                flags |= kCGEventFlagMaskShift
            elif mod == "option":
                flags |= kCGEventFlagMaskAlternate
            elif mod == "ctrl":
                flags |= kCGEventFlagMaskControl
            elif mod == "fn":
                flags |= kCGEventFlagMaskSecondaryFn
        down = CGEventCreateKeyboardEvent(None, code, True)
        up = CGEventCreateKeyboardEvent(None, code, False)
        if flags:
            CGEventSetFlags(down, flags)
            CGEventSetFlags(up, flags)
        CGEventPost(kCGHIDEventTap, down)
        time.sleep(KEY_DELAY)
        CGEventPost(kCGHIDEventTap, up)

    def key(self, shortcut) -> bool:
        """Press a chord such as 'cmd+c', 'f12' or 'raw:122'; False for unknown keys."""
        modifiers, key = parse_shortcut(shortcut)
        if key is None:
            return False
        code = raw_keycode(key)
        if code is not None:
            self._post_raw(code, modifiers)
            _log(self.debug, f"[KEY] raw {code} {modifiers}")
            return True
        if key.startswith(RAW_PREFIX):
            return False

        import pyautogui

        if key not in pyautogui.KEYBOARD_KEYS:
            _log(self.debug, f"[KEY] unknown key: {key}")
            return False
        try:
            if modifiers:
                pyautogui.hotkey(*modifiers, key)
                _log(self.debug, f"[KEY] Combo: {shortcut}")
            else:
                pyautogui.press(key)
                _log(self.debug, f"[KEY] Press: {key}")
            return True
        except Exception as e:
            _log(self.debug, f"[KEY] Failed: {e}")
            return False

    def supported_keys(self):
        import pyautogui

        keys = []
        for k in pyautogui.KEYBOARD_KEYS:
            if k.strip() and k not in keys:
                keys.append(k)
        return keys
