"""Key decoding for raw terminal input.

PUBLIC API:
  - decode_keys: Decode a chunk of stdin bytes into key names
  - decode_windows_key: Decode an msvcrt key code pair
"""

import re

# CSI ("ESC [") and SS3 ("ESC O") sequences, modifiers included
_ESCAPE_RE = re.compile(r"\x1b(\[[0-9;]*[A-Za-z~]|O[A-Za-z])")

ESCAPE_SEQUENCES = {
    "[A": "up",
    "[B": "down",
    "[C": "right",
    "[D": "left",
    "[H": "home",
    "[F": "end",
    "[1~": "home",
    "[7~": "home",
    "[4~": "end",
    "[8~": "end",
    "[5~": "page_up",
    "[6~": "page_down",
    "OA": "up",
    "OB": "down",
    "OC": "right",
    "OD": "left",
    "OH": "home",
    "OF": "end",
}

# Final byte of a modified CSI sequence such as ESC [1;5A
_MODIFIED_FINALS = {"A": "up", "B": "down", "C": "right", "D": "left", "H": "home", "F": "end"}

CONTROL_KEYS = {
    "\x03": "ctrl+c",
    "\x04": "ctrl+d",
    "\r": "enter",
    "\n": "enter",
    "\t": "tab",
    "\x7f": "backspace",
}

WINDOWS_KEYS = {
    b"H": "up",
    b"P": "down",
    b"K": "left",
    b"M": "right",
    b"I": "page_up",
    b"Q": "page_down",
    b"G": "home",
    b"O": "end",
}


def _decode_sequence(body: str) -> str | None:
    if body in ESCAPE_SEQUENCES:
        return ESCAPE_SEQUENCES[body]
    if body.startswith("[1;"):
        return _MODIFIED_FINALS.get(body[-1])
    return None


def decode_keys(data: bytes) -> list[str]:
    """Decode a chunk read from stdin into key names.

    Printable characters map to themselves; unknown escape sequences and
    control characters are dropped. A lone ESC decodes to "escape".
    """
    text = data.decode("utf-8", errors="ignore")
    keys: list[str] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\x1b":
            match = _ESCAPE_RE.match(text, i)
            if match:
                name = _decode_sequence(match.group(1))
                if name:
                    keys.append(name)
                i = match.end()
            else:
                keys.append("escape")
                i += 1
            continue

        if ch in CONTROL_KEYS:
            keys.append(CONTROL_KEYS[ch])
        elif ch.isprintable():
            keys.append(ch)
        i += 1
    return keys


def decode_windows_key(first: bytes, second: bytes | None = None) -> str | None:
    """Decode an msvcrt.getch() result (two codes for special keys)."""
    if first in (b"\x00", b"\xe0"):
        return WINDOWS_KEYS.get(second) if second else None
    return (decode_keys(first) or [None])[0]
