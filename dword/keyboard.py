"""Keyboard input handling using curtsies-style tokens."""

from typing import Optional
from dataclasses import dataclass
from enum import Enum


class KeyType(Enum):
    """Types of key events."""
    REGULAR = "regular"
    ALT = "alt"
    CTRL = "ctrl"
    SPECIAL = "special"
    SHIFT_SPECIAL = "shift_special"  # Shift + arrow keys, etc.


@dataclass(frozen=True)
class KeyEvent:
    """A parsed keyboard event."""
    key_type: KeyType
    value: str  # The base key (e.g., 'a', 'left', 'backspace')
    raw: str  # The token as read from the terminal
    is_alt: bool = False
    is_ctrl: bool = False
    is_shift: bool = False

    def matches(self, key_type: KeyType, value: str) -> bool:
        return self.key_type == key_type and self.value == value


SPECIAL_KEYS = frozenset({
    'left', 'right', 'up', 'down', 'home', 'end', 'enter', 'backspace',
    'delete', 'page_up', 'page_down', 'insert',
})

# Alternative spellings curtsies and terminals use for the same key
_ALIASES = {
    'pageup': 'page_up',
    'pagedown': 'page_down',
    'esc': 'escape',
    'return': 'enter',
    'del': 'delete',
    'spc': 'space',
    'spacebar': 'space',
}


def _ctrl_letter(letter: str, raw: str) -> KeyEvent:
    # Terminals send Ctrl-J and Ctrl-M for Enter
    if letter in ('j', 'm'):
        return KeyEvent(KeyType.SPECIAL, 'enter', raw)
    return KeyEvent(KeyType.CTRL, letter, raw, is_ctrl=True)


class KeyboardHandler:
    """Reads tokens from the terminal and turns them into KeyEvents."""

    def __init__(self, terminal_interface):
        self.terminal = terminal_interface

    def get_key_event(self, timeout: Optional[float] = None) -> Optional[KeyEvent]:
        """Get the next key event, or None if nothing arrived in time."""
        key = self.terminal.get_key(timeout)
        if not key:
            return None
        return self.parse_key(key)

    def parse_key(self, key) -> KeyEvent:
        """Parse a curtsies token (or a raw character) into a KeyEvent.

        Curtsies names keys like '<LEFT>', '<Ctrl-s>', '<Esc+b>' or
        '<SHIFT-TAB>'; plain characters come through unchanged.
        """
        key_str = str(key)
        if len(key_str) > 2 and key_str.startswith('<') and key_str.endswith('>'):
            return self._parse_token(key_str)

        if len(key_str) == 1:
            code = ord(key_str)
            if code == 27:
                return KeyEvent(KeyType.SPECIAL, 'escape', key_str)
            if code in (8, 127):
                return KeyEvent(KeyType.SPECIAL, 'backspace', key_str)
            if code == 9:
                return KeyEvent(KeyType.REGULAR, '\t', key_str)
            if 1 <= code <= 26:
                return _ctrl_letter(chr(ord('a') + code - 1), key_str)

        return KeyEvent(KeyType.REGULAR, key_str, key_str)

    def _parse_token(self, key_str: str) -> KeyEvent:
        name = key_str[1:-1].lower().replace('+', '-')
        parts = name.split('-')
        # A trailing '-' means the key itself is a dash, e.g. '<Ctrl-->'
        if name.endswith('--'):
            parts = parts[:-2] + ['-']
        base = _ALIASES.get(parts[-1], parts[-1])
        mods = {_ALIASES.get(m, m) for m in parts[:-1]}
        if 'meta' in mods or 'escape' in mods:
            mods.add('alt')

        if not mods:
            if base == 'space':
                return KeyEvent(KeyType.REGULAR, ' ', ' ')
            if base == 'tab':
                return KeyEvent(KeyType.REGULAR, '\t', '\t')
            if base == 'escape':
                return KeyEvent(KeyType.SPECIAL, 'escape', '\x1b')
        if 'ctrl' in mods and len(base) == 1:
            return _ctrl_letter(base, key_str)
        if 'alt' in mods and (base in SPECIAL_KEYS or len(base) == 1):
            return KeyEvent(KeyType.ALT, base, key_str, is_alt=True)
        if 'shift' in mods and base in SPECIAL_KEYS:
            return KeyEvent(KeyType.SHIFT_SPECIAL, base, key_str, is_shift=True)
        # Plain specials, function keys and anything curtsies names that we
        # do not bind
        return KeyEvent(KeyType.SPECIAL, base, key_str)
