"""Non-keyboard events fed to the editor session."""

from dataclasses import dataclass
from typing import Union

from .keyboard import KeyEvent


@dataclass(frozen=True)
class ResizeEvent:
    """The terminal now has ``width`` columns and ``height`` rows."""
    width: int
    height: int


@dataclass(frozen=True)
class TickEvent:
    """Periodic wake-up from the driver, used for the cursor blink."""


Event = Union[KeyEvent, ResizeEvent, TickEvent]
