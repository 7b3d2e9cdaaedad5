"""Terminal interface using Blessed for display and Curtsies for input."""

import select
import sys
from typing import Optional

import blessed
from curtsies import Input


class TerminalInterface:
    """Handles terminal I/O using Blessed."""

    def __init__(self, terminal: Optional[blessed.Terminal] = None):
        """Initialize with a terminal instance (or create one)."""
        self.term = terminal or blessed.Terminal()
        self.is_fullscreen = False
        self._input: Optional[Input] = None
        # Last drawn frame, for minimal updates
        self._last_rows: Optional[list[str]] = None
        self._last_size: Optional[tuple[int, int]] = None

    def setup(self):
        """Enter fullscreen mode and start reading raw key tokens."""
        print(self.term.enter_fullscreen, end='')
        print(self.term.hide_cursor, end='')
        print(self.term.clear, end='', flush=True)
        self.is_fullscreen = True
        if self._input is None:
            self._input = Input(keynames='curtsies')
            self._input.__enter__()

    def cleanup(self):
        """Exit fullscreen mode and restore terminal."""
        if self._input is not None:
            try:
                self._input.__exit__(None, None, None)
            finally:
                self._input = None
        if self.is_fullscreen:
            print(self.term.exit_fullscreen, end='')
            print(self.term.normal_cursor, end='', flush=True)
            self.is_fullscreen = False

    def invalidate_frame(self) -> None:
        """Make the next draw_frame clear the screen and repaint everything."""
        self._last_rows = None
        self._last_size = None

    def draw_frame(self, frame: str) -> None:
        """Draw a frame, rewriting only rows that changed since the last one.

        Falls back to a full clear on first paint or when the terminal size
        changed.
        """
        rows = frame.split('\n')
        size = self.size
        if self._last_rows is None or self._last_size != size:
            print(self.term.home + self.term.clear, end='')
            self._last_rows = []
            self._last_size = size

        for y, row in enumerate(rows):
            if y < len(self._last_rows) and self._last_rows[y] == row:
                continue
            print(self.term.move_yx(y, 0) + row + self.term.clear_eol, end='')
        # Blank rows the previous frame used but this one does not
        for y in range(len(rows), len(self._last_rows)):
            print(self.term.move_yx(y, 0) + self.term.clear_eol, end='')
        print('', end='', flush=True)
        self._last_rows = rows

    def get_key(self, timeout=None):
        """Get a single key token from the user.

        Args:
            timeout: Timeout in seconds (None for blocking, 0 for non-blocking)

        Returns:
            The curtsies key name as a string, or None on timeout.
        """
        if self._input is None:
            return None
        if timeout is not None:
            ready, _, _ = select.select([sys.stdin], [], [], float(timeout))
            if not ready:
                return None
        evt = next(self._input)
        return str(evt) if evt is not None else None

    @property
    def size(self) -> tuple[int, int]:
        """Terminal (width, height)."""
        return (self.term.width, self.term.height)
