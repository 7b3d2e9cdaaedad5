"""Text buffer and viewport widgets driven by the editor session.

Both widgets expose the same narrow interface the session relies on:
``set_width``, ``set_height``, ``view``, ``handle_event`` and, per widget,
``set_content``/``set_value`` and ``line_count``. ``handle_event`` returns
True when the widget's view changed and the frame should be redrawn.
"""

from dataclasses import dataclass
from typing import Callable, Optional

from wcwidth import wcwidth

from .constants import EditorConstants
from .events import TickEvent
from .keyboard import KeyEvent, KeyType


@dataclass
class CursorPosition:
    line_index: int = 0
    character_index: int = 0


@dataclass
class VisualRow:
    """One screen row of a soft-wrapped logical line."""
    line_index: int
    start: int  # Index of the first character in the logical line
    text: str


def _identity(text: str) -> str:
    return text


def _cell_width(ch: str) -> int:
    # Control characters report -1; they take no cell of their own
    return max(0, wcwidth(ch))


def _text_width(text: str) -> int:
    return sum(_cell_width(ch) for ch in text)


class TextBuffer:
    """Editable multi-line text with a cursor, soft-wrapped by terminal cells.

    ``height`` is the page size for page up and page down.
    """

    def __init__(self, content: str = "",
                 width: int = EditorConstants.INITIAL_BUFFER_WIDTH,
                 height: int = EditorConstants.INITIAL_BUFFER_HEIGHT):
        self.lines: list[str] = [""]
        self.cursor = CursorPosition()
        self.width = max(0, width)
        self.height = max(0, height)
        self.cursor_visible = True
        # Applied to the character under the cursor when drawing
        self.cursor_format: Callable[[str], str] = _identity
        self._desired_column: Optional[int] = None
        self.set_value(content)

    # --- content ---

    @property
    def value(self) -> str:
        return '\n'.join(self.lines)

    def set_value(self, text: str) -> None:
        """Replace the content and put the cursor at the end of it."""
        self.lines = text.split('\n')
        self.cursor = CursorPosition(len(self.lines) - 1, len(self.lines[-1]))
        self._desired_column = None

    def line_count(self) -> int:
        return len(self.lines)

    def current_line(self) -> int:
        """1-based line number of the cursor."""
        return self.cursor.line_index + 1

    # --- geometry ---

    def set_width(self, width: int) -> None:
        self.width = max(0, width)

    def set_height(self, height: int) -> None:
        self.height = max(0, height)

    # --- events ---

    def handle_event(self, event) -> bool:
        if isinstance(event, TickEvent):
            self.cursor_visible = not self.cursor_visible
            return True
        if not isinstance(event, KeyEvent):
            return False

        handled = self._handle_key(event)
        if handled:
            self.cursor_visible = True
        return handled

    def _handle_key(self, event: KeyEvent) -> bool:
        if event.key_type == KeyType.REGULAR:
            if event.value == '\t':
                col = self.cursor.character_index
                self.insert_text(' ' * (EditorConstants.TAB_WIDTH - col % EditorConstants.TAB_WIDTH))
            elif event.value.isprintable():
                self.insert_text(event.value)
            else:
                return False
            return True

        if event.key_type == KeyType.CTRL:
            action = {
                'a': self.move_beginning_of_line,
                'e': self.move_end_of_line,
                'k': self.kill_line,
                'd': self.delete_char,
                'h': self.backspace,
            }.get(event.value)
        elif event.key_type == KeyType.SPECIAL:
            action = {
                'enter': self.newline,
                'backspace': self.backspace,
                'delete': self.delete_char,
                'left': self.left_char,
                'right': self.right_char,
                'up': self.up_line,
                'down': self.down_line,
                'home': self.move_beginning_of_line,
                'end': self.move_end_of_line,
                'page_up': self.page_up,
                'page_down': self.page_down,
            }.get(event.value)
        else:
            action = None

        if action is None:
            return False
        if action not in (self.up_line, self.down_line, self.page_up, self.page_down):
            self._desired_column = None
        action()
        return True

    # --- editing ---

    def insert_text(self, text: str) -> None:
        """Insert text at the cursor; newlines split the current line."""
        row = self.cursor.line_index
        col = self.cursor.character_index
        line = self.lines[row]
        parts = text.split('\n')
        tail = line[col:]
        parts[0] = line[:col] + parts[0]
        new_col = len(parts[-1])
        parts[-1] += tail
        self.lines[row:row + 1] = parts
        self.cursor = CursorPosition(row + len(parts) - 1, new_col)

    def newline(self) -> None:
        self.insert_text('\n')

    def backspace(self) -> None:
        row = self.cursor.line_index
        col = self.cursor.character_index
        if col > 0:
            line = self.lines[row]
            self.lines[row] = line[:col - 1] + line[col:]
            self.cursor.character_index -= 1
        elif row > 0:
            # Join with the previous line
            prev_len = len(self.lines[row - 1])
            self.lines[row - 1] += self.lines.pop(row)
            self.cursor = CursorPosition(row - 1, prev_len)

    def delete_char(self) -> None:
        row = self.cursor.line_index
        col = self.cursor.character_index
        line = self.lines[row]
        if col < len(line):
            self.lines[row] = line[:col] + line[col + 1:]
        elif row + 1 < len(self.lines):
            self.lines[row] += self.lines.pop(row + 1)

    def kill_line(self) -> None:
        """Delete to end of line, or join with the next line at its end."""
        row = self.cursor.line_index
        col = self.cursor.character_index
        if col == len(self.lines[row]):
            self.delete_char()
        else:
            self.lines[row] = self.lines[row][:col]

    # --- movement ---

    def left_char(self) -> None:
        if self.cursor.character_index > 0:
            self.cursor.character_index -= 1
        elif self.cursor.line_index > 0:
            self.cursor.line_index -= 1
            self.cursor.character_index = len(self.lines[self.cursor.line_index])

    def right_char(self) -> None:
        if self.cursor.character_index < len(self.lines[self.cursor.line_index]):
            self.cursor.character_index += 1
        elif self.cursor.line_index + 1 < len(self.lines):
            self.cursor.line_index += 1
            self.cursor.character_index = 0

    def move_beginning_of_line(self) -> None:
        self.cursor.character_index = 0

    def move_end_of_line(self) -> None:
        self.cursor.character_index = len(self.lines[self.cursor.line_index])

    def up_line(self) -> None:
        self._move_lines(-1)

    def down_line(self) -> None:
        self._move_lines(1)

    def page_up(self) -> None:
        self._move_lines(-max(1, self.height))

    def page_down(self) -> None:
        self._move_lines(max(1, self.height))

    def _move_lines(self, delta: int) -> None:
        # Vertical moves keep the column the cursor started from
        if self._desired_column is None:
            self._desired_column = self.cursor.character_index
        row = min(max(0, self.cursor.line_index + delta), len(self.lines) - 1)
        self.cursor.line_index = row
        self.cursor.character_index = min(self._desired_column, len(self.lines[row]))

    # --- rendering ---

    def _wrap(self, line: str) -> list[tuple[int, str]]:
        """Split one logical line into (start, text) pieces that fit the width in cells."""
        width = max(1, self.width)
        pieces = []
        start = 0
        cells = 0
        for i, ch in enumerate(line):
            w = _cell_width(ch)
            # A single character wider than the buffer still gets a row
            if cells + w > width and i > start:
                pieces.append((start, line[start:i]))
                start, cells = i, 0
            cells += w
        pieces.append((start, line[start:]))
        return pieces

    def visual_rows(self) -> list[VisualRow]:
        """Soft-wrap every logical line at the buffer width."""
        rows: list[VisualRow] = []
        width = max(1, self.width)
        for index, line in enumerate(self.lines):
            pieces = self._wrap(line)
            for start, text in pieces:
                rows.append(VisualRow(index, start, text))
            # Cursor parked after a row with no cell left for it
            if (index == self.cursor.line_index and line
                    and self.cursor.character_index == len(line)
                    and _text_width(pieces[-1][1]) + 1 > width):
                rows.append(VisualRow(index, len(line), ""))
        return rows

    def _cursor_row(self, rows: list[VisualRow]) -> int:
        found = 0
        for i, row in enumerate(rows):
            if row.line_index == self.cursor.line_index:
                if row.start <= self.cursor.character_index:
                    found = i
            elif row.line_index > self.cursor.line_index:
                break
        return found

    def cursor_row(self) -> int:
        """Index of the visual row holding the cursor in ``view()``."""
        return self._cursor_row(self.visual_rows())

    def view(self) -> str:
        """Every visual row, with the cursor drawn on its character.

        The rows are not clipped to ``height``; the viewport showing them
        owns the vertical window.
        """
        if self.width == 0:
            return ""
        rows = self.visual_rows()
        cursor_row = self._cursor_row(rows)
        out = []
        for i, row in enumerate(rows):
            text = row.text
            if i == cursor_row and self.cursor_visible:
                x = self.cursor.character_index - row.start
                under = text[x] if x < len(text) else ' '
                text = text[:x] + self.cursor_format(under) + text[x + 1:]
            out.append(text)
        return '\n'.join(out)


class Viewport:
    """A window of ``height`` lines over some rendered content."""

    def __init__(self, width: int = 0, height: int = 0):
        self.width = max(0, width)
        self.height = max(0, height)
        self.y_offset = 0
        self._lines: list[str] = []

    def set_width(self, width: int) -> None:
        self.width = max(0, width)

    def set_height(self, height: int) -> None:
        self.height = max(0, height)
        self._clamp_offset()

    def set_content(self, content: str) -> None:
        self._lines = content.split('\n') if content else []
        self._clamp_offset()

    def line_count(self) -> int:
        return len(self._lines)

    def _clamp_offset(self) -> None:
        max_offset = max(0, len(self._lines) - self.height)
        self.y_offset = min(max(0, self.y_offset), max_offset)

    def ensure_visible(self, row: int) -> None:
        """Scroll the least amount that brings ``row`` into the window."""
        if row < self.y_offset:
            self.y_offset = row
        elif row >= self.y_offset + self.height:
            self.y_offset = row - self.height + 1
        self._clamp_offset()

    def scroll(self, delta: int) -> bool:
        before = self.y_offset
        self.y_offset += delta
        self._clamp_offset()
        return self.y_offset != before

    def handle_event(self, event) -> bool:
        if isinstance(event, KeyEvent) and event.key_type == KeyType.ALT:
            if event.value == 'up':
                return self.scroll(-1)
            if event.value == 'down':
                return self.scroll(1)
        return False

    def view(self) -> str:
        return '\n'.join(self._lines[self.y_offset:self.y_offset + self.height])
