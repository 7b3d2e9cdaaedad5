"""Layout and frame rendering.

A frame is four regions stacked top to bottom, left aligned::

    title bar      1 row
    menu bar       1 row
    editing box    (width - 2) x (height - 8) interior, plus a rounded border
    status bar     1 row

The chrome budgets live in ``EditorConstants``. The viewport inside the box
is ``height - 10`` rows tall and the text buffer ``width - 4`` columns wide;
the box interior is larger than the viewport, so its last rows stay blank.
Every derived dimension is clamped at zero, so a terminal too small for the
chrome still renders (a degenerate frame) instead of raising.

All functions here are pure: they read a ``LayoutState`` snapshot and a
``Theme`` and return strings.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .constants import EditorConstants
from .theme import Theme

_DECIMAL_UNITS = (("GB", 1.0e9), ("MB", 1.0e6), ("KB", 1.0e3))


@dataclass(frozen=True)
class LayoutState:
    """What the renderer needs to know about the session."""
    is_ready: bool
    width: int = 0
    height: int = 0
    filename: str = ""
    file_size: int = 0
    size_unit: str = "auto"
    current_line: int = 1
    line_count: int = 1
    unique_lines: int = 1
    content_size: int = 0
    viewport_view: str = ""
    error: Optional[str] = None


def viewport_height(terminal_height: int) -> int:
    return max(0, terminal_height - EditorConstants.VIEWPORT_CHROME_ROWS)


def buffer_width(terminal_width: int) -> int:
    return max(0, terminal_width - EditorConstants.BUFFER_CHROME_COLUMNS)


def box_size(terminal_width: int, terminal_height: int) -> tuple[int, int]:
    """Interior (width, height) of the editing box."""
    return (max(0, terminal_width - EditorConstants.BOX_CHROME_COLUMNS),
            max(0, terminal_height - EditorConstants.BOX_CHROME_ROWS))


def format_size(num_bytes: int, unit: str = "auto") -> str:
    """Format a byte count with one decimal place.

    ``unit`` is one of "B", "KB", "MB", "GB" (decimal multiples) or "auto",
    which picks the largest unit the size reaches.

    >>> format_size(12)
    '12B'
    >>> format_size(12, "GB")
    '0.0GB'
    >>> format_size(2_500_000)
    '2.5MB'
    """
    if unit == "B":
        return f"{num_bytes}B"
    for name, factor in _DECIMAL_UNITS:
        if unit == name or (unit == "auto" and num_bytes >= factor):
            return f"{num_bytes / factor:.1f}{name}"
    return f"{num_bytes}B"


def _pad(text: str) -> str:
    return f" {text} "


def title_bar(state: LayoutState, theme: Theme) -> str:
    """Product label, file label and line label, the last one pushed right.

    The gap fills the terminal width exactly; when the labels are wider than
    the terminal the gap is empty and the bar is left to overflow.
    """
    title = theme.title(_pad(EditorConstants.PRODUCT_LABEL))
    file_info = theme.title(_pad(
        f"{state.filename} ({format_size(state.file_size, state.size_unit)})"))
    line_status = theme.title(_pad(f"Line: {state.current_line}/{state.line_count}"))

    used = theme.width(title) + theme.width(file_info) + theme.width(line_status)
    gap = " " * max(0, state.width - used)
    return title + file_info + gap + line_status


def menu_bar(state: LayoutState, theme: Theme) -> str:
    return theme.menu(theme.term.ljust(_pad(EditorConstants.MENU_ITEMS), state.width))


def status_bar(state: LayoutState, theme: Theme) -> str:
    if state.error:
        text = f"ERROR: {state.error} | {EditorConstants.SAVE_ERROR_HINT}"
    else:
        size = format_size(state.content_size, state.size_unit)
        text = (f"STATUS: {state.line_count} lines | "
                f"{state.unique_lines} unique | {size}")
    return theme.status(theme.term.ljust(_pad(text), state.width))


def editing_box(state: LayoutState, theme: Theme) -> str:
    """Rounded box whose interior shows the viewport."""
    inner_width, inner_height = box_size(state.width, state.height)
    g = theme.glyphs
    term = theme.term

    content = state.viewport_view.split('\n') if state.viewport_view else []
    rows = [theme.border(g.top_left + g.horizontal * inner_width + g.top_right)]
    for i in range(inner_height):
        line = content[i] if i < len(content) else ""
        if term.length(line) > inner_width:
            line = term.truncate(line, inner_width)
        line = term.ljust(line, inner_width)
        rows.append(theme.border(g.vertical) + line + theme.border(g.vertical))
    rows.append(theme.border(g.bottom_left + g.horizontal * inner_width + g.bottom_right))
    return '\n'.join(rows)


def render_frame(state: LayoutState, theme: Theme) -> str:
    """Compose the whole terminal surface for one state."""
    if not state.is_ready:
        return EditorConstants.INITIALIZING_MESSAGE
    return '\n'.join([
        title_bar(state, theme),
        menu_bar(state, theme),
        editing_box(state, theme),
        status_bar(state, theme),
    ])
