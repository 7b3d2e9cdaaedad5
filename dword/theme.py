"""Colours and border glyphs, built once at start-up and passed to the renderer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import blessed

from .config import EditorConfig

Style = Callable[[str], str]


def _unstyled(text: str) -> str:
    return text


@dataclass(frozen=True)
class BoxGlyphs:
    top_left: str = "╭"
    top_right: str = "╮"
    bottom_left: str = "╰"
    bottom_right: str = "╯"
    horizontal: str = "─"
    vertical: str = "│"


@dataclass(frozen=True)
class Theme:
    """Everything the layout engine needs to style a frame.

    ``term`` is also used to measure printable widths, which ignore the
    escape sequences the styles add.
    """
    term: blessed.Terminal
    title: Style = _unstyled
    menu: Style = _unstyled
    status: Style = _unstyled
    border: Style = _unstyled
    cursor: Style = _unstyled
    glyphs: BoxGlyphs = BoxGlyphs()

    @classmethod
    def plain(cls, term: blessed.Terminal) -> "Theme":
        return cls(term=term)

    @classmethod
    def from_config(cls, term: blessed.Terminal, config: EditorConfig) -> "Theme":
        def colours(fg: int, bg: int | None = None) -> Style:
            def apply(text: str) -> str:
                if not text:
                    return text
                out = term.color(fg)(text)
                if bg is not None:
                    out = term.on_color(bg)(out)
                return out
            return apply

        return cls(
            term=term,
            title=colours(config.title_fg, config.title_bg),
            menu=colours(config.menu_fg, config.menu_bg),
            status=colours(config.status_fg, config.status_bg),
            border=colours(config.border_fg),
            cursor=lambda text: term.reverse(text),
        )

    def width(self, text: str) -> int:
        """Printable width of ``text``."""
        return self.term.length(text)
