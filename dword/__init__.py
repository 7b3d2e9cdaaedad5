"""d-word - a single-file terminal text editor."""

from .session import EditorSession, HandleResult
from .layout import LayoutState, render_frame
from .widgets import TextBuffer, Viewport

__all__ = [
    'EditorSession',
    'HandleResult',
    'LayoutState',
    'render_frame',
    'TextBuffer',
    'Viewport',
]
