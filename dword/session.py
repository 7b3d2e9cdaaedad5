"""Editor session: the state of one editing run and its event dispatch.

The session owns the filename, the file size seen at start-up, the text
buffer and viewport widgets and the latest terminal size. Every event goes
through ``EditorSession.handle``, which updates that state, refreshes the
viewport and returns the next frame together with any exit request or save
failure. The session never exits the process itself; the driver decides.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .constants import EditorConstants
from .events import Event, ResizeEvent, TickEvent
from .file_access import FileAccess, FileAccessError
from .keyboard import KeyEvent, KeyType
from .layout import LayoutState, buffer_width, render_frame, viewport_height
from .theme import Theme
from .widgets import TextBuffer, Viewport

logger = logging.getLogger(__name__)

SAVE_KEYS = frozenset({(KeyType.CTRL, 's')})
QUIT_KEYS = frozenset({(KeyType.CTRL, 'q'), (KeyType.SPECIAL, 'escape')})


@dataclass(frozen=True)
class HandleResult:
    """Outcome of one event.

    Attributes:
        frame: The frame to display, or None when the session is exiting.
        exit: True when the process should terminate.
        failure: The save error raised while handling this event, if any.
        redraw: False when nothing visible changed since the last frame.
        saved: True when the exit follows a successful save.
    """
    frame: Optional[str] = None
    exit: bool = False
    saved: bool = False
    failure: Optional[FileAccessError] = None
    redraw: bool = True


class EditorSession:
    """State machine for one file's editing session."""

    def __init__(self, filename: str, content: str, file_size: int, theme: Theme,
                 file_access: Optional[FileAccess] = None,
                 buffer: Optional[TextBuffer] = None,
                 viewport: Optional[Viewport] = None,
                 size_unit: str = "auto"):
        self._filename = filename
        self.file_size = file_size
        self.theme = theme
        self.file_access = file_access or FileAccess()
        self.size_unit = size_unit
        self.buffer = buffer or TextBuffer()
        self.buffer.set_value(content)
        self.buffer.cursor_format = theme.cursor
        # Built on the first resize, when the terminal size is known
        self.viewport = viewport
        self.width = 0
        self.height = 0
        self.is_ready = False
        self.error: Optional[str] = None

    @classmethod
    def open(cls, filename: str, theme: Theme,
             file_access: Optional[FileAccess] = None, **kwargs) -> "EditorSession":
        """Create a session from the file on disk.

        A missing file gives an empty session of size 0. Other read errors
        propagate as OSError.
        """
        access = file_access or FileAccess()
        content = access.read_file(filename)
        size = access.file_size(filename)
        logger.info("Opened %s (%d bytes)", filename, size)
        return cls(filename, content, size, theme, file_access=access, **kwargs)

    @property
    def filename(self) -> str:
        return self._filename

    @property
    def content(self) -> str:
        """What a save would write: the buffer's current text."""
        return self.buffer.value

    # --- dispatch ---

    def handle(self, event: Event) -> HandleResult:
        """Process one event fully and return the next frame."""
        cleared = False
        if isinstance(event, KeyEvent):
            key = (event.key_type, event.value)
            if key in SAVE_KEYS:
                failure = self._save()
                if failure is None:
                    return HandleResult(exit=True, saved=True)
                return HandleResult(frame=self._refresh(), failure=failure)
            if key in QUIT_KEYS:
                logger.info("Quit without saving %s", self._filename)
                return HandleResult(exit=True)
            cleared = self.error is not None
            self.error = None

        edited = self.buffer.handle_event(event)
        scrolled = bool(self.viewport is not None and self.viewport.handle_event(event))
        # Blinking must not undo a manual scroll
        follow = edited and not isinstance(event, TickEvent)
        if isinstance(event, ResizeEvent):
            self._resize(event.width, event.height)
            follow = True
        redraw = edited or scrolled or cleared or isinstance(event, ResizeEvent)
        return HandleResult(frame=self._refresh(follow_cursor=follow), redraw=redraw)

    def _resize(self, width: int, height: int) -> None:
        self.width = max(0, width)
        self.height = max(0, height)
        vp_height = viewport_height(self.height)
        if not self.is_ready and self.viewport is None:
            self.viewport = Viewport(self.width, vp_height)
        else:
            self.viewport.set_width(self.width)
            self.viewport.set_height(vp_height)
        self.is_ready = True
        self.buffer.set_width(buffer_width(self.width))
        self.buffer.set_height(vp_height)
        logger.debug("Resized to %dx%d", self.width, self.height)

    def _refresh(self, follow_cursor: bool = False) -> str:
        if self.viewport is not None:
            self.viewport.set_content(self.buffer.view())
            if follow_cursor:
                self.viewport.ensure_visible(self.buffer.cursor_row())
        return render_frame(self.layout_state(), self.theme)

    def _save(self) -> Optional[FileAccessError]:
        text = self.buffer.value
        try:
            self.file_access.write_file(self._filename, text)
        except OSError as e:
            failure = e if isinstance(e, FileAccessError) else FileAccessError(
                self._filename, e.strerror or str(e), e.errno)
            logger.error("Save failed: %s", failure)
            self.error = failure.reason
            return failure
        logger.info("Saved %s", self._filename)
        self.error = None
        return None

    # --- rendering ---

    def layout_state(self) -> LayoutState:
        if not self.is_ready:
            return LayoutState(is_ready=False)
        text = self.buffer.value
        lines = text.split('\n')
        return LayoutState(
            is_ready=True,
            width=self.width,
            height=self.height,
            filename=self._filename,
            file_size=self.file_size,
            size_unit=self.size_unit,
            current_line=self.buffer.current_line(),
            line_count=self.buffer.line_count(),
            unique_lines=len(set(lines)),
            content_size=len(text.encode(EditorConstants.FILE_ENCODING,
                                         EditorConstants.FILE_ERRORS)),
            viewport_view=self.viewport.view(),
            error=self.error,
        )

    def render(self) -> str:
        return render_frame(self.layout_state(), self.theme)
