"""Event loop driving an editor session in the terminal."""

import logging
import os
import select
import signal
import sys
import termios
from typing import Optional

from .constants import EditorConstants
from .events import ResizeEvent, TickEvent
from .keyboard import KeyboardHandler
from .session import EditorSession, HandleResult
from .terminal import TerminalInterface

logger = logging.getLogger(__name__)


class Editor:
    """Feeds terminal events to the session one at a time and draws its frames."""

    def __init__(self, session: EditorSession, terminal: Optional[TerminalInterface] = None):
        self.session = session
        self.terminal = terminal or TerminalInterface(session.theme.term)
        self.keyboard = KeyboardHandler(self.terminal)
        self.running = False
        self.saved = False
        self.last_failure = None
        # Pipe written by the SIGWINCH handler to wake up select()
        self._resize_pipe_r, self._resize_pipe_w = os.pipe()

    def _handle_resize(self, signum, frame):
        """Handle terminal resize signal."""
        del signum, frame  # Unused
        os.write(self._resize_pipe_w, EditorConstants.RESIZE_PIPE_MARKER)

    def dispatch(self, event) -> HandleResult:
        """Hand one event to the session and act on the result."""
        result = self.session.handle(event)
        if result.failure is not None:
            # The session stays open and shows the error; the user can retry
            self.last_failure = result.failure
            logger.warning("Save of %s failed, session kept open", self.session.filename)
        if result.exit:
            self.saved = result.saved
            self.running = False
            logger.info("Exiting")
        elif result.frame is not None and result.redraw:
            self.terminal.draw_frame(result.frame)
        return result

    def run(self):
        """Run the main editor loop until the session asks to exit."""
        self.terminal.setup()
        self.running = True
        original_winch_handler = signal.signal(signal.SIGWINCH, self._handle_resize)

        try:
            with self.terminal.term.cbreak():
                old_settings = self._disable_flow_control()
                try:
                    self.dispatch(ResizeEvent(*self.terminal.size))
                    while self.running:
                        ready, _, _ = select.select(
                            [0, self._resize_pipe_r], [], [],
                            EditorConstants.CURSOR_BLINK_INTERVAL)

                        if self._resize_pipe_r in ready:
                            os.read(self._resize_pipe_r, 1024)
                            self.terminal.invalidate_frame()
                            self.dispatch(ResizeEvent(*self.terminal.size))
                        elif 0 in ready:
                            key_event = self.keyboard.get_key_event(timeout=0)
                            if key_event:
                                self.dispatch(key_event)
                        else:
                            self.dispatch(TickEvent())
                finally:
                    if old_settings:
                        try:
                            termios.tcsetattr(sys.stdin, termios.TCSANOW, old_settings)
                        except (termios.error, OSError):
                            logger.warning("Could not restore terminal settings")
        finally:
            signal.signal(signal.SIGWINCH, original_winch_handler)
            os.close(self._resize_pipe_r)
            os.close(self._resize_pipe_w)
            self.terminal.cleanup()

    def _disable_flow_control(self):
        """Let Ctrl-S and Ctrl-Q reach the editor instead of the tty driver.

        Returns:
            The previous termios settings, or None if they could not be read.
        """
        try:
            old_settings = termios.tcgetattr(sys.stdin)
            new_settings = list(old_settings)
            new_settings[0] &= ~(termios.IXON | termios.IXOFF)
            termios.tcsetattr(sys.stdin, termios.TCSANOW, new_settings)
            return old_settings
        except (termios.error, AttributeError, OSError):
            # Not a real tty (tests, pipes); nothing to restore
            return None
