"""Tests for the editor session state machine."""

import os
import tempfile

import blessed
import pytest

from dword.events import ResizeEvent, TickEvent
from dword.file_access import FileAccess, FileAccessError
from dword.keyboard import KeyEvent, KeyType
from dword.session import EditorSession
from dword.theme import Theme

CTRL_S = KeyEvent(KeyType.CTRL, 's', '<Ctrl-s>', is_ctrl=True)
CTRL_Q = KeyEvent(KeyType.CTRL, 'q', '<Ctrl-q>', is_ctrl=True)
ESCAPE = KeyEvent(KeyType.SPECIAL, 'escape', '\x1b')


class RecordingFileAccess(FileAccess):
    """File access double that records writes instead of touching disk."""

    def __init__(self, files=None, fail_with=None):
        self.files = dict(files or {})
        self.fail_with = fail_with
        self.writes = []

    def read_file(self, path):
        return self.files.get(path, "")

    def file_size(self, path):
        return len(self.files[path].encode('utf-8')) if path in self.files else 0

    def write_file(self, path, text):
        self.writes.append((path, text))
        if self.fail_with is not None:
            raise self.fail_with
        self.files[path] = text


class FakeBuffer:
    """Stand-in text buffer that records calls and returns canned values."""

    def __init__(self, view="canned view", lines=3):
        self.calls = []
        self._view = view
        self._lines = lines
        self.value = ""
        self.cursor_format = None

    def set_value(self, text):
        self.calls.append(('set_value', text))
        self.value = text

    def set_width(self, n):
        self.calls.append(('set_width', n))

    def set_height(self, n):
        self.calls.append(('set_height', n))

    def handle_event(self, event):
        self.calls.append(('handle_event', event))
        return True

    def view(self):
        self.calls.append(('view',))
        return self._view

    def line_count(self):
        return self._lines

    def current_line(self):
        return 1

    def cursor_row(self):
        return 0


class FakeViewport:
    def __init__(self):
        self.calls = []
        self.content = ""

    def set_width(self, n):
        self.calls.append(('set_width', n))

    def set_height(self, n):
        self.calls.append(('set_height', n))

    def set_content(self, s):
        self.calls.append(('set_content', s))
        self.content = s

    def ensure_visible(self, row):
        self.calls.append(('ensure_visible', row))

    def handle_event(self, event):
        self.calls.append(('handle_event', event))
        return False

    def view(self):
        return self.content


def plain_theme():
    return Theme.plain(blessed.Terminal(force_styling=None))


def make_session(content="hello\nworld", filename="notes.txt", **kwargs):
    access = kwargs.pop('file_access', None) or RecordingFileAccess({filename: content})
    return EditorSession.open(filename, plain_theme(), file_access=access, **kwargs)


def test_concrete_scenario_80x24():
    session = make_session()
    result = session.handle(ResizeEvent(80, 24))

    assert session.buffer.width == 76
    assert session.viewport.height == 14
    assert session.viewport.width == 80
    rows = result.frame.split('\n')
    # Title, menu, 16 interior rows plus border, status
    assert len(rows) == 21
    assert rows[2] == "╭" + "─" * 78 + "╮"
    assert rows[-1].strip().startswith("STATUS: 2 lines")


def test_not_ready_until_first_resize():
    session = make_session()
    assert session.is_ready is False
    result = session.handle(KeyEvent(KeyType.REGULAR, 'x', 'x'))
    assert result.frame == "Initializing..."
    assert session.viewport is None

    session.handle(ResizeEvent(80, 24))
    assert session.is_ready is True


@pytest.mark.parametrize("width, height", [(0, 0), (3, 9), (4, 10), (80, 24), (200, 60), (1, 100)])
def test_resize_geometry(width, height):
    session = make_session()
    session.handle(ResizeEvent(width, height))
    assert session.viewport.height == max(0, height - 10)
    assert session.buffer.width == max(0, width - 4)
    assert session.is_ready is True


def test_ready_stays_true_across_resizes():
    session = make_session()
    session.handle(ResizeEvent(80, 24))
    viewport = session.viewport
    session.handle(ResizeEvent(100, 40))
    assert session.is_ready is True
    # The viewport is built once and then resized in place
    assert session.viewport is viewport
    assert viewport.width == 100
    assert viewport.height == 30
    assert session.buffer.width == 96


def test_repeated_resize_gives_identical_frames():
    session = make_session()
    first = session.handle(ResizeEvent(80, 24)).frame
    second = session.handle(ResizeEvent(80, 24)).frame
    assert first == second


def test_save_round_trip_without_edits():
    """Saving immediately writes back exactly what was loaded."""
    content = "line one\r\nline two\n\ttabbed\n"
    access = RecordingFileAccess({"doc.txt": content})
    session = make_session(content, filename="doc.txt", file_access=access)
    session.handle(ResizeEvent(80, 24))

    result = session.handle(CTRL_S)

    assert result.exit is True
    assert result.failure is None
    assert result.saved is True
    assert access.writes == [("doc.txt", content)]


def test_save_on_disk_preserves_bytes():
    """A real round trip through the filesystem is byte for byte."""
    data = b"caf\xc3\xa9\n\xff\xfe raw bytes\r\n"
    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "file.bin")
        with open(path, 'wb') as f:
            f.write(data)
        session = EditorSession.open(path, plain_theme())
        assert session.file_size == len(data)
        session.handle(ResizeEvent(80, 24))
        assert session.handle(CTRL_S).exit is True
        with open(path, 'rb') as f:
            assert f.read() == data


def test_save_writes_edited_content():
    access = RecordingFileAccess({"notes.txt": "abc"})
    session = make_session("abc", file_access=access)
    session.handle(ResizeEvent(80, 24))
    for ch in "XY":
        session.handle(KeyEvent(KeyType.REGULAR, ch, ch))
    session.handle(CTRL_S)
    assert access.writes == [("notes.txt", "abcXY")]


@pytest.mark.parametrize("key", [CTRL_Q, ESCAPE])
def test_quit_never_writes(key):
    access = RecordingFileAccess({"notes.txt": "abc"})
    session = make_session("abc", file_access=access)
    session.handle(ResizeEvent(80, 24))
    session.handle(KeyEvent(KeyType.REGULAR, 'z', 'z'))

    result = session.handle(key)

    assert result.exit is True
    assert result.saved is False
    assert result.frame is None
    assert access.writes == []


def test_quit_before_ready_exits():
    access = RecordingFileAccess()
    session = make_session(file_access=access)
    assert session.handle(ESCAPE).exit is True
    assert access.writes == []


def test_missing_file_starts_empty():
    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "does-not-exist.txt")
        session = EditorSession.open(path, plain_theme())
        assert session.content == ""
        assert session.file_size == 0
        assert not os.path.exists(path)


def test_unreadable_file_raises():
    with tempfile.TemporaryDirectory() as tmp:
        with pytest.raises(OSError):
            EditorSession.open(tmp, plain_theme())


def test_save_failure_keeps_session_open():
    error = FileAccessError("notes.txt", "Permission denied")
    access = RecordingFileAccess({"notes.txt": "abc"}, fail_with=error)
    session = make_session("abc", file_access=access)
    session.handle(ResizeEvent(80, 24))

    result = session.handle(CTRL_S)

    assert result.exit is False
    assert result.failure is error
    assert session.error == "Permission denied"
    assert "ERROR: Permission denied" in result.frame.split('\n')[-1]
    # Exactly one attempt per save command
    assert len(access.writes) == 1


def test_save_failure_wraps_plain_os_errors():
    access = RecordingFileAccess(fail_with=OSError(28, "No space left on device"))
    session = make_session(file_access=access)
    session.handle(ResizeEvent(80, 24))

    result = session.handle(CTRL_S)

    assert isinstance(result.failure, FileAccessError)
    assert session.error == "No space left on device"


def test_retry_after_failure_succeeds():
    access = RecordingFileAccess({"notes.txt": "abc"},
                                 fail_with=FileAccessError("notes.txt", "Disk full"))
    session = make_session("abc", file_access=access)
    session.handle(ResizeEvent(80, 24))
    assert session.handle(CTRL_S).exit is False

    access.fail_with = None
    result = session.handle(CTRL_S)

    assert result.exit is True
    assert session.error is None
    assert len(access.writes) == 2


def test_typing_clears_error():
    access = RecordingFileAccess(fail_with=FileAccessError("notes.txt", "Disk full"))
    session = make_session(file_access=access)
    session.handle(ResizeEvent(80, 24))
    session.handle(CTRL_S)

    result = session.handle(KeyEvent(KeyType.REGULAR, 'a', 'a'))

    assert session.error is None
    assert "STATUS:" in result.frame.split('\n')[-1]


def test_ignored_key_still_redraws_cleared_error():
    access = RecordingFileAccess(fail_with=FileAccessError("notes.txt", "Disk full"))
    session = make_session(file_access=access)
    session.handle(ResizeEvent(80, 24))
    session.handle(CTRL_S)

    result = session.handle(KeyEvent(KeyType.SPECIAL, 'f5', '<F5>'))

    assert result.redraw is True
    assert session.handle(KeyEvent(KeyType.SPECIAL, 'f5', '<F5>')).redraw is False


def test_keys_are_forwarded_to_both_widgets():
    buffer = FakeBuffer()
    viewport = FakeViewport()
    session = EditorSession("f.txt", "abc", 3, plain_theme(),
                            file_access=RecordingFileAccess(),
                            buffer=buffer, viewport=viewport)
    key = KeyEvent(KeyType.REGULAR, 'q', 'q')

    session.handle(key)

    assert ('handle_event', key) in buffer.calls
    assert ('handle_event', key) in viewport.calls


def test_commands_are_not_forwarded():
    buffer = FakeBuffer()
    session = EditorSession("f.txt", "abc", 3, plain_theme(),
                            file_access=RecordingFileAccess(), buffer=buffer)
    session.handle(CTRL_S)
    session.handle(CTRL_Q)
    assert not any(call[0] == 'handle_event' for call in buffer.calls)


def test_resize_order_forward_then_geometry_then_content():
    """Widgets see the event before geometry changes; content is refreshed last."""
    buffer = FakeBuffer(view="rendered")
    viewport = FakeViewport()
    session = EditorSession("f.txt", "abc", 3, plain_theme(),
                            file_access=RecordingFileAccess(),
                            buffer=buffer, viewport=viewport)
    buffer.calls.clear()
    event = ResizeEvent(80, 24)

    session.handle(event)

    names = [call[0] for call in buffer.calls]
    assert names.index('handle_event') < names.index('set_width') < names.index('view')
    assert viewport.calls[0] == ('handle_event', event)
    assert viewport.calls[-2:] == [('set_content', 'rendered'), ('ensure_visible', 0)]
    assert ('set_width', 76) in buffer.calls
    assert ('set_height', 14) in viewport.calls


def test_viewport_shows_latest_buffer_view_after_each_event():
    buffer = FakeBuffer(view="first")
    viewport = FakeViewport()
    session = EditorSession("f.txt", "abc", 3, plain_theme(),
                            file_access=RecordingFileAccess(),
                            buffer=buffer, viewport=viewport)
    session.handle(ResizeEvent(40, 20))
    buffer._view = "second"
    session.handle(TickEvent())
    assert viewport.content == "second"


def test_status_reports_buffer_line_count():
    buffer = FakeBuffer(lines=7)
    session = EditorSession("f.txt", "a\nb", 3, plain_theme(),
                            file_access=RecordingFileAccess(), buffer=buffer)
    frame = session.handle(ResizeEvent(80, 24)).frame
    assert frame.split('\n')[-1].strip().startswith("STATUS: 7 lines")


def test_tick_toggles_cursor_blink():
    session = make_session()
    session.handle(ResizeEvent(80, 24))
    visible = session.buffer.cursor_visible
    result = session.handle(TickEvent())
    assert session.buffer.cursor_visible is not visible
    assert result.redraw is True


def test_title_shows_cursor_line():
    session = make_session("one\ntwo\nthree")
    session.handle(ResizeEvent(80, 24))
    frame = session.handle(KeyEvent(KeyType.SPECIAL, 'up', '<UP>')).frame
    assert "Line: 2/3" in frame.split('\n')[0]


def test_filename_is_read_only():
    session = make_session()
    with pytest.raises(AttributeError):
        session.filename = "other.txt"


def test_file_size_is_a_snapshot():
    """Edits do not change the size shown for the file."""
    session = make_session("abc")
    session.handle(ResizeEvent(80, 24))
    session.handle(KeyEvent(KeyType.REGULAR, 'd', 'd'))
    assert session.file_size == 3
    assert session.content == "abcd"


def _alt(direction):
    return KeyEvent(KeyType.ALT, direction, f'<Esc+{direction.upper()}>', is_alt=True)


def test_alt_arrows_scroll_the_editing_box():
    content = "\n".join(f"line {i}" for i in range(100))
    session = make_session(content)
    first = session.handle(ResizeEvent(80, 24))
    # The cursor starts at the end, so the last lines are in view
    assert first.frame.split('\n')[3].startswith("│line 86 ")

    result = session.handle(_alt('up'))

    assert result.redraw is True
    assert session.viewport.y_offset == 85
    assert result.frame.split('\n')[3].startswith("│line 85 ")
    assert session.handle(_alt('down')).frame.split('\n')[3].startswith("│line 86 ")


def test_blink_keeps_manual_scroll():
    session = make_session("\n".join(f"line {i}" for i in range(100)))
    session.handle(ResizeEvent(80, 24))
    for _ in range(10):
        session.handle(_alt('up'))
    session.handle(TickEvent())
    assert session.viewport.y_offset == 76


def test_editing_brings_cursor_back_into_view():
    session = make_session("\n".join(f"line {i}" for i in range(100)))
    session.handle(ResizeEvent(80, 24))
    for _ in range(10):
        session.handle(_alt('up'))

    session.handle(KeyEvent(KeyType.REGULAR, '!', '!'))

    assert session.viewport.y_offset == 86
    assert "line 99!" in session.viewport.view()


def test_viewport_follows_cursor_to_the_top():
    session = make_session("\n".join(f"line {i}" for i in range(100)))
    session.handle(ResizeEvent(80, 24))
    for _ in range(10):
        session.handle(KeyEvent(KeyType.SPECIAL, 'page_up', '<PAGEUP>'))
    assert session.buffer.current_line() == 1
    assert session.viewport.y_offset == 0


def test_wide_characters_are_all_shown_in_the_box():
    session = make_session("")
    session.handle(ResizeEvent(20, 24))
    for ch in "漢字" * 8:
        result = session.handle(KeyEvent(KeyType.REGULAR, ch, ch))
    rows = result.frame.split('\n')
    interior = "".join(row[1:-1] for row in rows[3:6])
    assert interior.count("漢") == 8
    assert interior.count("字") == 8
