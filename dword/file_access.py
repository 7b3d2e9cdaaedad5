"""File access boundary: reading, sizing and atomically writing the target file."""

from __future__ import annotations

import errno
import logging
import os
import tempfile

from .constants import EditorConstants

logger = logging.getLogger(__name__)


class FileAccessError(OSError):
    """A save failed. ``reason`` is short enough for the status bar."""

    def __init__(self, path: str, reason: str, errno_: int | None = None):
        super().__init__(errno_, reason, path)
        self.path = path
        self.reason = reason

    def __str__(self) -> str:
        return f"{self.reason}: {self.path}"


def _decode(data: bytes) -> str:
    return data.decode(EditorConstants.FILE_ENCODING, EditorConstants.FILE_ERRORS)


def _encode(text: str) -> bytes:
    return text.encode(EditorConstants.FILE_ENCODING, EditorConstants.FILE_ERRORS)


def _new_file_mode() -> int:
    # os.umask can only be read by setting it
    umask = os.umask(0)
    os.umask(umask)
    return EditorConstants.DEFAULT_FILE_MODE & ~umask


def read_file(path: str) -> str:
    """Read the whole file.

    Args:
        path: Path of the file to edit.

    Returns:
        The decoded content, or an empty string if the file does not exist.

    Raises:
        OSError: for any failure other than the file being absent.
    """
    try:
        with open(path, 'rb') as f:
            data = f.read()
    except FileNotFoundError:
        logger.info("%s does not exist, starting with an empty buffer", path)
        return ""
    return _decode(data)


def file_size(path: str) -> int:
    """Size of ``path`` in bytes, 0 when it does not exist."""
    try:
        return os.stat(path).st_size
    except FileNotFoundError:
        return 0


def write_file(path: str, text: str) -> None:
    """Overwrite ``path`` with ``text`` atomically.

    The content goes to a temporary file in the same directory, which is
    fsynced and renamed over the target. An existing file keeps its
    permission bits; a new one gets 0644 minus the umask.

    Raises:
        FileAccessError: if any step fails. The temporary file is removed.
    """
    dir_name = os.path.dirname(path) or '.'
    try:
        mode = os.stat(path).st_mode & 0o7777
    except FileNotFoundError:
        mode = _new_file_mode()
    except OSError as e:
        raise _save_error(path, e) from e

    temp_filename = None
    try:
        with tempfile.NamedTemporaryFile(mode='wb', dir=dir_name,
                                         prefix=EditorConstants.ATOMIC_SAVE_PREFIX,
                                         suffix=EditorConstants.ATOMIC_SAVE_SUFFIX,
                                         delete=False) as temp_file:
            temp_filename = temp_file.name
            temp_file.write(_encode(text))
            temp_file.flush()
            os.fsync(temp_file.fileno())
        os.chmod(temp_filename, mode)
        os.replace(temp_filename, path)
    except OSError as e:
        if temp_filename is not None and os.path.exists(temp_filename):
            try:
                os.remove(temp_filename)
            except OSError:
                logger.warning("Could not remove temporary file %s", temp_filename)
        raise _save_error(path, e) from e


def _save_error(path: str, e: OSError) -> FileAccessError:
    if isinstance(e, PermissionError):
        reason = "Permission denied"
    elif e.errno == errno.ENOSPC:
        reason = "No space left on device"
    elif e.errno == errno.ENOENT:
        reason = "Directory does not exist"
    else:
        reason = f"Cannot save ({e.strerror or e})"
    return FileAccessError(path, reason, e.errno)


class FileAccess:
    """The boundary as an object, so the session can be given a test double."""

    def read_file(self, path: str) -> str:
        return read_file(path)

    def file_size(self, path: str) -> int:
        return file_size(path)

    def write_file(self, path: str, text: str) -> None:
        write_file(path, text)
