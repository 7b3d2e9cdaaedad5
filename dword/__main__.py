"""d-word CLI entry point.

Allows running via `python -m dword` and provides the `d-word` console
script defined in `pyproject.toml`.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

import blessed

from .config import configure_logging, load_config
from .constants import EditorConstants
from .editor import Editor
from .file_access import FileAccess
from .session import EditorSession
from .theme import Theme
from .version import get_version_string

logger = logging.getLogger(__name__)


def main(argv: Optional[list[str]] = None) -> int:
    """Run the editor on the file named on the command line.

    Returns:
        The process exit status.
    """
    args = sys.argv[1:] if argv is None else argv
    if not args:
        print(EditorConstants.USAGE_MESSAGE)
        return 1
    if args[0] in ("--version", "-V"):
        print(get_version_string())
        return 0

    filename = args[0]
    config = load_config()
    configure_logging(config)

    term = blessed.Terminal()
    try:
        session = EditorSession.open(filename, Theme.from_config(term, config),
                                     file_access=FileAccess(),
                                     size_unit=config.size_unit)
    except OSError as e:
        logger.error("Could not read %s: %s", filename, e)
        print(f"Error reading {filename}: {e.strerror or e}")
        return 1

    editor = Editor(session)
    editor.run()
    if editor.saved:
        print(f"Saved to {filename}")
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":  # pragma: no cover
    run()
