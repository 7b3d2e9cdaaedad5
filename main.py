#!/usr/bin/env python3
"""d-word - a single-file terminal text editor.

Usage:
    python main.py <filename>

Controls:
    Ctrl-S: Save and exit
    Ctrl-Q, Esc: Quit without saving
    Arrow keys, Home/End, PgUp/PgDn: Navigate
    Alt-Up/Alt-Down: Scroll the editing box
    Type to insert text
"""

from dword.__main__ import run


if __name__ == "__main__":
    run()
