"""Constants and configuration for the d-word editor."""


class EditorConstants:
    """Central configuration constants for the editor."""

    # Chrome budgets. Every derived dimension is clamped at zero.
    VIEWPORT_CHROME_ROWS = 10  # Rows taken by title, menu, status and box border
    BUFFER_CHROME_COLUMNS = 4  # Box border plus padding around the text buffer
    BOX_CHROME_COLUMNS = 2  # Box border, left and right
    BOX_CHROME_ROWS = 8  # Title, menu, status, box border and spacing

    # Labels
    PRODUCT_LABEL = "d-wordedit v1.0"
    MENU_ITEMS = "[L]oad  [S]ave  [F]ind  [R]eplace  [E]dit  [T]ools  [H]elp  [Q]uit"
    INITIALIZING_MESSAGE = "Initializing..."
    USAGE_MESSAGE = "Usage: d-word <filename>"

    # Text buffer defaults, used until the first resize
    INITIAL_BUFFER_WIDTH = 100
    INITIAL_BUFFER_HEIGHT = 20
    TAB_WIDTH = 4

    # Cursor blink timing (seconds)
    CURSOR_BLINK_INTERVAL = 0.53

    # File operations
    DEFAULT_FILE_MODE = 0o644  # Mode for newly created files, before umask
    ATOMIC_SAVE_PREFIX = "."  # Prefix for temporary save files
    ATOMIC_SAVE_SUFFIX = ".tmp"  # Suffix for temporary save files
    FILE_ENCODING = "utf-8"
    FILE_ERRORS = "surrogateescape"  # Undecodable bytes survive a round trip

    # Resize handling
    RESIZE_PIPE_MARKER = b'R'  # Byte written to pipe to signal resize

    # Status messages
    SAVE_ERROR_HINT = "Ctrl-S retry, Ctrl-Q quit"
