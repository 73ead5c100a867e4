"""Constants and configuration defaults for the termpad editor."""

class EditorConstants:
    """Central configuration constants for the editor."""

    # Rendering
    TAB_STOP = 8  # Tabs expand to the next multiple of this column
    FILLER = "~"  # Marker for screen rows past the end of the document
    NO_NAME = "[No Name]"  # Status bar placeholder for unnamed buffers
    STATUS_FILENAME_WIDTH = 20  # Characters of the filename shown in the status bar
    STATUS_BAR_ROWS = 2  # Status bar plus message line

    # Keyboard timing
    READ_TIMEOUT = 1  # VTIME for raw reads, in tenths of a second

    # Quit protection
    QUIT_TIMES = 3  # Consecutive Ctrl-Q presses needed to discard changes

    # Status messages
    MESSAGE_TIMEOUT = 5.0  # Seconds a status message stays visible
    HELP_MESSAGE = "HELP: Ctrl-S = save | Ctrl-Q = quit"
    WELCOME_MESSAGE = "Termpad editor -- version {}"
    QUIT_WARNING = "WARNING!!! File has unsaved changes. Press Ctrl-Q {} more times to quit."
    SAVE_PROMPT = "Save as: {} (ESC to cancel)"
    SAVE_ABORTED = "Save aborted"
    SAVE_OK = "{} bytes written to disk"
    SAVE_FAILED = "Can't save! I/O error: {}"

    # Window size probing
    CURSOR_FAR_CORNER = b"\x1b[999C\x1b[999B"
    CURSOR_POSITION_REQUEST = b"\x1b[6n"
    CURSOR_REPORT_MAX_BYTES = 32
