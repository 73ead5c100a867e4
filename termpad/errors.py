"""Exception hierarchy for termpad.

Terminal errors and read errors are fatal: the terminal is restored and the
process exits with status 1. Write errors are recoverable and surface as a
status message.
"""


class TermpadError(Exception):
    """Base class for all termpad errors."""


class TerminalError(TermpadError):
    """Problem with the controlling terminal."""


class TerminalConfigError(TerminalError):
    """Terminal attributes could not be queried or set."""


class WindowSizeError(TerminalError):
    """Terminal geometry could not be determined."""


class TerminalIOError(TerminalError):
    """Reading from the terminal failed."""


class DocumentIOError(TermpadError):
    """Problem reading or writing a document file."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"{path}: {reason}" if path else reason)
        self.path = path
        self.reason = reason


class FileReadError(DocumentIOError):
    """The file to edit could not be read."""


class FileWriteError(DocumentIOError):
    """The document could not be written to disk."""
