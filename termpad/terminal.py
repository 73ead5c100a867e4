"""Terminal session: raw mode lifecycle and byte I/O using termios and Blessed."""

import atexit
import errno
import logging
import os
import re
import signal
import termios
from enum import Enum
from typing import Optional

import blessed

from .constants import EditorConstants
from .errors import TerminalConfigError, TerminalIOError, WindowSizeError

logger = logging.getLogger(__name__)

STDIN_FILENO = 0
STDOUT_FILENO = 1

_CURSOR_REPORT = re.compile(rb"\x1b\[(\d+);(\d+)R")


class SessionState(Enum):
    """Raw mode lifecycle."""
    UNINITIALIZED = "uninitialized"
    RAW_ACTIVE = "raw_active"
    RESTORED = "restored"


class TerminalSession:
    """Owns the controlling terminal while the editor runs.

    Blessed supplies the capability strings used to draw frames; termios is
    used directly for the raw mode itself so that reads return after a short
    bounded wait instead of blocking.

    Use as a context manager to guarantee the original terminal mode comes
    back on every exit path::

        with TerminalSession() as session:
            ...
    """

    def __init__(self, terminal: Optional[blessed.Terminal] = None,
                 stdin_fd: int = STDIN_FILENO, stdout_fd: int = STDOUT_FILENO,
                 read_timeout: int = EditorConstants.READ_TIMEOUT):
        """Initialize without touching the terminal.

        Args:
            terminal: Blessed terminal for capability strings (created if omitted)
            stdin_fd: Input descriptor, defaults to standard input
            stdout_fd: Output descriptor, defaults to standard output
            read_timeout: VTIME in tenths of a second
        """
        self.term = terminal or blessed.Terminal()
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd
        self.read_timeout = read_timeout
        self.state = SessionState.UNINITIALIZED
        self._orig_attrs: Optional[list] = None
        self._orig_handlers: dict = {}

    def __enter__(self) -> "TerminalSession":
        self.enter_raw_mode()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.restore_mode()

    def enter_raw_mode(self) -> None:
        """Switch the terminal into raw mode.

        Raises:
            TerminalConfigError: If attributes cannot be read or applied. When
                the original attributes were already captured they are put back
                before the error propagates.
        """
        if self.state is not SessionState.UNINITIALIZED:
            raise TerminalConfigError(f"cannot enter raw mode from state {self.state.value}")
        try:
            self._orig_attrs = termios.tcgetattr(self.stdin_fd)
        except (termios.error, OSError) as e:
            raise TerminalConfigError(f"tcgetattr: {_describe(e)}") from e

        raw = [list(a) if isinstance(a, list) else a for a in self._orig_attrs]
        raw[0] &= ~(termios.BRKINT | termios.ICRNL | termios.INPCK | termios.ISTRIP | termios.IXON)
        raw[1] &= ~termios.OPOST
        raw[2] |= termios.CS8
        raw[3] &= ~(termios.ECHO | termios.ICANON | termios.IEXTEN | termios.ISIG)
        raw[6][termios.VMIN] = 0
        raw[6][termios.VTIME] = self.read_timeout

        self.state = SessionState.RAW_ACTIVE
        try:
            termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, raw)
        except (termios.error, OSError) as e:
            try:
                self.restore_mode()
            except TerminalConfigError as restore_error:
                logger.debug("Restore after failed raw mode also failed: %s", restore_error)
            raise TerminalConfigError(f"tcsetattr: {_describe(e)}") from e

        atexit.register(self.restore_mode)
        self._install_signal_handlers()
        logger.debug("Raw mode enabled on fd %d", self.stdin_fd)

    def restore_mode(self) -> None:
        """Put the original terminal attributes back.

        Only the first call after entering raw mode does anything; later calls
        (atexit, context manager exit) are no-ops.

        Raises:
            TerminalConfigError: If the original attributes cannot be applied.
        """
        if self.state is not SessionState.RAW_ACTIVE:
            return
        self.state = SessionState.RESTORED
        atexit.unregister(self.restore_mode)
        self._restore_signal_handlers()
        try:
            self.write_bytes(self._encode(self.term.clear + self.term.normal_cursor))
        except OSError:
            # Screen cleanup is cosmetic; the mode restore below must still run
            logger.debug("Could not clear screen while restoring terminal")
        try:
            termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, self._orig_attrs)
        except (termios.error, OSError) as e:
            raise TerminalConfigError(f"tcsetattr: {_describe(e)}") from e
        logger.debug("Terminal mode restored")

    def _install_signal_handlers(self) -> None:
        for signum in (signal.SIGTERM, signal.SIGHUP):
            try:
                self._orig_handlers[signum] = signal.signal(signum, self._handle_termination)
            except ValueError:
                # Not on the main thread; atexit still covers normal exits
                pass

    def _restore_signal_handlers(self) -> None:
        for signum, handler in self._orig_handlers.items():
            signal.signal(signum, handler)
        self._orig_handlers.clear()

    def _handle_termination(self, signum, frame):
        """Turn SIGTERM/SIGHUP into SystemExit so the stack unwinds normally."""
        del frame  # Unused
        raise SystemExit(128 + signum)

    def read_byte_with_timeout(self) -> Optional[int]:
        """Read one byte, or return None if nothing arrived within the timeout.

        Raises:
            TerminalIOError: On read errors other than EAGAIN/EINTR.
        """
        try:
            data = os.read(self.stdin_fd, 1)
        except OSError as e:
            if e.errno in (errno.EAGAIN, errno.EINTR):
                return None
            raise TerminalIOError(f"read: {_describe(e)}") from e
        if not data:
            return None
        return data[0]

    def write_bytes(self, data: bytes) -> None:
        """Write all of data to the terminal."""
        view = memoryview(data)
        while view:
            written = os.write(self.stdout_fd, view)
            view = view[written:]

    def write(self, text: str) -> None:
        """Encode text and write it in a single call."""
        self.write_bytes(self._encode(text))

    @staticmethod
    def _encode(text: str) -> bytes:
        return text.encode("utf-8", "surrogateescape")

    def query_window_size(self) -> tuple[int, int]:
        """Return the terminal size as (rows, cols).

        Asks the kernel first; if that fails or reports zero columns, falls
        back to moving the cursor to the bottom-right corner and reading the
        cursor position report.

        Raises:
            WindowSizeError: If neither method yields a size.
        """
        try:
            size = os.get_terminal_size(self.stdout_fd)
            if size.columns > 0:
                return size.lines, size.columns
        except OSError as e:
            logger.debug("Window size ioctl failed: %s", e)
        return self._probe_window_size()

    def _probe_window_size(self) -> tuple[int, int]:
        try:
            self.write_bytes(EditorConstants.CURSOR_FAR_CORNER + EditorConstants.CURSOR_POSITION_REQUEST)
        except OSError as e:
            raise WindowSizeError(f"cannot probe window size: {_describe(e)}") from e

        reply = bytearray()
        while len(reply) < EditorConstants.CURSOR_REPORT_MAX_BYTES:
            byte = self.read_byte_with_timeout()
            if byte is None:
                break
            reply.append(byte)
            if byte == ord("R"):
                break
        return parse_cursor_report(bytes(reply))


def parse_cursor_report(reply: bytes) -> tuple[int, int]:
    """Parse an ``ESC [ rows ; cols R`` cursor position report.

    Raises:
        WindowSizeError: If the reply is malformed.
    """
    match = _CURSOR_REPORT.fullmatch(reply)
    if not match:
        raise WindowSizeError(f"unexpected cursor position report {reply!r}")
    rows, cols = int(match.group(1)), int(match.group(2))
    if rows <= 0 or cols <= 0:
        raise WindowSizeError(f"invalid window size {rows}x{cols}")
    return rows, cols


def _describe(error: Exception) -> str:
    if isinstance(error, OSError) and error.strerror:
        return error.strerror
    if isinstance(error, termios.error) and len(error.args) > 1:
        return str(error.args[1])
    return str(error)
