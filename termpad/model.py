"""Row-oriented document model: rows, the document buffer and the cursor."""

import logging
from dataclasses import dataclass
from typing import Optional

from .constants import EditorConstants
from .errors import FileReadError, FileWriteError

logger = logging.getLogger(__name__)

# Files are decoded with surrogateescape so that bytes which are not valid
# UTF-8 come back out unchanged on save.
ENCODING = "utf-8"
ENCODING_ERRORS = "surrogateescape"


def expand_tabs(chars: str, tab_stop: int = EditorConstants.TAB_STOP) -> str:
    """Expand tabs to spaces up to the next multiple of tab_stop.

    A tab always produces at least one space.
    """
    out = []
    col = 0
    for ch in chars:
        if ch == "\t":
            out.append(" ")
            col += 1
            while col % tab_stop != 0:
                out.append(" ")
                col += 1
        else:
            out.append(ch)
            col += 1
    return "".join(out)


class Row:
    """One line of the document plus its tab-expanded render form."""

    __slots__ = ("_chars", "_render")

    def __init__(self, chars: str = ""):
        self._chars = chars
        self._render = expand_tabs(chars)

    def __repr__(self):
        return f"Row({self._chars!r})"

    @property
    def chars(self) -> str:
        return self._chars

    @property
    def render(self) -> str:
        return self._render

    @property
    def size(self) -> int:
        return len(self._chars)

    @property
    def render_size(self) -> int:
        return len(self._render)

    def _set(self, chars: str) -> None:
        # Every mutation goes through here so render never drifts from chars
        self._chars = chars
        self._render = expand_tabs(chars)

    def insert_char(self, at: int, ch: str) -> None:
        at = max(0, min(at, self.size))
        self._set(self._chars[:at] + ch + self._chars[at:])

    def delete_char(self, at: int) -> bool:
        if not 0 <= at < self.size:
            return False
        self._set(self._chars[:at] + self._chars[at + 1:])
        return True

    def append(self, text: str) -> None:
        self._set(self._chars + text)

    def truncate(self, at: int) -> str:
        """Cut the row at `at` and return the removed tail."""
        at = max(0, min(at, self.size))
        tail = self._chars[at:]
        self._set(self._chars[:at])
        return tail

    def cx_to_rx(self, cx: int) -> int:
        """Translate a character column into a render column."""
        tab_stop = EditorConstants.TAB_STOP
        rx = 0
        for ch in self._chars[:cx]:
            if ch == "\t":
                rx += (tab_stop - 1) - (rx % tab_stop)
            rx += 1
        return rx


@dataclass
class Cursor:
    """Cursor position in document coordinates."""
    x: int = 0
    y: int = 0


class Document:
    """The text buffer being edited.

    Rows are addressed by index only. Every edit bumps ``dirty``; a successful
    load or save resets it to zero.
    """

    def __init__(self, lines: Optional[list[str]] = None, filename: Optional[str] = None):
        self.rows: list[Row] = [Row(line) for line in (lines or [])]
        self.dirty = 0
        self.filename = filename

    @property
    def num_rows(self) -> int:
        return len(self.rows)

    @property
    def lines(self) -> list[str]:
        """Plain contents of every row."""
        return [row.chars for row in self.rows]

    def row_length(self, y: int) -> int:
        """Size of row y, or 0 for the line past the end."""
        if 0 <= y < self.num_rows:
            return self.rows[y].size
        return 0

    def _row(self, index: int) -> Row:
        if not 0 <= index < self.num_rows:
            raise IndexError(f"row {index} out of range (0..{self.num_rows - 1})")
        return self.rows[index]

    # --- File I/O ---

    def load(self, path: str) -> None:
        """Replace the buffer with the contents of path.

        Trailing CR and LF characters are stripped from every line, so files
        with CRLF endings load the same as LF files.

        Raises:
            FileReadError: If the file cannot be opened or read.
        """
        try:
            with open(path, "r", encoding=ENCODING, errors=ENCODING_ERRORS, newline="") as f:
                content = f.read()
        except OSError as e:
            raise FileReadError(path, e.strerror or str(e)) from e

        lines = content.split("\n")
        if lines[-1] == "":
            # Content ended with a newline (or was empty)
            lines.pop()
        self.rows = [Row(line.rstrip("\r")) for line in lines]
        self.filename = path
        self.dirty = 0
        logger.info("Loaded %d rows from %s", self.num_rows, path)

    def to_text(self) -> str:
        """Serialize rows, each terminated by a single LF."""
        return "".join(row.chars + "\n" for row in self.rows)

    def save(self, path: Optional[str] = None) -> int:
        """Write the buffer to path (or the current filename).

        The file is truncated and rewritten in place. On failure the buffer and
        its dirty counter are left untouched.

        Returns:
            Number of bytes written.

        Raises:
            FileWriteError: If the file cannot be written.
        """
        path = path or self.filename
        if not path:
            raise FileWriteError("", "no file name")
        data = self.to_text().encode(ENCODING, ENCODING_ERRORS)
        try:
            with open(path, "wb") as f:
                f.write(data)
        except OSError as e:
            logger.warning("Save to %s failed: %s", path, e)
            raise FileWriteError(path, e.strerror or str(e)) from e
        self.filename = path
        self.dirty = 0
        logger.info("Wrote %d bytes to %s", len(data), path)
        return len(data)

    # --- Row operations ---

    def insert_row(self, at: int, content: str = "") -> None:
        if not 0 <= at <= self.num_rows:
            return
        self.rows.insert(at, Row(content))
        self.dirty += 1

    def delete_row(self, at: int) -> None:
        if not 0 <= at < self.num_rows:
            return
        del self.rows[at]
        self.dirty += 1

    def insert_char(self, row: int, col: int, ch: str) -> None:
        self._row(row).insert_char(col, ch)
        self.dirty += 1

    def delete_char(self, row: int, col: int) -> None:
        if self._row(row).delete_char(col):
            self.dirty += 1

    def split_row(self, row: int, col: int) -> None:
        """Break row at col, moving the tail onto a new row below it."""
        tail = self._row(row).truncate(col)
        self.insert_row(row + 1, tail)

    def merge_rows(self, row: int) -> None:
        """Append row onto the row above it and remove row."""
        if row < 1:
            return
        chars = self._row(row).chars
        self.rows[row - 1].append(chars)
        self.delete_row(row)
