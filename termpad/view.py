"""Viewport scrolling and full-screen frame composition."""

from dataclasses import dataclass
from typing import Optional

import blessed

from .constants import EditorConstants
from .model import Document
from .version import __version__


@dataclass
class Viewport:
    """Top-left document coordinate currently on screen."""
    row_offset: int = 0
    col_offset: int = 0


@dataclass
class StatusMessage:
    """A message for the bottom line, timestamped when it was set."""
    text: str
    created: float

    def is_visible(self, now: float, timeout: float = EditorConstants.MESSAGE_TIMEOUT) -> bool:
        return now - self.created < timeout


def scroll(viewport: Viewport, cursor_y: int, render_x: int,
           visible_rows: int, visible_cols: int) -> None:
    """Move the viewport just enough to bring the cursor on screen."""
    if cursor_y < viewport.row_offset:
        viewport.row_offset = cursor_y
    if cursor_y >= viewport.row_offset + visible_rows:
        viewport.row_offset = cursor_y - visible_rows + 1
    if render_x < viewport.col_offset:
        viewport.col_offset = render_x
    if render_x >= viewport.col_offset + visible_cols:
        viewport.col_offset = render_x - visible_cols + 1


class ViewportRenderer:
    """Composes one complete frame per refresh.

    The frame is a single string built from Blessed capability strings; it is
    never drawn incrementally, so the terminal sees one write per cycle.
    """

    def __init__(self, term: blessed.Terminal, screen_rows: int = 24, screen_cols: int = 80):
        self.term = term
        self.resize(screen_rows, screen_cols)

    def resize(self, screen_rows: int, screen_cols: int) -> None:
        """Set the terminal geometry; two rows are kept for the status area."""
        self.visible_rows = max(1, screen_rows - EditorConstants.STATUS_BAR_ROWS)
        self.visible_cols = max(1, screen_cols)

    def scroll(self, viewport: Viewport, cursor_y: int, render_x: int) -> None:
        scroll(viewport, cursor_y, render_x, self.visible_rows, self.visible_cols)

    def welcome_line(self) -> str:
        cols = self.visible_cols
        welcome = EditorConstants.WELCOME_MESSAGE.format(__version__)[:cols]
        padding = (cols - len(welcome)) // 2
        if padding:
            return EditorConstants.FILLER + " " * (padding - 1) + welcome
        return welcome

    def draw_rows(self, document: Document, viewport: Viewport) -> list[str]:
        """Text for every visible screen row, without terminal escapes."""
        lines = []
        for y in range(self.visible_rows):
            file_row = y + viewport.row_offset
            if file_row >= document.num_rows:
                if document.num_rows == 0 and y == self.visible_rows // 3:
                    lines.append(self.welcome_line())
                else:
                    lines.append(EditorConstants.FILLER)
            else:
                render = document.rows[file_row].render
                start = viewport.col_offset
                lines.append(render[start:start + self.visible_cols])
        return lines

    def status_bar(self, document: Document, cursor_y: int) -> str:
        """Status bar text padded to the full width."""
        cols = self.visible_cols
        name = (document.filename or EditorConstants.NO_NAME)[:EditorConstants.STATUS_FILENAME_WIDTH]
        modified = " (modified)" if document.dirty else ""
        left = f"{name} - {document.num_rows} lines{modified}"[:cols]
        right = f"{cursor_y + 1}/{document.num_rows}"
        if len(left) + len(right) <= cols:
            return left + " " * (cols - len(left) - len(right)) + right
        return left.ljust(cols)

    def message_bar(self, message: Optional[StatusMessage], now: float,
                    timeout: float = EditorConstants.MESSAGE_TIMEOUT) -> str:
        if message and message.is_visible(now, timeout):
            return message.text[:self.visible_cols]
        return ""

    def compose_frame(self, document: Document, viewport: Viewport, cursor_y: int, render_x: int,
                      message: Optional[StatusMessage], now: float,
                      timeout: float = EditorConstants.MESSAGE_TIMEOUT) -> str:
        """Build the complete output for one refresh.

        Args:
            document: Buffer being edited
            viewport: Scroll offsets, already adjusted for the cursor
            cursor_y: Cursor row in document coordinates
            render_x: Cursor column in render coordinates
            message: Current status message, if any
            now: Current time, compared against the message timestamp
            timeout: Seconds a message stays visible

        Returns:
            The frame as one string, ready to be written in a single call.
        """
        term = self.term
        out = [term.hide_cursor, term.home]

        for line in self.draw_rows(document, viewport):
            out.append(line)
            out.append(term.clear_eol)
            out.append("\r\n")

        out.append(term.reverse)
        out.append(self.status_bar(document, cursor_y))
        out.append(term.normal)
        out.append("\r\n")

        out.append(term.clear_eol)
        out.append(self.message_bar(message, now, timeout))

        out.append(term.move_yx(cursor_y - viewport.row_offset, render_x - viewport.col_offset))
        out.append(term.normal_cursor)
        return "".join(out)
