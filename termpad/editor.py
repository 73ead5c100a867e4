"""Main editor controller."""

import logging
import time
from typing import Callable, Optional

from .commands import CommandRegistry, LoopAction, QuitCommand
from .constants import EditorConstants
from .errors import FileWriteError
from .keyboard import (
    KeyboardHandler, KeyEvent, KeyType,
    ARROW_UP, ARROW_DOWN, ARROW_LEFT, ARROW_RIGHT, PAGE_UP,
    BACKSPACE, DELETE, ESCAPE, ENTER,
)
from .model import Cursor, Document
from .settings import EditorSettings
from .terminal import TerminalSession
from .view import StatusMessage, Viewport, ViewportRenderer

logger = logging.getLogger(__name__)


class Editor:
    """Editor application controller.

    Owns the document, cursor, viewport, status message and quit countdown.
    ``run()`` holds the terminal in raw mode for the duration of the control
    loop and hands it back however the loop ends.
    """

    def __init__(self, terminal: Optional[TerminalSession] = None,
                 settings: Optional[EditorSettings] = None,
                 clock: Callable[[], float] = time.monotonic):
        """Initialize the editor components.

        Args:
            terminal: Terminal session to draw on (created if omitted)
            settings: Editor settings (defaults if omitted)
            clock: Time source for status message expiry
        """
        self.settings = settings or EditorSettings()
        self.terminal = terminal or TerminalSession(read_timeout=self.settings.read_timeout)
        self.keyboard = KeyboardHandler(self.terminal)
        self.view = ViewportRenderer(self.terminal.term)
        self.command_registry = CommandRegistry()
        self.clock = clock
        self.document = Document()
        self.cursor = Cursor()
        self.viewport = Viewport()
        self.quit_times = self.settings.quit_times
        self.status_message: Optional[StatusMessage] = None
        self.prompt_mode = None  # None or 'save_filename'
        self.prompt_input = ""

    @property
    def filename(self) -> Optional[str]:
        return self.document.filename

    def load_file(self, filename: str):
        """Load a file into the editor.

        Raises:
            FileReadError: If the file cannot be read.
        """
        self.document.load(filename)
        self.cursor = Cursor()
        self.viewport = Viewport()

    def set_window_size(self, rows: int, cols: int) -> None:
        self.view.resize(rows, cols)

    def set_status_message(self, text: str) -> None:
        self.status_message = StatusMessage(text, self.clock())

    # --- Control loop ---

    def run(self):
        """Run the main editor loop until the user quits."""
        with self.terminal:
            rows, cols = self.terminal.query_window_size()
            self.set_window_size(rows, cols)
            self.set_status_message(EditorConstants.HELP_MESSAGE)
            logger.debug("Editor started at %dx%d", cols, rows)

            while True:
                self.refresh_screen()
                key_event = self.keyboard.get_key_event()
                if self.process_keypress(key_event) is LoopAction.QUIT:
                    break
        logger.debug("Editor loop finished")

    def process_keypress(self, key_event: KeyEvent) -> LoopAction:
        """Apply one key event to the editor state."""
        command = None
        if self.prompt_mode == 'save_filename':
            self._handle_filename_prompt(key_event)
            action = LoopAction.CONTINUE
        else:
            command = self.command_registry.lookup(key_event)
            action = command.execute(self, key_event)

        if not isinstance(command, QuitCommand):
            self.quit_times = self.settings.quit_times
        return action

    # --- Drawing ---

    def render_x(self) -> int:
        """Cursor column on screen, after tab expansion."""
        if self.cursor.y < self.document.num_rows:
            return self.document.rows[self.cursor.y].cx_to_rx(self.cursor.x)
        return 0

    def compose_frame(self) -> str:
        """Scroll to the cursor and build the next frame."""
        rx = self.render_x()
        self.view.scroll(self.viewport, self.cursor.y, rx)
        return self.view.compose_frame(
            self.document,
            self.viewport,
            self.cursor.y,
            rx,
            self.status_message,
            self.clock(),
            self.settings.message_timeout,
        )

    def refresh_screen(self) -> None:
        self.terminal.write(self.compose_frame())

    # --- Cursor movement ---

    def move_cursor(self, direction: str) -> None:
        """Move one step, wrapping at line ends and clamping to the row."""
        doc = self.document
        cur = self.cursor
        on_row = cur.y < doc.num_rows

        if direction == ARROW_LEFT:
            if cur.x != 0:
                cur.x -= 1
            elif cur.y > 0:
                cur.y -= 1
                cur.x = doc.row_length(cur.y)
        elif direction == ARROW_RIGHT:
            if on_row and cur.x < doc.row_length(cur.y):
                cur.x += 1
            elif on_row and cur.x == doc.row_length(cur.y):
                cur.y += 1
                cur.x = 0
        elif direction == ARROW_UP:
            if cur.y != 0:
                cur.y -= 1
        elif direction == ARROW_DOWN:
            if cur.y < doc.num_rows:
                cur.y += 1

        cur.x = min(cur.x, doc.row_length(cur.y))

    def move_beginning_of_line(self) -> None:
        self.cursor.x = 0

    def move_end_of_line(self) -> None:
        self.cursor.x = self.document.row_length(self.cursor.y)

    def page(self, direction: str) -> None:
        """Page Up/Down: jump to the viewport edge, then move a screenful."""
        rows = self.view.visible_rows
        if direction == PAGE_UP:
            self.cursor.y = self.viewport.row_offset
            step = ARROW_UP
        else:
            self.cursor.y = min(self.viewport.row_offset + rows - 1, self.document.num_rows)
            step = ARROW_DOWN
        for _ in range(rows):
            self.move_cursor(step)

    # --- Editing ---

    def insert_char(self, ch: str) -> None:
        if self.cursor.y == self.document.num_rows:
            self.document.insert_row(self.document.num_rows, "")
        self.document.insert_char(self.cursor.y, self.cursor.x, ch)
        self.cursor.x += 1

    def insert_newline(self) -> None:
        if self.cursor.x == 0:
            self.document.insert_row(self.cursor.y, "")
        else:
            self.document.split_row(self.cursor.y, self.cursor.x)
        self.cursor.y += 1
        self.cursor.x = 0

    def delete_char(self) -> None:
        """Delete the character before the cursor, joining lines at column 0."""
        doc = self.document
        cur = self.cursor
        if cur.y == doc.num_rows:
            return
        if cur.x == 0 and cur.y == 0:
            return
        if cur.x > 0:
            doc.delete_char(cur.y, cur.x - 1)
            cur.x -= 1
        else:
            cur.x = doc.row_length(cur.y - 1)
            doc.merge_rows(cur.y)
            cur.y -= 1

    # --- File and session commands ---

    def save(self) -> None:
        """Handle Ctrl-S: save, or ask for a file name first."""
        if not self.filename:
            self.prompt_mode = 'save_filename'
            self.prompt_input = ""
            self._show_prompt()
            return
        self.save_file(self.filename)

    def save_file(self, filename: str) -> bool:
        """Write the document and report the outcome on the status line.

        Returns:
            True if save succeeded, False otherwise
        """
        try:
            written = self.document.save(filename)
        except FileWriteError as e:
            self.set_status_message(EditorConstants.SAVE_FAILED.format(e.reason))
            return False
        self.set_status_message(EditorConstants.SAVE_OK.format(written))
        return True

    def request_quit(self) -> LoopAction:
        """Handle Ctrl-Q, requiring repeated presses when there are unsaved changes."""
        if self.document.dirty and self.quit_times > 0:
            self.quit_times -= 1
            if self.quit_times > 0:
                self.set_status_message(EditorConstants.QUIT_WARNING.format(self.quit_times))
                return LoopAction.CONTINUE
        return LoopAction.QUIT

    def _show_prompt(self) -> None:
        self.set_status_message(EditorConstants.SAVE_PROMPT.format(self.prompt_input))

    def _handle_filename_prompt(self, key_event: KeyEvent) -> None:
        """Handle keypress during filename prompt."""
        if key_event.key_type == KeyType.SPECIAL and key_event.value == ESCAPE:
            self.prompt_mode = None
            self.prompt_input = ""
            self.set_status_message(EditorConstants.SAVE_ABORTED)
            return
        if key_event.key_type == KeyType.SPECIAL and key_event.value == ENTER:
            if self.prompt_input:
                filename = self.prompt_input
                self.prompt_mode = None
                self.prompt_input = ""
                self.save_file(filename)
                return
        elif (key_event.key_type == KeyType.SPECIAL and key_event.value in (BACKSPACE, DELETE)) or \
                (key_event.key_type == KeyType.CTRL and key_event.value == 'h'):
            self.prompt_input = self.prompt_input[:-1]
        elif key_event.key_type == KeyType.REGULAR:
            char = key_event.value
            if 32 <= ord(char) < 128:
                self.prompt_input += char
        self._show_prompt()
