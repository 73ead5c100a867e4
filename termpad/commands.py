"""Command pattern implementation for editor actions."""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Dict, Tuple, Optional, TYPE_CHECKING

from .keyboard import (
    KeyType, ARROW_UP, ARROW_DOWN, ARROW_LEFT, ARROW_RIGHT, HOME, END,
    PAGE_UP, PAGE_DOWN, DELETE, BACKSPACE, ESCAPE, ENTER,
)

if TYPE_CHECKING:
    from .editor import Editor
    from .keyboard import KeyEvent


class LoopAction(Enum):
    """What the control loop should do after handling a key."""
    CONTINUE = "continue"
    QUIT = "quit"


class EditorCommand(ABC):
    """Base class for editor commands."""

    @abstractmethod
    def execute(self, editor: 'Editor', key_event: 'KeyEvent') -> LoopAction:
        """Execute the command.

        Args:
            editor: Editor instance
            key_event: The key event that triggered this command

        Returns:
            Whether the control loop keeps running
        """


class MovementCommand(EditorCommand):
    """Base class for cursor movement commands."""

    def execute(self, editor: 'Editor', key_event: 'KeyEvent') -> LoopAction:
        self._move(editor, key_event)
        return LoopAction.CONTINUE

    @abstractmethod
    def _move(self, editor: 'Editor', key_event: 'KeyEvent'):
        """Perform the movement."""


class ArrowCommand(MovementCommand):
    def _move(self, editor, key_event):
        editor.move_cursor(key_event.value)


class BeginningOfLineCommand(MovementCommand):
    def _move(self, editor, key_event):
        editor.move_beginning_of_line()


class EndOfLineCommand(MovementCommand):
    def _move(self, editor, key_event):
        editor.move_end_of_line()


class PageCommand(MovementCommand):
    def _move(self, editor, key_event):
        editor.page(key_event.value)


class EditCommand(EditorCommand):
    """Base class for editing commands."""

    def execute(self, editor: 'Editor', key_event: 'KeyEvent') -> LoopAction:
        self._edit(editor, key_event)
        return LoopAction.CONTINUE

    @abstractmethod
    def _edit(self, editor: 'Editor', key_event: 'KeyEvent'):
        """Perform the edit."""


class InsertTextCommand(EditCommand):
    def _edit(self, editor, key_event):
        # No filtering: control bytes are inserted as typed
        editor.insert_char(key_event.text)


class InsertNewlineCommand(EditCommand):
    def _edit(self, editor, key_event):
        editor.insert_newline()


class BackspaceCommand(EditCommand):
    def _edit(self, editor, key_event):
        editor.delete_char()


class DeleteCharCommand(EditCommand):
    """Forward delete, expressed as Right followed by Backspace."""

    def _edit(self, editor, key_event):
        editor.move_cursor(ARROW_RIGHT)
        editor.delete_char()


class SystemCommand(EditorCommand):
    """Base class for system commands like save and quit."""

    def execute(self, editor: 'Editor', key_event: 'KeyEvent') -> LoopAction:
        return self._execute_system(editor, key_event) or LoopAction.CONTINUE

    @abstractmethod
    def _execute_system(self, editor: 'Editor', key_event: 'KeyEvent') -> Optional[LoopAction]:
        """Perform the system action."""


class QuitCommand(SystemCommand):
    def _execute_system(self, editor, key_event):
        return editor.request_quit()


class SaveCommand(SystemCommand):
    def _execute_system(self, editor, key_event):
        editor.save()


class NoOpCommand(SystemCommand):
    """Keys that only cause a redraw (Ctrl-L, bare Escape)."""

    def _execute_system(self, editor, key_event):
        return None


class CommandRegistry:
    """Registry for mapping key combinations to commands."""

    def __init__(self):
        self._commands: Dict[Tuple[KeyType, str], EditorCommand] = {}
        self._insert_text = InsertTextCommand()
        self._no_op = NoOpCommand()
        self._setup_default_commands()

    def _setup_default_commands(self):
        """Set up the default command mappings."""
        # Movement commands
        arrow = ArrowCommand()
        for direction in (ARROW_UP, ARROW_DOWN, ARROW_LEFT, ARROW_RIGHT):
            self.register((KeyType.SPECIAL, direction), arrow)
        self.register((KeyType.SPECIAL, HOME), BeginningOfLineCommand())
        self.register((KeyType.SPECIAL, END), EndOfLineCommand())

        # Paging
        page = PageCommand()
        self.register((KeyType.SPECIAL, PAGE_UP), page)
        self.register((KeyType.SPECIAL, PAGE_DOWN), page)

        # Editing commands
        self.register((KeyType.SPECIAL, ENTER), InsertNewlineCommand())
        self.register((KeyType.SPECIAL, BACKSPACE), BackspaceCommand())
        self.register((KeyType.CTRL, 'h'), BackspaceCommand())
        self.register((KeyType.SPECIAL, DELETE), DeleteCharCommand())

        # System commands
        self.register((KeyType.CTRL, 'q'), QuitCommand())
        self.register((KeyType.CTRL, 's'), SaveCommand())
        self.register((KeyType.CTRL, 'l'), self._no_op)
        self.register((KeyType.SPECIAL, ESCAPE), self._no_op)

    def register(self, key: Tuple[KeyType, str], command: EditorCommand):
        """Register a command for a key combination."""
        self._commands[key] = command

    def get_command(self, key_type: KeyType, value: str) -> Optional[EditorCommand]:
        """Get the command bound to a key combination, if any."""
        return self._commands.get((key_type, value))

    def lookup(self, key_event: 'KeyEvent') -> EditorCommand:
        """Resolve the command for a key event.

        Unbound regular and control keys insert themselves; unbound special
        keys do nothing.
        """
        command = self.get_command(key_event.key_type, key_event.value)
        if command:
            return command
        if key_event.key_type in (KeyType.REGULAR, KeyType.CTRL):
            return self._insert_text
        return self._no_op

    def execute(self, editor: 'Editor', key_event: 'KeyEvent') -> LoopAction:
        """Execute the command for the given key event."""
        return self.lookup(key_event).execute(editor, key_event)
