"""Termpad CLI entry point.

Allows running via `python -m termpad` and provides the console script
defined in `pyproject.toml`.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional

from .errors import TermpadError
from .version import get_version_string

LOG_ENV_VAR = "TERMPAD_LOG"

USAGE = "usage: termpad [--version] [--keytest] [path]"


def _escape_bytes(raw: bytes) -> str:
    """Return a printable representation of raw key bytes."""
    return raw.decode('latin-1').encode('unicode_escape').decode('ascii')


def configure_logging() -> None:
    """Send log records to the file named by $TERMPAD_LOG, if set.

    The terminal is in raw mode while the editor runs, so logs never go to
    the screen.
    """
    path = os.environ.get(LOG_ENV_VAR)
    if not path:
        return
    logging.basicConfig(
        filename=path,
        level=logging.DEBUG,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def run_keyboard_test() -> None:
    """Run an interactive keyboard test using the editor's input stack.

    Prints each decoded key event. Quit with Ctrl-Q.
    """
    from .terminal import TerminalSession
    from .keyboard import KeyboardHandler, KeyType

    session = TerminalSession()
    with session:
        session.write("Keyboard test mode - press keys to see decoded events.\r\n")
        session.write("Quit with Ctrl-Q.\r\n")
        kb = KeyboardHandler(session)
        while True:
            ev = kb.get_key_event()
            if ev.key_type == KeyType.CTRL and ev.value == 'q':
                break
            raw = _escape_bytes(ev.raw)
            session.write(f"type={ev.key_type.value} value={ev.value!r} raw='{raw}'\r\n")


def main(argv: Optional[list[str]] = None) -> int:
    """Run the editor and return the process exit status."""
    args = sys.argv[1:] if argv is None else argv
    if args and args[0] in ("--version", "-V"):
        print(get_version_string())
        return 0
    if args and args[0] in ("--help", "-h"):
        print(USAGE)
        return 0
    if len(args) > 1:
        print(USAGE, file=sys.stderr)
        return 2

    configure_logging()
    # Lazy import to avoid importing terminal deps for --version
    from .editor import Editor
    from .settings import load_settings

    try:
        if args and args[0] in ('--keytest', '--keyboard-test'):
            run_keyboard_test()
            return 0
        editor = Editor(settings=load_settings())
        if args:
            editor.load_file(args[0])
        editor.run()
    except TermpadError as e:
        logging.getLogger(__name__).error("Fatal: %s", e)
        print(f"termpad: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
