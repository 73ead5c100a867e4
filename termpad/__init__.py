"""Termpad - a small raw-mode terminal text editor."""

import logging

from .model import Cursor, Document, Row
from .editor import Editor
from .version import __version__

# Nothing may reach the terminal through logging while it is in raw mode
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    'Cursor',
    'Document',
    'Editor',
    'Row',
    '__version__',
]
