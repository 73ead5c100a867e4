"""Keyboard input decoding: raw terminal bytes to logical key events."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol

logger = logging.getLogger(__name__)

ESC = 0x1B
BACKSPACE_BYTE = 0x7F

# Special key names
ARROW_UP = "up"
ARROW_DOWN = "down"
ARROW_LEFT = "left"
ARROW_RIGHT = "right"
HOME = "home"
END = "end"
PAGE_UP = "page_up"
PAGE_DOWN = "page_down"
DELETE = "delete"
BACKSPACE = "backspace"
ESCAPE = "escape"
ENTER = "enter"

# ESC [ <letter>
CSI_LETTER_KEYS = {
    ord("A"): ARROW_UP,
    ord("B"): ARROW_DOWN,
    ord("C"): ARROW_RIGHT,
    ord("D"): ARROW_LEFT,
    ord("H"): HOME,
    ord("F"): END,
}

# ESC [ <digit> ~ ; terminals disagree on Home/End, so both codes are accepted
CSI_TILDE_KEYS = {
    ord("1"): HOME,
    ord("7"): HOME,
    ord("3"): DELETE,
    ord("4"): END,
    ord("8"): END,
    ord("5"): PAGE_UP,
    ord("6"): PAGE_DOWN,
}

# ESC O <letter>
SS3_KEYS = {
    ord("H"): HOME,
    ord("F"): END,
}


class KeyType(Enum):
    """Types of key events."""
    REGULAR = "regular"
    CTRL = "ctrl"
    SPECIAL = "special"


@dataclass(frozen=True)
class KeyEvent:
    """Represents a decoded keyboard event."""
    key_type: KeyType
    value: str  # Character for REGULAR, letter for CTRL, key name for SPECIAL
    raw: bytes = b""  # Bytes the event was decoded from

    @property
    def text(self) -> str:
        """The text this key inserts when typed into the document."""
        if self.key_type is KeyType.REGULAR:
            return self.value
        return self.raw.decode("utf-8", "surrogateescape")


class ByteSource(Protocol):
    def read_byte_with_timeout(self) -> Optional[int]: ...


class DecodeState(Enum):
    """Escape sequence decoder states."""
    IDLE = "idle"
    SAW_ESC = "saw_esc"
    SAW_INTRODUCER = "saw_introducer"
    SAW_DIGIT = "saw_digit"
    RESOLVED = "resolved"


def special(name: str, raw: bytes = b"") -> KeyEvent:
    return KeyEvent(KeyType.SPECIAL, name, raw)


def parse_byte(byte: int) -> KeyEvent:
    """Map a single non-escape byte to a key event."""
    raw = bytes([byte])
    if byte in (0x0D, 0x0A):
        # Enter arrives as CR in raw mode; Ctrl-J behaves the same
        return special(ENTER, raw)
    if byte == BACKSPACE_BYTE:
        return special(BACKSPACE, raw)
    if byte == 0x09:
        return KeyEvent(KeyType.REGULAR, "\t", raw)
    if 1 <= byte <= 26:
        return KeyEvent(KeyType.CTRL, chr(ord("a") + byte - 1), raw)
    return KeyEvent(KeyType.REGULAR, raw.decode("utf-8", "surrogateescape"), raw)


class KeyboardHandler:
    """Decodes keystrokes read from a byte source.

    Escape sequences are recognised by reading the follow-up bytes within the
    source's read timeout. A slow or fragmented sequence therefore decodes as a
    bare Escape followed by ordinary keys; this is inherent to timeout-based
    decoding.
    """

    def __init__(self, source: ByteSource):
        """Initialize with anything providing read_byte_with_timeout()."""
        self.source = source

    def get_key_event(self) -> KeyEvent:
        """Block until a key arrives and return it."""
        byte = None
        while byte is None:
            byte = self.source.read_byte_with_timeout()
        if byte != ESC:
            return parse_byte(byte)
        event = self._read_escape_sequence()
        logger.debug("Decoded escape sequence %r as %s", event.raw, event.value)
        return event

    def _read_escape_sequence(self) -> KeyEvent:
        state = DecodeState.SAW_ESC
        seq = bytearray([ESC])
        introducer = None
        result = ESCAPE

        while state is not DecodeState.RESOLVED:
            byte = self.source.read_byte_with_timeout()
            if byte is None:
                # Incomplete sequence: treat as a lone Escape keypress
                result = ESCAPE
                break
            seq.append(byte)

            if state is DecodeState.SAW_ESC:
                introducer = byte
                state = DecodeState.SAW_INTRODUCER
            elif state is DecodeState.SAW_INTRODUCER:
                if introducer == ord("[") and ord("0") <= byte <= ord("9"):
                    state = DecodeState.SAW_DIGIT
                    continue
                if introducer == ord("["):
                    result = CSI_LETTER_KEYS.get(byte, ESCAPE)
                elif introducer == ord("O"):
                    result = SS3_KEYS.get(byte, ESCAPE)
                state = DecodeState.RESOLVED
            elif state is DecodeState.SAW_DIGIT:
                if byte == ord("~"):
                    result = CSI_TILDE_KEYS.get(seq[2], ESCAPE)
                state = DecodeState.RESOLVED

        return special(result, bytes(seq))
