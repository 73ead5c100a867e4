"""Test keyboard input decoding."""

import pytest

from termpad.keyboard import KeyboardHandler, KeyEvent, KeyType


class ScriptedSource:
    """Byte source replaying a fixed script.

    ``None`` entries stand for reads that timed out. Once the script runs
    out every read times out.
    """

    def __init__(self, script):
        self._script = list(script)

    def read_byte_with_timeout(self):
        if self._script:
            return self._script.pop(0)
        return None

    @classmethod
    def from_bytes(cls, data: bytes):
        return cls(list(data))


def decode(data: bytes) -> KeyEvent:
    return KeyboardHandler(ScriptedSource.from_bytes(data)).get_key_event()


def test_printable_byte():
    event = decode(b"a")
    assert event.key_type == KeyType.REGULAR
    assert event.value == "a"
    assert event.text == "a"
    assert event.raw == b"a"


def test_enter_and_backspace():
    assert decode(b"\r") == KeyEvent(KeyType.SPECIAL, "enter", b"\r")
    assert decode(b"\n").value == "enter"
    assert decode(b"\x7f") == KeyEvent(KeyType.SPECIAL, "backspace", b"\x7f")


def test_tab_is_regular_text():
    event = decode(b"\t")
    assert event.key_type == KeyType.REGULAR
    assert event.text == "\t"


@pytest.mark.parametrize("byte,letter", [(0x11, "q"), (0x13, "s"), (0x08, "h"), (0x01, "a")])
def test_control_keys(byte, letter):
    event = decode(bytes([byte]))
    assert event.key_type == KeyType.CTRL
    assert event.value == letter
    assert event.text == chr(byte)


def test_high_byte_keeps_raw_value():
    event = decode(b"\xc3")
    assert event.key_type == KeyType.REGULAR
    assert event.text.encode("utf-8", "surrogateescape") == b"\xc3"


@pytest.mark.parametrize("seq,name", [
    (b"\x1b[A", "up"),
    (b"\x1b[B", "down"),
    (b"\x1b[C", "right"),
    (b"\x1b[D", "left"),
    (b"\x1b[H", "home"),
    (b"\x1b[F", "end"),
])
def test_csi_letter_sequences(seq, name):
    event = decode(seq)
    assert event.key_type == KeyType.SPECIAL
    assert event.value == name
    assert event.raw == seq


@pytest.mark.parametrize("seq,name", [
    (b"\x1b[1~", "home"),
    (b"\x1b[7~", "home"),
    (b"\x1b[3~", "delete"),
    (b"\x1b[4~", "end"),
    (b"\x1b[8~", "end"),
    (b"\x1b[5~", "page_up"),
    (b"\x1b[6~", "page_down"),
])
def test_csi_tilde_sequences(seq, name):
    assert decode(seq).value == name


@pytest.mark.parametrize("seq,name", [(b"\x1bOH", "home"), (b"\x1bOF", "end")])
def test_ss3_sequences(seq, name):
    assert decode(seq).value == name


@pytest.mark.parametrize("seq", [
    b"\x1b",          # lone Escape, both follow-up reads time out
    b"\x1b[",         # second byte never arrives
    b"\x1b[5",        # tilde never arrives
    b"\x1b[5x",       # digit not followed by tilde
    b"\x1b[2~",       # unmapped tilde code
    b"\x1b[Z",        # unmapped CSI letter
    b"\x1bOA",        # unmapped SS3 letter
    b"\x1bxy",        # unknown introducer
])
def test_unrecognized_or_incomplete_sequences_become_escape(seq):
    event = decode(seq)
    assert event.key_type == KeyType.SPECIAL
    assert event.value == "escape"


def test_timeout_between_escape_bytes_splits_sequence():
    source = ScriptedSource([0x1B, None, ord("["), ord("A")])
    handler = KeyboardHandler(source)
    assert handler.get_key_event().value == "escape"
    assert handler.get_key_event().value == "["
    assert handler.get_key_event().value == "A"


def test_waits_through_timeouts_for_first_byte():
    source = ScriptedSource([None, None, None, ord("x")])
    assert KeyboardHandler(source).get_key_event().value == "x"


def test_consecutive_events_share_no_state():
    handler = KeyboardHandler(ScriptedSource.from_bytes(b"a\x1b[Bb\x1b[3~"))
    values = [handler.get_key_event().value for _ in range(4)]
    assert values == ["a", "down", "b", "delete"]
