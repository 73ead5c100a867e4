import io

import blessed
import pytest

from termpad.editor import Editor
from termpad.terminal import TerminalSession


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(scope="session")
def term():
    return blessed.Terminal(kind="xterm-256color", force_styling=True, stream=io.StringIO())


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def editor(term, clock):
    ed = Editor(terminal=TerminalSession(terminal=term), clock=clock)
    ed.set_window_size(24, 80)
    return ed
