"""Tests for the command line entry point."""

from unittest.mock import patch

import pytest

from termpad.__main__ import main
from termpad.editor import Editor
from termpad.errors import TerminalConfigError, WindowSizeError
from termpad.version import __version__


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    monkeypatch.setenv("TERMPAD_CONFIG", str(tmp_path / "config.json"))
    monkeypatch.delenv("TERMPAD_LOG", raising=False)


def test_version(capsys):
    assert main(["--version"]) == 0
    assert __version__ in capsys.readouterr().out


def test_too_many_arguments(capsys):
    assert main(["a.txt", "b.txt"]) == 2
    assert "usage" in capsys.readouterr().err


def test_missing_file_is_fatal_before_raw_mode(tmp_path, capsys):
    with patch.object(Editor, "run") as mock_run:
        status = main([str(tmp_path / "nope.txt")])
    assert status == 1
    mock_run.assert_not_called()
    err = capsys.readouterr().err
    assert err.startswith("termpad: ")
    assert "nope.txt" in err


def test_opens_file_then_runs(tmp_path):
    path = tmp_path / "doc.txt"
    path.write_text("one\ntwo\n")
    loaded = []

    def fake_run(self):
        loaded.append(self.document.lines)

    with patch.object(Editor, "run", fake_run):
        assert main([str(path)]) == 0
    assert loaded == [["one", "two"]]


def test_no_path_starts_empty():
    with patch.object(Editor, "run") as mock_run:
        assert main([]) == 0
    mock_run.assert_called_once()


@pytest.mark.parametrize("error", [
    TerminalConfigError("tcgetattr: Inappropriate ioctl for device"),
    WindowSizeError("unexpected cursor position report b''"),
])
def test_terminal_errors_exit_nonzero(error, capsys):
    with patch.object(Editor, "run", side_effect=error):
        assert main([]) == 1
    assert capsys.readouterr().err == f"termpad: {error}\n"


def test_log_file_from_environment(tmp_path, monkeypatch):
    log_path = tmp_path / "termpad.log"
    monkeypatch.setenv("TERMPAD_LOG", str(log_path))
    with patch("termpad.__main__.logging.basicConfig") as mock_config, \
            patch.object(Editor, "run"):
        assert main([]) == 0
    assert mock_config.call_args.kwargs["filename"] == str(log_path)
