from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Optional

__version__ = "0.1.0"


def _run_git(args: list[str], cwd: Path) -> Optional[str]:
    try:
        out = subprocess.check_output(["git", *args], cwd=str(cwd), stderr=subprocess.DEVNULL)
        return out.decode().strip() or None
    except (subprocess.CalledProcessError, FileNotFoundError, OSError):
        return None


def get_commit() -> Optional[str]:
    """Short commit hash when running from a git checkout, else None."""
    here = Path(__file__).resolve().parent
    if _run_git(["rev-parse", "--show-toplevel"], cwd=here) is None:
        return None
    return _run_git(["rev-parse", "--short=7", "HEAD"], cwd=here)


def get_version_string() -> str:
    commit = get_commit()
    if commit:
        return f"termpad {__version__} ({commit})"
    return f"termpad {__version__}"
