from __future__ import annotations

import importlib.metadata
import subprocess
from pathlib import Path
from typing import NamedTuple, Optional

DISTRIBUTION = "d-word"


class BuildInfo(NamedTuple):
    commit: Optional[str]
    date: Optional[str]


def _run_git(args: list[str], cwd: Path) -> Optional[str]:
    try:
        out = subprocess.check_output(["git", *args], cwd=str(cwd),
                                      stderr=subprocess.DEVNULL)
        return out.decode().strip() or None
    except (subprocess.CalledProcessError, FileNotFoundError, OSError):
        return None


def _from_git_repo() -> Optional[BuildInfo]:
    here = Path(__file__).resolve().parent
    commit = _run_git(["rev-parse", "HEAD"], cwd=here)
    if not commit:
        return None
    date = _run_git(["show", "-s", "--format=%cI", "HEAD"], cwd=here)
    return BuildInfo(commit=commit, date=date)


def _from_embedded_file() -> Optional[BuildInfo]:
    # Generated at build time by the hatch build hook
    try:
        from . import _build_info  # type: ignore
    except ImportError:
        return None
    commit = getattr(_build_info, "COMMIT", None)
    date = getattr(_build_info, "DATE", None)
    if commit or date:
        return BuildInfo(commit=commit, date=date)
    return None


def get_version() -> str:
    try:
        return importlib.metadata.version(DISTRIBUTION)
    except importlib.metadata.PackageNotFoundError:
        return "unknown"


def get_build_info() -> BuildInfo:
    # Priority: live git repo -> embedded file -> unknowns
    for getter in (_from_git_repo, _from_embedded_file):
        info = getter()
        if info:
            return info
    return BuildInfo(commit=None, date=None)


def get_version_string() -> str:
    info = get_build_info()
    commit = info.commit[:7] if info.commit else "unknown"
    date = info.date or "unknown"
    return f"d-word {get_version()} ({commit} {date})"
