"""Custom build hook for Hatchling to generate build info."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Any

from hatchling.builders.hooks.plugin.interface import BuildHookInterface


class CustomBuildHook(BuildHookInterface):
    """Writes dword/_build_info.py with the commit being built."""

    def initialize(self, version: str, build_data: dict[str, Any]) -> None:
        project_root = Path(self.root)
        commit = self._run_git(["rev-parse", "HEAD"], cwd=project_root)
        date = self._run_git(["show", "-s", "--format=%cI", "HEAD"], cwd=project_root)
        (project_root / "dword" / "_build_info.py").write_text(
            "# Auto-generated at build time.\n"
            f"COMMIT = {commit!r}\n"
            f"DATE = {date!r}\n",
            encoding="utf-8",
        )
        build_data.setdefault("artifacts", []).append("dword/_build_info.py")

    def _run_git(self, args: list[str], cwd: Path) -> str | None:
        try:
            out = subprocess.check_output(["git", *args], cwd=str(cwd),
                                          stderr=subprocess.DEVNULL)
            return out.decode().strip() or None
        except (subprocess.CalledProcessError, FileNotFoundError, OSError):
            # Build should not fail just because git is unavailable
            return None
