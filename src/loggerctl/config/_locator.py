"""設定ファイルの探索。

.loggerctl/ と pyproject.toml は探索開始ディレクトリから親方向へ、
ユーザーグローバル設定は固定パスで探す。
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import Final

_PROJECT_DIR_NAME: Final[str] = ".loggerctl"
_CONFIG_FILE_NAME: Final[str] = "config.toml"
_PYPROJECT_FILE_NAME: Final[str] = "pyproject.toml"


def _walk_up(start: Path) -> Iterator[Path]:
    """start 自身とその祖先ディレクトリを近い順に返す。"""
    current = start.resolve()
    yield current
    yield from current.parents


def find_project_root(start: Path) -> Path | None:
    """.loggerctl/ ディレクトリを含む最も近いディレクトリを返す。"""
    for directory in _walk_up(start):
        if (directory / _PROJECT_DIR_NAME).is_dir():
            return directory
    return None


def find_config_file(start: Path) -> Path | None:
    """.loggerctl/config.toml のパスを返す（ファイルの存在は確認しない）。"""
    project_root = find_project_root(start)
    if project_root is None:
        return None
    return project_root / _PROJECT_DIR_NAME / _CONFIG_FILE_NAME


def find_pyproject_toml(start: Path) -> Path | None:
    """最も近い pyproject.toml ファイルを返す。"""
    for directory in _walk_up(start):
        candidate = directory / _PYPROJECT_FILE_NAME
        if candidate.is_file():
            return candidate
    return None


def get_user_config_path() -> Path:
    """~/.config/loggerctl/config.toml を返す（存在チェックは行わない）。"""
    return Path.home() / ".config" / "loggerctl" / _CONFIG_FILE_NAME
