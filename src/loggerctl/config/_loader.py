"""TOML 設定ファイルの読み込み。

値の検証は行わない。LoggerctlConfig の構築時に検証される。
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Final

_PYPROJECT_SECTION: Final[tuple[str, ...]] = ("tool", "loggerctl")


def load_toml_config(path: Path) -> dict[str, object]:
    """TOML ファイルを辞書として読み込む。

    Raises:
        FileNotFoundError: ファイルが存在しない場合。
        PermissionError: 読み取り権限がない場合。
        tomllib.TOMLDecodeError: TOML 構文エラーの場合。
    """
    return tomllib.loads(path.read_text(encoding="utf-8"))


def load_pyproject_config(path: Path) -> dict[str, object] | None:
    """pyproject.toml の [tool.loggerctl] テーブルを返す。無ければ None。

    Raises:
        load_toml_config と同じ。
    """
    node: object = load_toml_config(path)
    for key in _PYPROJECT_SECTION:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node if isinstance(node, dict) else None
