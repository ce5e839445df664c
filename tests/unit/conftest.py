"""共通フィクスチャ。"""

from __future__ import annotations

import subprocess
import sys
import tempfile
from collections.abc import Iterator
from pathlib import Path

import pytest

from loggerctl.lifecycle import _interrupt


@pytest.fixture
def runtime_dir() -> Iterator[Path]:
    """短いパスのランタイムディレクトリ。

    ipc:// のソケットパスには長さ制限があるため、深い tmp_path は使わない。
    """
    with tempfile.TemporaryDirectory(prefix="lc-", dir="/tmp") as path:
        yield Path(path)


@pytest.fixture(autouse=True)
def _reset_interrupt_target(monkeypatch: pytest.MonkeyPatch) -> None:
    """公開済みの割り込み対象をテストごとに未公開へ戻す。"""
    monkeypatch.setattr(_interrupt, "_published_target", None)


@pytest.fixture
def dead_pid() -> int:
    """終了・回収済みの子プロセスの PID。"""
    process = subprocess.Popen([sys.executable, "-c", "pass"])
    process.wait()
    return process.pid
