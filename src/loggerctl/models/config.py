"""設定管理モデル。

LoggerctlConfig は config.toml / pyproject.toml / CLI から解決される。
"""

from __future__ import annotations

import os
import tempfile
from enum import StrEnum
from pathlib import Path
from typing import Final

from pydantic import Field, field_validator

from loggerctl.models._base import LoggerctlBaseModel

DEFAULT_GUARD_TIMEOUT_SECONDS: Final[float] = 1.0
DEFAULT_POLL_INTERVAL_SECONDS: Final[float] = 0.05
DEFAULT_RPC_TIMEOUT_SECONDS: Final[float] = 5.0

_RUNTIME_DIR_NAME: Final[str] = "loggerctl"


class LogLevel(StrEnum):
    """ログ出力レベル。"""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LoggerctlConfig(LoggerctlBaseModel):
    """loggerctl の設定。

    Attributes:
        runtime_dir: 同期オブジェクトと制御ソケットを置くディレクトリ。
            None の場合は default_runtime_dir() を使う。
        guard_timeout: ガード取得の最大待ち時間（秒）。
        poll_interval: シグナル・ガードのポーリング間隔（秒）。
        rpc_timeout: 制御チャネルの応答待ち時間（秒）。
        log_level: ログ出力レベル。
    """

    runtime_dir: Path | None = None
    guard_timeout: float = Field(default=DEFAULT_GUARD_TIMEOUT_SECONDS, gt=0)
    poll_interval: float = Field(default=DEFAULT_POLL_INTERVAL_SECONDS, gt=0)
    rpc_timeout: float = Field(default=DEFAULT_RPC_TIMEOUT_SECONDS, gt=0)
    log_level: LogLevel = LogLevel.INFO

    @field_validator("log_level", mode="before")
    @classmethod
    def _lowercase_log_level(cls, v: object) -> object:
        # LogLevel の値はすべて小文字
        return v.lower() if isinstance(v, str) else v

    def effective_runtime_dir(self) -> Path:
        """runtime_dir が未設定ならデフォルトを返す。"""
        if self.runtime_dir is not None:
            return self.runtime_dir
        return default_runtime_dir()


def default_runtime_dir() -> Path:
    """ユーザー単位のランタイムディレクトリを返す（存在チェックは行わない）。

    $XDG_RUNTIME_DIR があればその下、なければ一時ディレクトリ下の
    ユーザー ID 付きディレクトリ。
    """
    xdg_runtime = os.environ.get("XDG_RUNTIME_DIR")
    if xdg_runtime:
        return Path(xdg_runtime) / _RUNTIME_DIR_NAME
    return Path(tempfile.gettempdir()) / f"{_RUNTIME_DIR_NAME}-{os.getuid()}"
