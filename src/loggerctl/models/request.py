"""LifecycleAction と LifecycleRequest の定義。"""

from __future__ import annotations

from enum import StrEnum

from loggerctl.models._base import LoggerctlBaseModel
from loggerctl.models.config import LoggerctlConfig


class LifecycleAction(StrEnum):
    """コマンドラインで指定するアクション。"""

    SPAWN = "spawn"
    START = "start"
    STATUS = "status"
    STOP = "stop"


class LifecycleRequest(LoggerctlBaseModel):
    """アクションハンドラに渡す不変の実行要求。

    Attributes:
        action: 実行するアクション。
        instance_id: 検証済みのインスタンス ID。
        output_file: 出力先パス。None は stdout。
        append: 出力ファイルを追記モードで開くか。
        wrapped_command: start の背後で実行するコマンド。None は指定なし。
        switches: 元のコマンドラインのスイッチ群（spawn の伝播用）。
        config: 解決済みの設定。
    """

    action: LifecycleAction
    instance_id: str = ""
    output_file: str | None = None
    append: bool = False
    wrapped_command: tuple[str, ...] | None = None
    switches: tuple[str, ...] = ()
    config: LoggerctlConfig = LoggerctlConfig()
