"""LoggerEngine — コントローラが駆動するロガーエンジンの能力。"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol, TextIO, runtime_checkable

LifecycleCallback = Callable[[], None]
"""エンジンの started / stopped イベントで呼ばれるコールバック。"""


@runtime_checkable
class LoggerEngine(Protocol):
    """ロガーエンジンのプロトコル。

    レコードの整形やバッファリングなどの内部はコントローラから不透明。
    """

    def set_destination(self, stream: TextIO) -> None:
        """レコードの出力先を設定する。"""
        ...

    def set_instance_id(self, instance_id: str) -> None:
        """インスタンス ID を設定する。"""
        ...

    def set_started_callback(self, callback: LifecycleCallback) -> None:
        """起動完了時のコールバックを設定する。"""
        ...

    def set_stopped_callback(self, callback: LifecycleCallback) -> None:
        """停止完了時のコールバックを設定する。"""
        ...

    def start(self) -> bool:
        """エンジンを起動する。"""
        ...

    def stop(self) -> bool:
        """エンジンに停止を要求する。完了は待たない。"""
        ...

    def run_to_completion(self) -> bool:
        """停止要求まで実行し、後始末まで完了させる。"""
        ...
