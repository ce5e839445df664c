"""ライフサイクルテスト共通フィクスチャ・ヘルパー。"""

from __future__ import annotations

import threading
from collections.abc import Callable
from pathlib import Path
from typing import TextIO

from loggerctl.engine import LifecycleCallback
from loggerctl.models.config import LoggerctlConfig
from loggerctl.models.request import LifecycleAction, LifecycleRequest

PATCH_CREATE_ENGINE = "loggerctl.lifecycle._controller.create_engine"
PATCH_LAUNCH_BACKGROUND = "loggerctl.lifecycle._controller.launch_background"
PATCH_SEND_STOP = "loggerctl.lifecycle._controller.send_stop"
PATCH_WAIT_ANY = "loggerctl.lifecycle._controller.wait_any"

INSTANCE_ID = "t1"


def make_request(
    action: LifecycleAction,
    runtime_dir: Path,
    **kwargs: object,
) -> LifecycleRequest:
    """短いタイムアウトの設定を持つ LifecycleRequest を生成する。"""
    return LifecycleRequest(
        action=action,
        instance_id=INSTANCE_ID,
        config=LoggerctlConfig(
            runtime_dir=runtime_dir, guard_timeout=0.1, poll_interval=0.01
        ),
        **kwargs,  # type: ignore[arg-type]
    )


def _noop() -> None:
    pass


class FakeEngine:
    """LoggerEngine のテスト用実装。

    stop() が呼ばれるまで run_to_completion はブロックする。
    stopped_on_start=True なら起動直後から停止要求済みとして振る舞う。
    """

    def __init__(
        self,
        start_result: bool = True,
        complete_result: bool = True,
        stopped_on_start: bool = False,
    ) -> None:
        self.start_result = start_result
        self.complete_result = complete_result
        self.stopped_on_start = stopped_on_start
        self.destination: TextIO | None = None
        self.instance_id: str | None = None
        self.started_callback: LifecycleCallback = _noop
        self.stopped_callback: LifecycleCallback = _noop
        self.stop_calls = 0
        self.on_run: Callable[[], None] = _noop
        self._stop_requested = threading.Event()

    def set_destination(self, stream: TextIO) -> None:
        self.destination = stream

    def set_instance_id(self, instance_id: str) -> None:
        self.instance_id = instance_id

    def set_started_callback(self, callback: LifecycleCallback) -> None:
        self.started_callback = callback

    def set_stopped_callback(self, callback: LifecycleCallback) -> None:
        self.stopped_callback = callback

    def start(self) -> bool:
        if not self.start_result:
            return False
        self.started_callback()
        if self.stopped_on_start:
            self._stop_requested.set()
        return True

    def stop(self) -> bool:
        self.stop_calls += 1
        self._stop_requested.set()
        return True

    def run_to_completion(self) -> bool:
        self.on_run()
        self._stop_requested.wait(timeout=10)
        self.stopped_callback()
        return self.complete_result


class FakeProcess:
    """wait_any で待機できるテスト用プロセスハンドル。"""

    def __init__(self, exited: bool = False) -> None:
        self.exited = exited
        self.pid = 4242
        self.returncode = 1 if exited else None

    @property
    def name(self) -> str:
        return f"process {self.pid}"

    def fired(self) -> bool:
        return self.exited
