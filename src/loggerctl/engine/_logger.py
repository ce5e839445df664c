"""TraceLogger — 既定のロガーエンジン。

制御チャネルを提供し、クライアントから届いたレコードを出力先へ書き込む。
stop 要求（制御チャネル経由または直接呼び出し）で run_to_completion が返る。
"""

from __future__ import annotations

import logging
import sys
import threading
from enum import StrEnum
from pathlib import Path
from typing import TextIO

import zmq

from loggerctl.control import ControlServer
from loggerctl.engine._protocol import LifecycleCallback
from loggerctl.errors import LifecycleError
from loggerctl.models.config import DEFAULT_POLL_INTERVAL_SECONDS
from loggerctl.models.identity import endpoint

logger = logging.getLogger(__name__)


class EngineState(StrEnum):
    """TraceLogger の状態。IDLE → RUNNING → STOPPING → STOPPED の一方向。"""

    IDLE = "idle"
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"


def _noop() -> None:
    pass


class TraceLogger:
    """制御チャネル付きのロガーエンジン。

    Args:
        runtime_dir: 制御ソケットを置くディレクトリ。
        poll_interval: 制御サーバーの停止確認間隔（秒）。
    """

    def __init__(
        self,
        runtime_dir: Path,
        poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
    ) -> None:
        self._runtime_dir = runtime_dir
        self._poll_interval = poll_interval
        self._destination: TextIO = sys.stdout
        self._instance_id = ""
        self._started_callback: LifecycleCallback = _noop
        self._stopped_callback: LifecycleCallback = _noop
        self._state = EngineState.IDLE
        self._state_lock = threading.Lock()
        self._write_lock = threading.Lock()
        self._stop_requested = threading.Event()
        self._server: ControlServer | None = None

    @property
    def state(self) -> EngineState:
        return self._state

    def set_destination(self, stream: TextIO) -> None:
        self._destination = stream

    def set_instance_id(self, instance_id: str) -> None:
        self._instance_id = instance_id

    def set_started_callback(self, callback: LifecycleCallback) -> None:
        self._started_callback = callback

    def set_stopped_callback(self, callback: LifecycleCallback) -> None:
        self._stopped_callback = callback

    def start(self) -> bool:
        """制御サーバーを起動し、started コールバックを呼ぶ。"""
        with self._state_lock:
            if self._state != EngineState.IDLE:
                logger.error("Logger cannot be started from state '%s'.", self._state)
                return False
            self._state = EngineState.RUNNING

        server = ControlServer(
            endpoint(self._instance_id, self._runtime_dir),
            on_stop=self.stop,
            on_record=self.write,
            poll_interval=self._poll_interval,
        )
        try:
            server.start()
        except (zmq.ZMQError, OSError) as e:
            logger.error("Failed to open control channel: %s", e)
            self._state = EngineState.STOPPED
            return False
        self._server = server

        try:
            self._started_callback()
        except LifecycleError as e:
            logger.error("Logger started callback failed: %s", e)
            server.close()
            self._server = None
            self._state = EngineState.STOPPED
            return False

        logger.info("Logging service is listening on '%s'.", server.service.url)
        return True

    def stop(self) -> bool:
        """停止を要求する。冪等。起動前に呼ばれた場合は False。"""
        with self._state_lock:
            if self._state == EngineState.IDLE:
                return False
            if self._state == EngineState.RUNNING:
                self._state = EngineState.STOPPING
        self._stop_requested.set()
        return True

    def run_to_completion(self) -> bool:
        """停止要求まで待ち、制御サーバーを閉じて stopped コールバックを呼ぶ。"""
        if self._state == EngineState.IDLE:
            logger.error("Logger was never started.")
            return False
        if self._server is None:
            return False

        self._stop_requested.wait()
        self._server.close()
        self._server = None
        with self._write_lock:
            self._destination.flush()
        self._state = EngineState.STOPPED

        try:
            self._stopped_callback()
        except LifecycleError as e:
            logger.error("Logger stopped callback failed: %s", e)
            return False
        return True

    def write(self, text: str) -> None:
        """レコードを 1 行として出力先に書き込む。"""
        line = text if text.endswith("\n") else text + "\n"
        with self._write_lock:
            self._destination.write(line)
            self._destination.flush()
