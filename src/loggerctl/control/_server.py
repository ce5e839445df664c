"""ControlServer — 実行中インスタンス側の制御チャネル応答。

専用スレッドで REP ソケットを bind し、Poller で要求を待つ。
ソケットの生成から close までを同じスレッドで行う。
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Final

import zmq
from pydantic import ValidationError

from loggerctl.models.config import DEFAULT_POLL_INTERVAL_SECONDS
from loggerctl.models.control import ControlCommand, ControlReply, ControlRequest
from loggerctl.models.identity import ServiceEndpoint

logger = logging.getLogger(__name__)

_JOIN_TIMEOUT_SECONDS: Final[float] = 2.0


class ControlServer:
    """制御チャネルのサーバー。

    Args:
        service: bind する制御チャネル。
        on_stop: stop 要求時に呼ばれる。戻り値が応答の success になる。
        on_record: write 要求時にレコード本文を受け取る。
        poll_interval: 停止確認の間隔（秒）。
    """

    def __init__(
        self,
        service: ServiceEndpoint,
        on_stop: Callable[[], bool],
        on_record: Callable[[str], None],
        poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
    ) -> None:
        self._service = service
        self._on_stop = on_stop
        self._on_record = on_record
        self._poll_ms = max(1, int(poll_interval * 1000))
        self._closing = threading.Event()
        self._bound = threading.Event()
        self._bind_error: zmq.ZMQError | None = None
        self._thread: threading.Thread | None = None

    @property
    def service(self) -> ServiceEndpoint:
        return self._service

    def start(self) -> None:
        """サーバースレッドを開始し、bind 完了まで待つ。

        ガード保持者のみが呼ぶ前提のため、残存するソケットファイルは
        前のインスタンスの残骸として削除する。

        Raises:
            zmq.ZMQError: bind に失敗した場合。
            OSError: 残存ソケットファイルを削除できない場合。
        """
        if self._thread is not None:
            raise RuntimeError("ControlServer is already started")
        self._service.address.unlink(missing_ok=True)
        self._thread = threading.Thread(
            target=self._serve, name="loggerctl-control", daemon=True
        )
        self._thread.start()
        self._bound.wait()
        if self._bind_error is not None:
            self._thread.join()
            self._thread = None
            raise self._bind_error

    def close(self) -> None:
        """サーバースレッドを停止し、ソケットファイルを削除する。"""
        self._closing.set()
        if self._thread is not None:
            self._thread.join(timeout=_JOIN_TIMEOUT_SECONDS)
            if self._thread.is_alive():
                logger.warning("Control server thread did not stop cleanly")
            self._thread = None
        self._service.address.unlink(missing_ok=True)

    def _serve(self) -> None:
        socket = zmq.Context.instance().socket(zmq.REP)
        socket.setsockopt(zmq.LINGER, 0)
        try:
            try:
                socket.bind(self._service.url)
            except zmq.ZMQError as e:
                self._bind_error = e
                return
            finally:
                self._bound.set()

            logger.debug("Control server listening on '%s'.", self._service.url)
            poller = zmq.Poller()
            poller.register(socket, zmq.POLLIN)
            while not self._closing.is_set():
                events = dict(poller.poll(self._poll_ms))
                if events.get(socket) != zmq.POLLIN:
                    continue
                raw = socket.recv_string()
                socket.send_string(self._dispatch(raw).model_dump_json())
        finally:
            socket.close()

    def _dispatch(self, raw: str) -> ControlReply:
        try:
            request = ControlRequest.model_validate_json(raw)
        except ValidationError as e:
            logger.warning("Rejected malformed control request: %s", e)
            return ControlReply(success=False, message="malformed request")

        if request.command == ControlCommand.STOP:
            logger.info("Stop requested over control channel.")
            return ControlReply(success=self._on_stop())

        if request.text is None:
            return ControlReply(success=False, message="write command requires text")
        try:
            self._on_record(request.text)
        except OSError as e:
            logger.error("Failed to write record: %s", e)
            return ControlReply(success=False, message=str(e))
        return ControlReply(success=True)
