"""ControlClient — 実行中インスタンスへの制御要求。

REQ ソケットで 1 往復だけ通信する。再試行は行わない（呼び出し側の責務）。
"""

from __future__ import annotations

import logging

import zmq
from pydantic import ValidationError

from loggerctl.errors import RpcError
from loggerctl.models.config import DEFAULT_RPC_TIMEOUT_SECONDS
from loggerctl.models.control import ControlCommand, ControlReply, ControlRequest
from loggerctl.models.identity import ServiceEndpoint

logger = logging.getLogger(__name__)


def _invoke(
    service: ServiceEndpoint, request: ControlRequest, timeout: float
) -> ControlReply:
    """要求を送信し応答を受け取る。

    Raises:
        RpcError: ソケットが存在しない、送受信に失敗した、応答がタイムアウト
            した、または応答が不正な場合。
    """
    # ドメインソケットが無ければ待つまでもなく接続できない
    if not service.address.exists():
        raise RpcError(
            f"Failed to connect to logging service at '{service.url}': "
            "no instance is listening."
        )

    timeout_ms = int(timeout * 1000)
    socket = zmq.Context.instance().socket(zmq.REQ)
    socket.setsockopt(zmq.LINGER, 0)
    socket.setsockopt(zmq.SNDTIMEO, timeout_ms)
    socket.setsockopt(zmq.RCVTIMEO, timeout_ms)
    try:
        socket.connect(service.url)
        socket.send_string(request.model_dump_json(exclude_none=True))
        raw = socket.recv_string()
    except zmq.Again:
        raise RpcError(
            f"No reply from logging service at '{service.url}' within {timeout}s."
        ) from None
    except zmq.ZMQError as e:
        raise RpcError(
            f"Failed to communicate with logging service at '{service.url}': {e}"
        ) from e
    finally:
        socket.close()

    try:
        return ControlReply.model_validate_json(raw)
    except ValidationError as e:
        raise RpcError(f"Malformed reply from logging service: {e}") from e


def send_stop(
    service: ServiceEndpoint, timeout: float = DEFAULT_RPC_TIMEOUT_SECONDS
) -> None:
    """インスタンスに停止を要求する。停止完了までは待たない。

    Args:
        service: 停止対象の制御チャネル。
        timeout: 応答待ち時間（秒）。

    Raises:
        RpcError: 接続できない、またはリモートが失敗を返した場合。
    """
    logger.info("Stopping logging service instance at '%s'.", service.url)
    reply = _invoke(service, ControlRequest(command=ControlCommand.STOP), timeout)
    if not reply.success:
        detail = f": {reply.message}" if reply.message else "."
        raise RpcError(f"Failed to stop logging service{detail}")
    logger.info("Logging service shutdown has been requested.")


def send_record(
    service: ServiceEndpoint,
    text: str,
    timeout: float = DEFAULT_RPC_TIMEOUT_SECONDS,
) -> None:
    """インスタンスの出力先に 1 レコードを書き込ませる。

    Raises:
        RpcError: 接続できない、またはリモートが失敗を返した場合。
    """
    reply = _invoke(
        service, ControlRequest(command=ControlCommand.WRITE, text=text), timeout
    )
    if not reply.success:
        raise RpcError(f"Logging service rejected the record: {reply.message}")
