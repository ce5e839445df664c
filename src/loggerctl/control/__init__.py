"""制御チャネル。

ZeroMQ の REQ/REP を ipc:// トランスポートで使い、1 要求 1 応答で通信する。
"""

from loggerctl.control._client import send_record, send_stop
from loggerctl.control._server import ControlServer

__all__ = [
    "ControlServer",
    "send_record",
    "send_stop",
]
