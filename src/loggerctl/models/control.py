"""制御チャネルのメッセージ定義。

REQ/REP の 1 往復で ControlRequest を送り ControlReply を受け取る。
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import model_validator

from loggerctl.models._base import LoggerctlBaseModel


class ControlCommand(StrEnum):
    """制御チャネルで受け付けるコマンド。"""

    STOP = "stop"
    WRITE = "write"


class ControlRequest(LoggerctlBaseModel):
    """制御チャネルへの要求。write の場合のみ text を持つ。"""

    command: ControlCommand
    text: str | None = None

    @model_validator(mode="after")
    def _check_text(self) -> ControlRequest:
        if self.command == ControlCommand.WRITE and self.text is None:
            raise ValueError("write command requires text")
        if self.command == ControlCommand.STOP and self.text is not None:
            raise ValueError("stop command does not take text")
        return self


class ControlReply(LoggerctlBaseModel):
    """制御チャネルからの応答。"""

    success: bool
    message: str | None = None
