"""InstanceIdentity — インスタンス ID から名前とアドレスを導出する。

独立したプロセス同士が事前の通信なしに同じ同期オブジェクトへ到達できるよう、
名前はすべて (種別, インスタンス ID) の純粋関数として決まる。
"""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path
from typing import Final, Literal

from loggerctl.errors import ConfigurationError
from loggerctl.models._base import LoggerctlBaseModel

MAX_INSTANCE_ID_LENGTH: Final[int] = 16
"""インスタンス ID の最大文字数。"""

INSTANCE_ID_ENV_VAR: Final[str] = "LOGGERCTL_INSTANCE_ID"
"""ラップしたコマンドへインスタンス ID を伝える環境変数名。"""

_FORBIDDEN_ID_CHARS: Final[frozenset[str]] = frozenset("/\\\0")

_RPC_ENDPOINT_ROOT: Final[str] = "loggerctl-rpc"
_RPC_PROTOCOL: Final[str] = "ipc"


class SyncObjectKind(StrEnum):
    """名前付き同期オブジェクトの種別。"""

    GUARD = "guard"
    READINESS = "readiness"
    SHUTDOWN = "shutdown"


SYNC_OBJECT_ROOTS: Final[dict[SyncObjectKind, str]] = {
    SyncObjectKind.GUARD: "loggerctl-mutex",
    SyncObjectKind.READINESS: "loggerctl-started",
    SyncObjectKind.SHUTDOWN: "loggerctl-stopped",
}
"""種別ごとの固定ルート名。互いに異なるため、同一 ID でも名前は衝突しない。"""


class ServiceEndpoint(LoggerctlBaseModel):
    """制御チャネルの接続先。

    Attributes:
        protocol: トランスポート種別（常に "ipc"）。
        address: ドメインソケットのファイルパス。
    """

    protocol: Literal["ipc"] = _RPC_PROTOCOL
    address: Path

    @property
    def url(self) -> str:
        """ZeroMQ の接続 URL。"""
        return f"{self.protocol}://{self.address}"


def validate_instance_id(instance_id: str) -> str:
    """インスタンス ID を検証し、そのまま返す。

    Raises:
        ConfigurationError: 長すぎる場合、またはパス区切り文字・NUL を含む場合。
    """
    if len(instance_id) > MAX_INSTANCE_ID_LENGTH:
        raise ConfigurationError(
            f"The instance id '{instance_id}' is too long. "
            f"The max length is {MAX_INSTANCE_ID_LENGTH} characters."
        )
    if set(instance_id) & _FORBIDDEN_ID_CHARS:
        raise ConfigurationError(
            f"The instance id '{instance_id}' contains a path separator."
        )
    return instance_id


def canonical_name(kind: SyncObjectKind, instance_id: str) -> str:
    """同期オブジェクトの正規名を返す（ルート名 + インスタンス ID）。"""
    return SYNC_OBJECT_ROOTS[kind] + instance_id


def endpoint(instance_id: str, runtime_dir: Path) -> ServiceEndpoint:
    """インスタンス ID から制御チャネルの接続先を導出する。"""
    return ServiceEndpoint(
        address=runtime_dir / f"{_RPC_ENDPOINT_ROOT}{instance_id}.sock"
    )
