"""loggerctl ドメインモデルパッケージ。"""

from loggerctl.models._base import LoggerctlBaseModel
from loggerctl.models.config import LoggerctlConfig, LogLevel
from loggerctl.models.control import ControlCommand, ControlReply, ControlRequest
from loggerctl.models.exit_code import ExitCode
from loggerctl.models.identity import (
    INSTANCE_ID_ENV_VAR,
    MAX_INSTANCE_ID_LENGTH,
    ServiceEndpoint,
    SyncObjectKind,
    canonical_name,
    endpoint,
    validate_instance_id,
)
from loggerctl.models.request import LifecycleAction, LifecycleRequest

__all__ = [
    "INSTANCE_ID_ENV_VAR",
    "MAX_INSTANCE_ID_LENGTH",
    "ControlCommand",
    "ControlReply",
    "ControlRequest",
    "ExitCode",
    "LifecycleAction",
    "LifecycleRequest",
    "LogLevel",
    "LoggerctlBaseModel",
    "LoggerctlConfig",
    "ServiceEndpoint",
    "SyncObjectKind",
    "canonical_name",
    "endpoint",
    "validate_instance_id",
]
