"""CLI テスト共通フィクスチャ・ヘルパー。"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from loggerctl.models.config import LoggerctlConfig
from loggerctl.models.request import LifecycleRequest

PATCH_RUN_ACTION = "loggerctl.cli._app.run_action"
PATCH_RESOLVE_CONFIG = "loggerctl.cli._app.resolve_config"
PATCH_CONFIGURE_LOGGING = "loggerctl.cli._app._configure_logging"


@pytest.fixture(autouse=True)
def _keep_root_logger() -> Iterator[None]:
    """テスト中にルートロガーのハンドラが差し替えられることを防止する。"""
    with patch(PATCH_CONFIGURE_LOGGING):
        yield


def setup_config_mock(mock_config: MagicMock, runtime_dir: Path) -> LoggerctlConfig:
    """resolve_config のモックに runtime_dir を使う設定を返させる。"""
    config = LoggerctlConfig(runtime_dir=runtime_dir)
    mock_config.return_value = config
    return config


def captured_request(mock_run_action: MagicMock) -> LifecycleRequest:
    """run_action に渡された LifecycleRequest を取り出す。"""
    mock_run_action.assert_awaited_once()
    request = mock_run_action.await_args.args[0]
    assert isinstance(request, LifecycleRequest)
    return request
