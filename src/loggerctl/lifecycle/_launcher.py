"""ProcessLauncher — 子プロセスのフォアグラウンド / バックグラウンド起動。"""

from __future__ import annotations

import asyncio
import logging
import os
import shlex
import subprocess
from collections.abc import Mapping, Sequence

from loggerctl.errors import LaunchError

logger = logging.getLogger(__name__)


class ProcessHandle:
    """バックグラウンド起動したプロセス。wait_any の待機対象になる。"""

    def __init__(self, process: subprocess.Popen[bytes]) -> None:
        self._process = process

    @property
    def name(self) -> str:
        return f"process {self._process.pid}"

    @property
    def pid(self) -> int:
        return self._process.pid

    @property
    def returncode(self) -> int | None:
        return self._process.returncode

    def fired(self) -> bool:
        """プロセスが終了していれば True。"""
        return self._process.poll() is not None


async def launch_foreground(
    command: Sequence[str],
    env_overrides: Mapping[str, str] | None = None,
) -> int:
    """コマンドを起動し、終了まで待って終了コードを返す。

    Args:
        command: 実行するコマンドと引数。
        env_overrides: 現在の環境に上書きする環境変数。

    Returns:
        子プロセスの終了コード。

    Raises:
        LaunchError: 起動できない場合。
    """
    if not command:
        raise LaunchError("No command to launch.")

    env = {**os.environ, **(env_overrides or {})}
    logger.info("Launching '%s'.", command[0])
    logger.debug("Command line: %s", shlex.join(command))
    try:
        process = await asyncio.create_subprocess_exec(*command, env=env)
    except OSError as e:
        raise LaunchError(f"Failed to launch '{command[0]}': {e}") from e
    return await process.wait()


def launch_background(command: Sequence[str]) -> ProcessHandle:
    """コマンドを新しいセッションで起動し、待たずにハンドルを返す。

    Raises:
        LaunchError: 起動できない場合。
    """
    if not command:
        raise LaunchError("No command to launch.")

    logger.debug("Command line: %s", shlex.join(command))
    try:
        process = subprocess.Popen(
            list(command),
            stdin=subprocess.DEVNULL,
            start_new_session=True,
        )
    except OSError as e:
        raise LaunchError(f"Failed to launch process: {e}") from e
    return ProcessHandle(process)
