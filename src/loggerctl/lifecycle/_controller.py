"""LifecycleController — start / spawn / stop / status の各アクション。

各アクションは 1 回の起動につき 1 度だけ実行され、失敗時は LifecycleError の
サブクラスを送出する。取得した資源は with / try-finally で必ず解放する。
"""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import Final, TextIO

from loggerctl.control import send_stop
from loggerctl.engine import LifecycleCallback, LoggerEngine, TraceLogger
from loggerctl.errors import EngineError, LaunchError, LifecycleError, SyncError
from loggerctl.lifecycle._interrupt import (
    InterruptTarget,
    install_interrupt_handlers,
    publish_interrupt_target,
    uninstall_interrupt_handlers,
)
from loggerctl.lifecycle._launcher import launch_background, launch_foreground
from loggerctl.lifecycle._output import open_output_sink
from loggerctl.models.config import LoggerctlConfig
from loggerctl.models.identity import INSTANCE_ID_ENV_VAR, SyncObjectKind, endpoint
from loggerctl.models.request import LifecycleAction, LifecycleRequest
from loggerctl.sync import acquire_exclusive, open_signal, wait_any

logger = logging.getLogger(__name__)

_MODULE_NAME: Final[str] = "loggerctl"


def create_engine(config: LoggerctlConfig) -> LoggerEngine:
    """設定に従って既定のロガーエンジンを生成する。"""
    return TraceLogger(
        config.effective_runtime_dir(), poll_interval=config.poll_interval
    )


def build_start_command(request: LifecycleRequest) -> list[str]:
    """spawn 用に、同じスイッチを引き継いだ start 起動コマンドを組み立てる。"""
    return [
        sys.executable,
        "-m",
        _MODULE_NAME,
        *request.switches,
        LifecycleAction.START.value,
    ]


async def start(request: LifecycleRequest) -> None:
    """インスタンスを起動し、停止されるまでフォアグラウンドで実行する。

    ラップするコマンドが指定されていれば、その終了と同時に停止する。

    Raises:
        ContentionError: 同じインスタンス ID が既に実行中の場合。
        SyncError: 同期オブジェクトを操作できない場合。
        OutputSinkError: 出力先を開けない場合。
        EngineError: エンジンまたは割り込みハンドラを起動できない場合。
        LaunchError: ラップしたコマンドを起動できない、または失敗終了した場合。
    """
    config = request.config
    runtime_dir = config.effective_runtime_dir()

    with acquire_exclusive(
        request.instance_id,
        runtime_dir,
        timeout=config.guard_timeout,
        poll_interval=config.poll_interval,
    ):
        readiness = open_signal(
            SyncObjectKind.READINESS, request.instance_id, runtime_dir
        )
        shutdown = open_signal(
            SyncObjectKind.SHUTDOWN, request.instance_id, runtime_dir
        )
        readiness.reset()
        shutdown.reset()

        try:
            with open_output_sink(request.output_file, request.append) as sink:
                await _run_engine(request, sink.stream, readiness.set, shutdown.set)
        finally:
            try:
                readiness.reset()
            except SyncError as e:
                logger.warning("Failed to clear readiness signal: %s", e)


async def _run_engine(
    request: LifecycleRequest,
    destination: TextIO,
    on_started: LifecycleCallback,
    on_stopped: LifecycleCallback,
) -> None:
    config = request.config
    engine = create_engine(config)
    engine.set_destination(destination)
    engine.set_instance_id(request.instance_id)
    engine.set_started_callback(on_started)
    engine.set_stopped_callback(on_stopped)

    publish_interrupt_target(
        InterruptTarget(
            instance_id=request.instance_id,
            service=endpoint(request.instance_id, config.effective_runtime_dir()),
            rpc_timeout=config.rpc_timeout,
        )
    )
    loop = asyncio.get_running_loop()
    install_interrupt_handlers(loop)
    try:
        if not engine.start():
            raise EngineError("Failed to start the logger.")
        logger.info("Logging service instance '%s' started.", request.instance_id)

        failure: LifecycleError | None = None
        if request.wrapped_command is not None:
            failure = await _run_wrapped_command(
                request.wrapped_command, request.instance_id
            )
            # ラップしたコマンドの成否にかかわらず停止する
            engine.stop()

        if not await asyncio.to_thread(engine.run_to_completion):
            failure = failure or EngineError(
                "Failed running the logger to completion."
            )
        if failure is not None:
            raise failure
        logger.info("Logging service instance '%s' stopped.", request.instance_id)
    finally:
        uninstall_interrupt_handlers(loop)


async def _run_wrapped_command(
    command: tuple[str, ...], instance_id: str
) -> LifecycleError | None:
    try:
        returncode = await launch_foreground(
            command,
            env_overrides={INSTANCE_ID_ENV_VAR: instance_id},
        )
    except LaunchError as e:
        logger.error("%s", e)
        return e
    if returncode != 0:
        return LaunchError(f"'{command[0]}' exited with code {returncode}.")
    return None


async def spawn(request: LifecycleRequest) -> None:
    """インスタンスをバックグラウンドで起動し、起動完了まで待つ。

    Raises:
        LaunchError: 起動できない、または起動完了前に終了した場合。
        SyncError: 同期オブジェクトを開けない場合。
    """
    config = request.config
    runtime_dir = config.effective_runtime_dir()

    process = launch_background(build_start_command(request))
    logger.info("Waiting for the logger to start (pid %d).", process.pid)

    readiness = open_signal(
        SyncObjectKind.READINESS, request.instance_id, runtime_dir
    )
    fired = await wait_any(
        [readiness, process], timeout=None, poll_interval=config.poll_interval
    )
    if fired != 0:
        raise LaunchError(
            f"The logger exited before it was ready (exit code {process.returncode})."
        )
    logger.info("Logger started.")


async def stop(request: LifecycleRequest) -> None:
    """実行中のインスタンスに停止を要求し、停止完了まで待つ。

    停止完了の通知を取りこぼさないよう、要求前にシャットダウンシグナルを開く。

    Raises:
        SyncError: シャットダウンシグナルを開けない場合。
        RpcError: 停止要求が失敗した場合。
    """
    config = request.config
    runtime_dir = config.effective_runtime_dir()

    shutdown = open_signal(SyncObjectKind.SHUTDOWN, request.instance_id, runtime_dir)
    send_stop(endpoint(request.instance_id, runtime_dir), timeout=config.rpc_timeout)

    logger.info("Waiting for the logger to shut down.")
    fired = await wait_any(
        [shutdown], timeout=None, poll_interval=config.poll_interval
    )
    if fired != 0:
        raise SyncError("Failed waiting for the logger to shut down.")
    logger.info("Logger stopped.")


async def status(request: LifecycleRequest) -> None:
    """未実装。常に失敗する。"""
    raise LifecycleError("The status action is not implemented.")
