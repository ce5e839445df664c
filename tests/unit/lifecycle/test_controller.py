"""LifecycleController のテスト。

エンジンは FakeEngine に差し替え、ガード・シグナル・子プロセスは実物を使う。
"""

from __future__ import annotations

import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from loggerctl.errors import (
    ContentionError,
    EngineError,
    LaunchError,
    LifecycleError,
    OutputSinkError,
    RpcError,
)
from loggerctl.lifecycle import build_start_command, spawn, start, status, stop
from loggerctl.models.identity import SyncObjectKind, endpoint
from loggerctl.models.request import LifecycleAction
from loggerctl.sync import NamedSignal, acquire_exclusive, open_signal
from tests.unit.lifecycle.conftest import (
    INSTANCE_ID,
    PATCH_CREATE_ENGINE,
    PATCH_LAUNCH_BACKGROUND,
    PATCH_SEND_STOP,
    PATCH_WAIT_ANY,
    FakeEngine,
    FakeProcess,
    make_request,
)


def _signal(kind: SyncObjectKind, runtime_dir: Path) -> NamedSignal:
    return open_signal(kind, INSTANCE_ID, runtime_dir)


def _assert_guard_released(runtime_dir: Path) -> None:
    with acquire_exclusive(INSTANCE_ID, runtime_dir, timeout=0.1) as token:
        assert token.held


def _exit_script(code: int) -> tuple[str, ...]:
    """LOGGERCTL_INSTANCE_ID が渡されていれば code で、なければ 99 で終了する。"""
    script = (
        "import os, sys; "
        f"sys.exit({code} if os.environ.get('LOGGERCTL_INSTANCE_ID') == "
        f"{INSTANCE_ID!r} else 99)"
    )
    return (sys.executable, "-c", script)


# =============================================================================
# start
# =============================================================================


class TestStartWithoutWrappedCommand:
    async def test_runs_until_stopped(self, runtime_dir: Path) -> None:
        engine = FakeEngine(stopped_on_start=True)
        seen: dict[str, bool] = {}

        def observe() -> None:
            seen["readiness"] = _signal(SyncObjectKind.READINESS, runtime_dir).is_set()
            seen["shutdown"] = _signal(SyncObjectKind.SHUTDOWN, runtime_dir).is_set()

        engine.on_run = observe
        with patch(PATCH_CREATE_ENGINE, return_value=engine):
            await start(make_request(LifecycleAction.START, runtime_dir))

        assert engine.instance_id == INSTANCE_ID
        assert engine.destination is sys.stdout
        # 実行中は readiness がセットされている
        assert seen == {"readiness": True, "shutdown": False}
        # 終了後は readiness がクリアされ shutdown がセットされる
        assert not _signal(SyncObjectKind.READINESS, runtime_dir).is_set()
        assert _signal(SyncObjectKind.SHUTDOWN, runtime_dir).is_set()
        _assert_guard_released(runtime_dir)

    async def test_stale_shutdown_reset_at_start(self, runtime_dir: Path) -> None:
        _signal(SyncObjectKind.SHUTDOWN, runtime_dir).set()
        engine = FakeEngine(stopped_on_start=True)
        seen: list[bool] = []
        engine.on_run = lambda: seen.append(
            _signal(SyncObjectKind.SHUTDOWN, runtime_dir).is_set()
        )
        with patch(PATCH_CREATE_ENGINE, return_value=engine):
            await start(make_request(LifecycleAction.START, runtime_dir))
        assert seen == [False]

    async def test_output_file_passed_to_engine(
        self, runtime_dir: Path, tmp_path: Path
    ) -> None:
        engine = FakeEngine(stopped_on_start=True)
        path = tmp_path / "out.log"
        with patch(PATCH_CREATE_ENGINE, return_value=engine):
            await start(
                make_request(LifecycleAction.START, runtime_dir, output_file=str(path))
            )
        assert engine.destination is not None
        assert engine.destination.name == str(path)
        # start の終了時に閉じられる
        assert engine.destination.closed


class TestStartWithWrappedCommand:
    async def test_success_stops_engine(self, runtime_dir: Path) -> None:
        engine = FakeEngine()
        with patch(PATCH_CREATE_ENGINE, return_value=engine):
            await start(
                make_request(
                    LifecycleAction.START, runtime_dir, wrapped_command=_exit_script(0)
                )
            )
        assert engine.stop_calls == 1
        _assert_guard_released(runtime_dir)

    async def test_nonzero_exit_fails_after_stopping(self, runtime_dir: Path) -> None:
        engine = FakeEngine()
        with patch(PATCH_CREATE_ENGINE, return_value=engine):
            with pytest.raises(LaunchError, match="exited with code 4"):
                await start(
                    make_request(
                        LifecycleAction.START,
                        runtime_dir,
                        wrapped_command=_exit_script(4),
                    )
                )
        assert engine.stop_calls == 1
        assert _signal(SyncObjectKind.SHUTDOWN, runtime_dir).is_set()
        _assert_guard_released(runtime_dir)

    async def test_unlaunchable_command_fails_after_stopping(
        self, runtime_dir: Path
    ) -> None:
        engine = FakeEngine()
        with patch(PATCH_CREATE_ENGINE, return_value=engine):
            with pytest.raises(LaunchError):
                await start(
                    make_request(
                        LifecycleAction.START,
                        runtime_dir,
                        wrapped_command=("loggerctl-test-no-such-command",),
                    )
                )
        assert engine.stop_calls == 1
        _assert_guard_released(runtime_dir)


class TestStartFailures:
    async def test_contention_leaves_running_instance_untouched(
        self, runtime_dir: Path
    ) -> None:
        readiness = _signal(SyncObjectKind.READINESS, runtime_dir)
        with acquire_exclusive(INSTANCE_ID, runtime_dir, timeout=0.1):
            readiness.set()
            with patch(PATCH_CREATE_ENGINE) as mock_create:
                with pytest.raises(ContentionError):
                    await start(make_request(LifecycleAction.START, runtime_dir))
            mock_create.assert_not_called()
            # 実行中インスタンスの readiness は変更されない
            assert readiness.is_set()

    async def test_output_sink_failure_releases_guard(
        self, runtime_dir: Path, tmp_path: Path
    ) -> None:
        with patch(PATCH_CREATE_ENGINE) as mock_create:
            with pytest.raises(OutputSinkError):
                await start(
                    make_request(
                        LifecycleAction.START,
                        runtime_dir,
                        output_file=str(tmp_path / "missing" / "out.log"),
                    )
                )
        mock_create.assert_not_called()
        _assert_guard_released(runtime_dir)

    async def test_engine_start_failure(self, runtime_dir: Path) -> None:
        engine = FakeEngine(start_result=False)
        with patch(PATCH_CREATE_ENGINE, return_value=engine):
            with pytest.raises(EngineError, match="Failed to start"):
                await start(make_request(LifecycleAction.START, runtime_dir))
        assert not _signal(SyncObjectKind.READINESS, runtime_dir).is_set()
        _assert_guard_released(runtime_dir)

    async def test_run_to_completion_failure(self, runtime_dir: Path) -> None:
        engine = FakeEngine(complete_result=False, stopped_on_start=True)
        with patch(PATCH_CREATE_ENGINE, return_value=engine):
            with pytest.raises(EngineError, match="to completion"):
                await start(make_request(LifecycleAction.START, runtime_dir))
        _assert_guard_released(runtime_dir)


# =============================================================================
# spawn
# =============================================================================


class TestSpawn:
    def test_build_start_command_propagates_switches(self, runtime_dir: Path) -> None:
        request = make_request(
            LifecycleAction.SPAWN,
            runtime_dir,
            switches=("--instance-id=t1", "--append"),
        )
        assert build_start_command(request) == [
            sys.executable,
            "-m",
            "loggerctl",
            "--instance-id=t1",
            "--append",
            "start",
        ]

    async def test_ready_before_exit_succeeds(self, runtime_dir: Path) -> None:
        def launch(command: list[str]) -> FakeProcess:
            # 起動したインスタンスが readiness をセットしたものとして扱う
            _signal(SyncObjectKind.READINESS, runtime_dir).set()
            return FakeProcess()

        with patch(PATCH_LAUNCH_BACKGROUND, side_effect=launch) as mock_launch:
            await spawn(make_request(LifecycleAction.SPAWN, runtime_dir))
        command = mock_launch.call_args.args[0]
        assert command[-1] == "start"

    async def test_exit_before_ready_fails(self, runtime_dir: Path) -> None:
        with patch(PATCH_LAUNCH_BACKGROUND, return_value=FakeProcess(exited=True)):
            with pytest.raises(LaunchError, match="before it was ready"):
                await spawn(make_request(LifecycleAction.SPAWN, runtime_dir))

    async def test_stale_readiness_from_exited_process_ignored(
        self, runtime_dir: Path, dead_pid: int
    ) -> None:
        readiness = _signal(SyncObjectKind.READINESS, runtime_dir)
        readiness.path.write_text(str(dead_pid), encoding="ascii")
        with patch(PATCH_LAUNCH_BACKGROUND, return_value=FakeProcess(exited=True)):
            with pytest.raises(LaunchError, match="before it was ready"):
                await spawn(make_request(LifecycleAction.SPAWN, runtime_dir))

    async def test_launch_failure_propagates(self, runtime_dir: Path) -> None:
        with patch(PATCH_LAUNCH_BACKGROUND, side_effect=LaunchError("boom")):
            with pytest.raises(LaunchError, match="boom"):
                await spawn(make_request(LifecycleAction.SPAWN, runtime_dir))


# =============================================================================
# stop
# =============================================================================


class TestStop:
    async def test_no_running_instance_never_waits(self, runtime_dir: Path) -> None:
        """send_stop が失敗した場合はシャットダウン待機に入らない。"""
        with patch(PATCH_WAIT_ANY, new_callable=AsyncMock) as mock_wait:
            with pytest.raises(RpcError):
                await stop(make_request(LifecycleAction.STOP, runtime_dir))
        mock_wait.assert_not_awaited()

    async def test_waits_for_shutdown_signal(self, runtime_dir: Path) -> None:
        def acknowledge(*args: object, **kwargs: object) -> None:
            # 停止要求を受けたインスタンスが shutdown をセットしたものとして扱う
            _signal(SyncObjectKind.SHUTDOWN, runtime_dir).set()

        with patch(PATCH_SEND_STOP, side_effect=acknowledge) as mock_send_stop:
            await stop(make_request(LifecycleAction.STOP, runtime_dir))
        mock_send_stop.assert_called_once_with(
            endpoint(INSTANCE_ID, runtime_dir), timeout=5.0
        )

    async def test_shutdown_signal_opened_before_request(
        self, runtime_dir: Path
    ) -> None:
        order: list[str] = []
        with (
            patch(
                "loggerctl.lifecycle._controller.open_signal",
                side_effect=lambda *a: order.append("open") or MagicMock(),
            ),
            patch(PATCH_SEND_STOP, side_effect=lambda *a, **k: order.append("send")),
            patch(PATCH_WAIT_ANY, new_callable=AsyncMock, return_value=0),
        ):
            await stop(make_request(LifecycleAction.STOP, runtime_dir))
        assert order == ["open", "send"]


# =============================================================================
# status
# =============================================================================


class TestStatus:
    async def test_always_fails(self, runtime_dir: Path) -> None:
        with pytest.raises(LifecycleError, match="not implemented"):
            await status(make_request(LifecycleAction.STATUS, runtime_dir))
