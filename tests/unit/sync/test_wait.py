"""wait_any のテスト。"""

from __future__ import annotations

import asyncio
from collections.abc import Iterator
from pathlib import Path

import pytest

from loggerctl.models.identity import SyncObjectKind
from loggerctl.sync import Waitable, open_signal, wait_any

_POLL = 0.01


class FakeHandle:
    """fired() の戻り値を順に返すテスト用ハンドル。最後の値を保持し続ける。"""

    def __init__(self, name: str, *states: bool) -> None:
        self._name = name
        self._states: Iterator[bool] = iter(states)
        self._last = False
        self.calls = 0

    @property
    def name(self) -> str:
        return self._name

    def fired(self) -> bool:
        self.calls += 1
        self._last = next(self._states, self._last)
        return self._last


class TestWaitAny:
    async def test_empty_handles_rejected(self) -> None:
        with pytest.raises(ValueError):
            await wait_any([])

    async def test_timeout_returns_none(self) -> None:
        handle = FakeHandle("never", False)
        assert await wait_any([handle], timeout=0.05, poll_interval=_POLL) is None

    async def test_returns_index_of_fired_handle(self) -> None:
        handles = [FakeHandle("a", False), FakeHandle("b", False, False, True)]
        assert await wait_any(handles, timeout=1.0, poll_interval=_POLL) == 1

    async def test_lowest_index_wins_when_both_fired(self) -> None:
        handles = [FakeHandle("a", True), FakeHandle("b", True)]
        assert await wait_any(handles, poll_interval=_POLL) == 0

    async def test_signal_before_exit_reported_as_signal(self) -> None:
        """走査の間にシグナルを出して終了したプロセスはシグナル側として報告される。

        1 回目の走査ではシグナル未検出・プロセス終了、再走査でシグナル検出。
        """
        readiness = FakeHandle("readiness", False, True)
        process = FakeHandle("process", True)
        assert await wait_any([readiness, process], poll_interval=_POLL) == 0

    def test_fake_handle_satisfies_protocol(self) -> None:
        assert isinstance(FakeHandle("a"), Waitable)


class TestWaitAnyWithSignals:
    """実シグナルでのレベルトリガ動作。"""

    async def test_waiter_after_set_observes_signal(self, tmp_path: Path) -> None:
        signal = open_signal(SyncObjectKind.SHUTDOWN, "a", tmp_path)
        signal.set()
        # set() の後に待機を始めても観測できる
        assert await wait_any([signal], timeout=0.5, poll_interval=_POLL) == 0

    async def test_set_during_wait_unblocks(self, tmp_path: Path) -> None:
        signal = open_signal(SyncObjectKind.READINESS, "a", tmp_path)
        loop = asyncio.get_running_loop()
        loop.call_later(0.05, signal.set)
        assert await wait_any([signal], timeout=2.0, poll_interval=_POLL) == 0
