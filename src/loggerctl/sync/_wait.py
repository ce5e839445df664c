"""wait_any — シグナルとプロセス生存の複数オブジェクト待機。

待機対象はすべて単調である（セットされたシグナルはセットのまま、終了した
プロセスは終了のまま）。どれかが発火した時点で全体を再走査し、最小の
インデックスを返すことで、「シグナル確認 → プロセス確認」の間にプロセスが
シグナルを出して終了した場合もシグナル側として報告する。
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from loggerctl.models.config import DEFAULT_POLL_INTERVAL_SECONDS


@runtime_checkable
class Waitable(Protocol):
    """wait_any で待機できるオブジェクト。"""

    @property
    def name(self) -> str: ...

    def fired(self) -> bool:
        """発火済みなら True。一度 True になれば以後 True のまま。"""
        ...


def _scan(handles: Sequence[Waitable]) -> int | None:
    for index, handle in enumerate(handles):
        if handle.fired():
            return index
    return None


async def wait_any(
    handles: Sequence[Waitable],
    timeout: float | None = None,
    poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
) -> int | None:
    """いずれかのハンドルが発火するまで待機する。

    Args:
        handles: 待機対象。先頭ほど優先される。
        timeout: 最大待ち時間（秒）。None は無期限。
        poll_interval: 走査間隔（秒）。

    Returns:
        発火したハンドルのうち最小のインデックス。タイムアウト時は None。

    Raises:
        ValueError: handles が空の場合。
    """
    if not handles:
        raise ValueError("wait_any requires at least one handle")

    loop = asyncio.get_running_loop()
    deadline = None if timeout is None else loop.time() + timeout
    while True:
        if _scan(handles) is not None:
            return _scan(handles)
        if deadline is not None and loop.time() >= deadline:
            return None
        await asyncio.sleep(poll_interval)
