"""アクション名からハンドラへのディスパッチ。"""

from __future__ import annotations

import bisect
import logging
from collections.abc import Awaitable, Callable
from typing import Final

from loggerctl.errors import LifecycleError
from loggerctl.lifecycle import _controller
from loggerctl.models.exit_code import ExitCode
from loggerctl.models.request import LifecycleAction, LifecycleRequest

logger = logging.getLogger(__name__)

ActionHandler = Callable[[LifecycleRequest], Awaitable[None]]
"""アクションハンドラ。失敗時は LifecycleError を送出する。"""

ACTION_TABLE: Final[tuple[tuple[str, ActionHandler], ...]] = (
    (LifecycleAction.SPAWN.value, _controller.spawn),
    (LifecycleAction.START.value, _controller.start),
    (LifecycleAction.STATUS.value, _controller.status),
    (LifecycleAction.STOP.value, _controller.stop),
)
"""アクション名の昇順に並べたディスパッチテーブル。"""

_ACTION_NAMES: Final[tuple[str, ...]] = tuple(name for name, _ in ACTION_TABLE)


def find_action_handler(name: str) -> ActionHandler | None:
    """アクション名に対応するハンドラを二分探索で返す。無ければ None。"""
    index = bisect.bisect_left(_ACTION_NAMES, name)
    if index < len(_ACTION_NAMES) and _ACTION_NAMES[index] == name:
        return ACTION_TABLE[index][1]
    return None


async def run_action(request: LifecycleRequest) -> ExitCode:
    """要求されたアクションを実行し、終了コードを返す。

    ハンドラが送出した LifecycleError はログに記録して FAILURE に変換する。
    """
    handler = find_action_handler(request.action.value)
    if handler is None:
        logger.error("Unrecognized action: %s.", request.action)
        return ExitCode.FAILURE

    try:
        await handler(request)
    except LifecycleError as e:
        logger.error("%s", e)
        return ExitCode.FAILURE
    return ExitCode.SUCCESS
