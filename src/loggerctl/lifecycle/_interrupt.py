"""割り込みハンドラ — SIGINT/SIGTERM で実行中インスタンスに停止を要求する。

ハンドラが読む停止先（InterruptTarget）はハンドラ登録前に一度だけ公開され、
以後変更されない。書き込みは登録前の 1 回のみのためロックは不要。

ハンドラの処理は send_stop の 1 回だけで、専用スレッドで実行する。
SIGHUP（端末切断・ログオフ）は処理せず、既定の終了処理に委ねる。
"""

from __future__ import annotations

import asyncio
import logging
import signal
import threading
from typing import Final

from loggerctl.control import send_stop
from loggerctl.errors import EngineError, RpcError
from loggerctl.models._base import LoggerctlBaseModel
from loggerctl.models.identity import ServiceEndpoint

logger = logging.getLogger(__name__)

INTERRUPT_SIGNALS: Final[tuple[signal.Signals, ...]] = (
    signal.SIGINT,
    signal.SIGTERM,
)
"""停止要求を送るシグナル。"""

DECLINED_SIGNALS: Final[tuple[signal.Signals, ...]] = (signal.SIGHUP,)
"""ハンドラが処理を辞退し、既定の動作に戻すシグナル。"""


class InterruptTarget(LoggerctlBaseModel):
    """割り込みハンドラが停止を要求する先。

    Attributes:
        instance_id: 停止対象のインスタンス ID。
        service: 停止対象の制御チャネル。
        rpc_timeout: 応答待ち時間（秒）。
    """

    instance_id: str
    service: ServiceEndpoint
    rpc_timeout: float


_published_target: InterruptTarget | None = None


def publish_interrupt_target(target: InterruptTarget) -> None:
    """停止先を公開する。ハンドラ登録前に呼ぶ。

    同じ値の再公開は許容する。

    Raises:
        RuntimeError: 異なる停止先がすでに公開されている場合。
    """
    global _published_target
    if _published_target is not None and _published_target != target:
        raise RuntimeError("A different interrupt target is already published")
    _published_target = target


def published_interrupt_target() -> InterruptTarget | None:
    return _published_target


def _stop_published_target(target: InterruptTarget) -> None:
    try:
        send_stop(target.service, timeout=target.rpc_timeout)
    except RpcError as e:
        logger.error("Interrupt handler could not stop the logger: %s", e)


def handle_interrupt(signum: int) -> bool:
    """割り込みシグナルを処理する。

    Args:
        signum: 受信したシグナル番号。

    Returns:
        処理した場合 True。辞退した場合 False（呼び出し側が既定の動作に戻す）。
    """
    if signum in DECLINED_SIGNALS:
        return False

    target = _published_target
    if target is None:
        logger.warning("Interrupt received before the logger was published.")
        return True

    threading.Thread(
        target=_stop_published_target,
        args=(target,),
        name="loggerctl-interrupt",
        daemon=True,
    ).start()
    return True


def _dispatch(loop: asyncio.AbstractEventLoop, signum: signal.Signals) -> None:
    if handle_interrupt(signum):
        return
    # 辞退したシグナルは既定の動作で再送する
    loop.remove_signal_handler(signum)
    signal.raise_signal(signum)


def install_interrupt_handlers(loop: asyncio.AbstractEventLoop) -> None:
    """割り込みハンドラをイベントループに登録する。

    Raises:
        EngineError: いずれかのシグナルを登録できない場合。登録済みの分は解除する。
    """
    installed: list[signal.Signals] = []
    try:
        for sig in (*INTERRUPT_SIGNALS, *DECLINED_SIGNALS):
            loop.add_signal_handler(sig, _dispatch, loop, sig)
            installed.append(sig)
    except (ValueError, RuntimeError, NotImplementedError) as e:
        for sig in installed:
            loop.remove_signal_handler(sig)
        raise EngineError(f"Failed to register shutdown handler: {e}") from e


def uninstall_interrupt_handlers(loop: asyncio.AbstractEventLoop) -> None:
    """割り込みハンドラを解除する。"""
    for sig in (*INTERRUPT_SIGNALS, *DECLINED_SIGNALS):
        loop.remove_signal_handler(sig)
