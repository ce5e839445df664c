"""SingletonGuard — インスタンス ID 単位のプロセス間排他。

ランタイムディレクトリのロックファイルに fcntl.flock で排他ロックを取る。
ロック保持中はファイルに保持者の PID を書き込み、正常解放時に消去する。
取得時に PID が残っていれば、前の保持者は解放せずに終了した（孤児ガード）と
判断して警告を出し、そのまま所有権を得る。
"""

from __future__ import annotations

import fcntl
import logging
import os
import time
from pathlib import Path
from types import TracebackType
from typing import Final

from loggerctl.errors import ContentionError, SyncError
from loggerctl.models.config import (
    DEFAULT_GUARD_TIMEOUT_SECONDS,
    DEFAULT_POLL_INTERVAL_SECONDS,
)
from loggerctl.models.identity import SyncObjectKind, canonical_name

logger = logging.getLogger(__name__)

_LOCK_SUFFIX: Final[str] = ".lock"
_PID_READ_SIZE: Final[int] = 32


class GuardToken:
    """取得済みガードの所有権。

    with ブロックの終了、release() 呼び出し、またはプロセス終了で解放される。
    """

    def __init__(self, fd: int, path: Path) -> None:
        self._fd: int | None = fd
        self._path = path

    @property
    def path(self) -> Path:
        """ロックファイルのパス。"""
        return self._path

    @property
    def held(self) -> bool:
        """まだ所有権を保持しているか。"""
        return self._fd is not None

    def release(self) -> None:
        """所有権を解放する。複数回呼んでも安全。"""
        fd = self._fd
        if fd is None:
            return
        self._fd = None
        try:
            # PID を消してから解放する。残っていれば次の取得者は孤児と判断する。
            os.ftruncate(fd, 0)
            fcntl.flock(fd, fcntl.LOCK_UN)
        finally:
            os.close(fd)
        logger.debug("Service guard released: %s", self._path)

    def __enter__(self) -> GuardToken:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()


def guard_path(instance_id: str, runtime_dir: Path) -> Path:
    """ガードのロックファイルパスを返す。"""
    return runtime_dir / (
        canonical_name(SyncObjectKind.GUARD, instance_id) + _LOCK_SUFFIX
    )


def acquire_exclusive(
    instance_id: str,
    runtime_dir: Path,
    timeout: float = DEFAULT_GUARD_TIMEOUT_SECONDS,
    poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
) -> GuardToken:
    """インスタンス ID のガードを timeout 秒以内に排他取得する。

    Args:
        instance_id: 検証済みのインスタンス ID。
        runtime_dir: ロックファイルを置くディレクトリ。無ければ作成する。
        timeout: 最大待ち時間（秒）。
        poll_interval: 再試行間隔（秒）。

    Returns:
        取得したガードの GuardToken。

    Raises:
        ContentionError: 他の生存中のプロセスが保持し続けた場合。
        SyncError: ロックファイルの作成・ロック操作に失敗した場合。
    """
    path = guard_path(instance_id, runtime_dir)
    try:
        runtime_dir.mkdir(mode=0o700, parents=True, exist_ok=True)
        fd = os.open(path, os.O_RDWR | os.O_CREAT, 0o600)
    except OSError as e:
        raise SyncError(f"Failed to create service guard '{path}': {e}") from e

    deadline = time.monotonic() + timeout
    while True:
        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
            break
        except BlockingIOError:
            if time.monotonic() >= deadline:
                os.close(fd)
                raise ContentionError(
                    "A synonymous instance of the logger is already running."
                ) from None
            time.sleep(poll_interval)
        except OSError as e:
            os.close(fd)
            raise SyncError(f"Failed to acquire service guard '{path}': {e}") from e

    try:
        previous_pid = _read_holder_pid(fd)
        _write_holder_pid(fd, os.getpid())
    except OSError as e:
        fcntl.flock(fd, fcntl.LOCK_UN)
        os.close(fd)
        raise SyncError(f"Failed to record service guard owner: {e}") from e

    if previous_pid is not None:
        logger.warning(
            "Orphaned service guard found (previous holder pid %d).", previous_pid
        )
    else:
        logger.debug("Service guard acquired: %s", path)
    return GuardToken(fd, path)


def _read_holder_pid(fd: int) -> int | None:
    os.lseek(fd, 0, os.SEEK_SET)
    content = os.read(fd, _PID_READ_SIZE).strip()
    if not content:
        return None
    try:
        return int(content)
    except ValueError:
        return None


def _write_holder_pid(fd: int, pid: int) -> None:
    os.ftruncate(fd, 0)
    os.lseek(fd, 0, os.SEEK_SET)
    os.write(fd, str(pid).encode("ascii"))
