"""ReadinessSignal / ShutdownSignal — レベルトリガのプロセス間通知。

シグナルはランタイムディレクトリのマーカーファイルで表す。ファイルが存在する間は
セット状態であり、セット後に待機を始めた待機者も必ず観測できる。
readiness だけはセットしたプロセスの終了とともにクリア状態とみなす。
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Final

from loggerctl.errors import SyncError
from loggerctl.models.identity import SyncObjectKind, canonical_name

logger = logging.getLogger(__name__)

_SIGNAL_SUFFIX: Final[str] = ".signal"

SIGNAL_KINDS: Final[frozenset[SyncObjectKind]] = frozenset(
    {SyncObjectKind.READINESS, SyncObjectKind.SHUTDOWN}
)


_SETTER_BOUND_KINDS: Final[frozenset[SyncObjectKind]] = frozenset(
    {SyncObjectKind.READINESS}
)
"""セットしたプロセスの生存中だけセット状態とみなすシグナル種別。"""


class NamedSignal:
    """手動リセット型の名前付きシグナル。

    set() は冪等で、reset() されるまでセット状態が続く。
    setter_bound=True のシグナルは、マーカーに記録された PID のプロセスが
    終了していればクリア状態とみなす。
    """

    def __init__(self, name: str, path: Path, setter_bound: bool = False) -> None:
        self._name = name
        self._path = path
        self._setter_bound = setter_bound

    @property
    def name(self) -> str:
        return self._name

    @property
    def path(self) -> Path:
        return self._path

    def set(self) -> None:
        """シグナルをセットする。

        一時ファイルに PID を書いてから置き換えるため、待機者が中途半端な
        状態を観測することはない。

        Raises:
            SyncError: マーカーファイルを作成できない場合。
        """
        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self._name}.", dir=self._path.parent
            )
            try:
                os.write(fd, str(os.getpid()).encode("ascii"))
            finally:
                os.close(fd)
            os.replace(tmp_name, self._path)
        except OSError as e:
            raise SyncError(f"Failed to set signal '{self._name}': {e}") from e
        logger.debug("Signal set: %s", self._name)

    def reset(self) -> None:
        """シグナルをクリアする。

        Raises:
            SyncError: マーカーファイルを削除できない場合。
        """
        try:
            self._path.unlink(missing_ok=True)
        except OSError as e:
            raise SyncError(f"Failed to reset signal '{self._name}': {e}") from e

    def is_set(self) -> bool:
        if not self._setter_bound:
            return self._path.exists()
        try:
            content = self._path.read_text(encoding="ascii")
        except FileNotFoundError:
            return False
        except OSError as e:
            raise SyncError(f"Failed to read signal '{self._name}': {e}") from e
        try:
            setter_pid = int(content)
        except ValueError:
            # PID を記録していないマーカーは生存判定できない
            return True
        if _is_alive(setter_pid):
            return True
        logger.debug(
            "Ignoring signal '%s' left by exited process %d.", self._name, setter_pid
        )
        return False

    def fired(self) -> bool:
        """wait_any 用。is_set() と同じ。"""
        return self.is_set()

    def __repr__(self) -> str:
        return f"NamedSignal(name={self._name!r})"


def open_signal(
    kind: SyncObjectKind, instance_id: str, runtime_dir: Path
) -> NamedSignal:
    """名前付きシグナルを開く（無ければランタイムディレクトリを作成する）。

    開くだけでは状態を変更しない。

    Raises:
        ValueError: kind がシグナル種別でない場合。
        SyncError: ランタイムディレクトリを作成・書き込みできない場合。
    """
    if kind not in SIGNAL_KINDS:
        raise ValueError(f"{kind} is not a signal kind")
    name = canonical_name(kind, instance_id)
    try:
        runtime_dir.mkdir(mode=0o700, parents=True, exist_ok=True)
    except OSError as e:
        raise SyncError(f"Unable to init signal '{name}': {e}") from e
    if not os.access(runtime_dir, os.W_OK | os.X_OK):
        raise SyncError(
            f"Unable to init signal '{name}': '{runtime_dir}' is not writable."
        )
    return NamedSignal(
        name,
        runtime_dir / (name + _SIGNAL_SUFFIX),
        setter_bound=kind in _SETTER_BOUND_KINDS,
    )


def _is_alive(pid: int) -> bool:
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        return True
    return True
