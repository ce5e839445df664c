"""OutputSink — --output-file の解決。"""

from __future__ import annotations

import sys
from enum import StrEnum
from types import TracebackType
from typing import Final, TextIO

from loggerctl.errors import OutputSinkError

_STDOUT: Final[str] = "stdout"
_STDERR: Final[str] = "stderr"


class SinkKind(StrEnum):
    """出力先の種別。"""

    STDOUT = "stdout"
    STDERR = "stderr"
    FILE = "file"


class OutputSink:
    """解決済みの出力先。

    must_close が True の場合のみ close() でストリームを閉じる。
    """

    def __init__(self, kind: SinkKind, stream: TextIO, must_close: bool) -> None:
        self.kind = kind
        self.stream = stream
        self.must_close = must_close

    def close(self) -> None:
        if self.must_close and not self.stream.closed:
            self.stream.close()

    def __enter__(self) -> OutputSink:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


def open_output_sink(path: str | None, append: bool = False) -> OutputSink:
    """出力先パスをストリームに解決する。

    None・空文字列・"stdout" は標準出力、"stderr" は標準エラー出力
    （いずれも大文字小文字を区別しない）。それ以外はファイルとして
    切り詰めモード、append=True なら追記モードで開く。

    Raises:
        OutputSinkError: ファイルを開けない場合。
    """
    if not path or path.lower() == _STDOUT:
        return OutputSink(SinkKind.STDOUT, sys.stdout, must_close=False)
    if path.lower() == _STDERR:
        return OutputSink(SinkKind.STDERR, sys.stderr, must_close=False)

    mode = "a" if append else "w"
    try:
        stream = open(path, mode, encoding="utf-8")
    except OSError as e:
        raise OutputSinkError(f"Unable to open '{path}': {e.strerror}") from e
    return OutputSink(SinkKind.FILE, stream, must_close=True)
