"""CommandLineSplitter — コントローラ引数とラップするコマンドの分離。

オプション解析より前に分離するため、オプションは ``--name=value`` 形式で
指定する必要がある（``--name value`` の value はアクションとして扱われる）。
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Final

from loggerctl.errors import ConfigurationError
from loggerctl.models._base import LoggerctlBaseModel

_SWITCH_PREFIX: Final[str] = "-"
_END_OF_SWITCHES: Final[str] = "--"


class CommandLineSplit(LoggerctlBaseModel):
    """分離結果。

    Attributes:
        controller_args: プログラム名・スイッチ・アクション。
        wrapped_command: ラップするコマンドと引数。無ければ None。
    """

    controller_args: tuple[str, ...]
    wrapped_command: tuple[str, ...] | None = None


def split_command_line(argv: Sequence[str]) -> CommandLineSplit:
    """コマンドラインを分離する。

    先頭（プログラム名）は常に controller_args に入る。以降のトークンを順に
    controller_args へ追加し、``-`` で始まらない最初のトークン（アクション）を
    追加した直後で走査を止める。次のトークンがちょうど ``--`` なら読み捨て、
    残りをすべて wrapped_command とする。

    空文字列のトークンは ``-`` で始まらないためアクションとして扱う。

    Args:
        argv: プログラム名を含むコマンドライン。

    Returns:
        分離結果。

    Raises:
        ConfigurationError: argv が空の場合。
    """
    if not argv:
        raise ConfigurationError("The command line is empty.")

    controller_args = [argv[0]]
    index = 1
    while index < len(argv):
        token = argv[index]
        controller_args.append(token)
        index += 1
        if not token.startswith(_SWITCH_PREFIX):
            break

    if index < len(argv) and argv[index] == _END_OF_SWITCHES:
        index += 1

    remaining = tuple(argv[index:])
    return CommandLineSplit(
        controller_args=tuple(controller_args),
        wrapped_command=remaining or None,
    )
