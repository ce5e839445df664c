"""ExitCode — 終了コードの定義。"""

from enum import IntEnum


class ExitCode(IntEnum):
    """プロセス終了コード。

    アクションの成否のみを区別する。使用法エラーも FAILURE に含める。
    """

    SUCCESS = 0
    FAILURE = 1
