"""プロセス間同期プリミティブ。

名前はすべてインスタンス ID から決まるため、無関係なプロセス同士でも
事前の通信なしに同じオブジェクトを共有できる。
"""

from loggerctl.sync._guard import GuardToken, acquire_exclusive, guard_path
from loggerctl.sync._signal import NamedSignal, open_signal
from loggerctl.sync._wait import Waitable, wait_any

__all__ = [
    "GuardToken",
    "NamedSignal",
    "Waitable",
    "acquire_exclusive",
    "guard_path",
    "open_signal",
    "wait_any",
]
