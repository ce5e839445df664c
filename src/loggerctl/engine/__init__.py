"""ロガーエンジン。

コントローラは LoggerEngine プロトコルの start / stop / run_to_completion
だけを通じてエンジンを駆動する。既定実装は TraceLogger。
"""

from loggerctl.engine._logger import EngineState, TraceLogger
from loggerctl.engine._protocol import LifecycleCallback, LoggerEngine

__all__ = [
    "EngineState",
    "LifecycleCallback",
    "LoggerEngine",
    "TraceLogger",
]
