"""ライフサイクル制御パッケージ。"""

from loggerctl.lifecycle._actions import (
    ACTION_TABLE,
    find_action_handler,
    run_action,
)
from loggerctl.lifecycle._controller import (
    build_start_command,
    create_engine,
    spawn,
    start,
    status,
    stop,
)
from loggerctl.lifecycle._interrupt import (
    InterruptTarget,
    handle_interrupt,
    install_interrupt_handlers,
    publish_interrupt_target,
    uninstall_interrupt_handlers,
)
from loggerctl.lifecycle._launcher import (
    ProcessHandle,
    launch_background,
    launch_foreground,
)
from loggerctl.lifecycle._output import OutputSink, SinkKind, open_output_sink

__all__ = [
    "ACTION_TABLE",
    "InterruptTarget",
    "OutputSink",
    "ProcessHandle",
    "SinkKind",
    "build_start_command",
    "create_engine",
    "find_action_handler",
    "handle_interrupt",
    "install_interrupt_handlers",
    "launch_background",
    "launch_foreground",
    "open_output_sink",
    "publish_interrupt_target",
    "run_action",
    "spawn",
    "start",
    "status",
    "stop",
    "uninstall_interrupt_handlers",
]
