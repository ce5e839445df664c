"""CliApp — Typer アプリケーション定義。

コマンドラインは ``loggerctl [options] ACTION [-- wrapped-command...]`` の形。
ラップするコマンドは Typer の解析前に split_command_line で取り除かれ、
Context.obj 経由でコマンドに渡される。
"""

from __future__ import annotations

import asyncio
import importlib.metadata
import logging
import sys
import tomllib
from collections.abc import Sequence
from pathlib import Path
from typing import Annotated, Final

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from loggerctl.cli._splitter import split_command_line
from loggerctl.config import resolve_config
from loggerctl.errors import ConfigurationError
from loggerctl.lifecycle import run_action
from loggerctl.models.config import LogLevel
from loggerctl.models.exit_code import ExitCode
from loggerctl.models.identity import validate_instance_id
from loggerctl.models.request import LifecycleAction, LifecycleRequest

WRAPPED_COMMAND_KEY: Final[str] = "wrapped_command"
"""Context.obj でラップするコマンドを渡すキー。"""

_PROG_NAME: Final[str] = "loggerctl"
_SINK_ACTIONS: Final[frozenset[LifecycleAction]] = frozenset(
    {LifecycleAction.START, LifecycleAction.SPAWN}
)

app = typer.Typer(
    name=_PROG_NAME,
    help=(
        "Control the lifecycle of a singleton logging service.\n\n"
        "Actions:\n\n"
        "  start   run the logger in the foreground until stopped\n\n"
        "  spawn   start the logger in the background and wait until ready\n\n"
        "  stop    stop a running logger and wait until it has shut down\n\n"
        "  status  not implemented\n\n"
        "Options must use the --name=value form. A command given after the "
        "action (optionally after --) is run by start while the logger runs."
    ),
    add_completion=False,
)


def _version_callback(value: bool) -> None:
    """--version 指定時にバージョン番号を出力して終了する。"""
    if value:
        print(importlib.metadata.version("loggerctl"))
        raise typer.Exit()


def _fail(ctx: typer.Context, message: str) -> typer.Exit:
    """エラーと使い方を stderr に出力し、送出すべき Exit を返す。"""
    print(f"Error: {message}", file=sys.stderr)
    print(ctx.get_usage(), file=sys.stderr)
    return typer.Exit(code=ExitCode.FAILURE)


def _configure_logging(level: LogLevel) -> None:
    """stderr の rich ハンドラでルートロガーを構成する。"""
    logging.basicConfig(
        level=level.value.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.command()
def loggerctl(
    ctx: typer.Context,
    action: Annotated[
        str | None,
        typer.Argument(
            help="One of start, spawn, stop, status.",
            show_default=False,
        ),
    ] = None,
    instance_id: Annotated[
        str,
        typer.Option(
            "--instance-id",
            help="Identifier of the logger instance (at most 16 characters).",
        ),
    ] = "",
    output_file: Annotated[
        str | None,
        typer.Option(
            "--output-file",
            help="Path of the log output, or stdout / stderr (start, spawn).",
        ),
    ] = None,
    append: Annotated[
        bool,
        typer.Option("--append", help="Append to the output file (start, spawn)."),
    ] = False,
    runtime_dir: Annotated[
        Path | None,
        typer.Option(
            "--runtime-dir",
            help="Directory for the instance's lock, signals and socket.",
        ),
    ] = None,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            help="Show version and exit.",
            callback=_version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Control a singleton logging service instance."""
    # 1. アクションとインスタンス ID の検証
    if action is None:
        raise _fail(ctx, "Exactly one action is required.")
    try:
        lifecycle_action = LifecycleAction(action)
    except ValueError:
        raise _fail(ctx, f"Unrecognized action: {action}.") from None
    try:
        validate_instance_id(instance_id)
    except ConfigurationError as e:
        raise _fail(ctx, str(e)) from None

    # 2. config 解決
    if runtime_dir is not None:
        runtime_dir = runtime_dir.resolve()
    try:
        config = resolve_config(cli_overrides={"runtime_dir": runtime_dir})
    except (ValidationError, tomllib.TOMLDecodeError, TypeError) as e:
        print(
            f"Error: Invalid configuration: {e}\n"
            "Check .loggerctl/config.toml for syntax errors or invalid values.",
            file=sys.stderr,
        )
        raise typer.Exit(code=ExitCode.FAILURE) from None
    except PermissionError as e:
        print(
            f"Error: Cannot read configuration file: {e}\n"
            "Check file permissions for .loggerctl/config.toml.",
            file=sys.stderr,
        )
        raise typer.Exit(code=ExitCode.FAILURE) from None

    _configure_logging(config.log_level)

    # 3. 他アクションでは無視される指定への警告
    obj = ctx.ensure_object(dict)
    wrapped_command: tuple[str, ...] | None = obj.get(WRAPPED_COMMAND_KEY)
    if wrapped_command is not None and lifecycle_action != LifecycleAction.START:
        print(
            f"Warning: The wrapped command is ignored by '{lifecycle_action}'.",
            file=sys.stderr,
        )
        wrapped_command = None
    ignores_sink = lifecycle_action not in _SINK_ACTIONS
    if ignores_sink and (output_file is not None or append):
        print(
            "Warning: --output-file and --append are ignored by "
            f"'{lifecycle_action}'.",
            file=sys.stderr,
        )

    # 4. アクション実行
    request = LifecycleRequest(
        action=lifecycle_action,
        instance_id=instance_id,
        output_file=output_file,
        append=append,
        wrapped_command=wrapped_command,
        switches=_build_switches(
            instance_id=instance_id,
            output_file=output_file,
            append=append,
            runtime_dir=runtime_dir,
        ),
        config=config,
    )
    exit_code = asyncio.run(run_action(request))
    raise typer.Exit(code=exit_code)


def _build_switches(
    *,
    instance_id: str,
    output_file: str | None,
    append: bool,
    runtime_dir: Path | None,
) -> tuple[str, ...]:
    """解析済みのオプションから、spawn で引き継ぐスイッチ列を再構成する。

    未指定のオプションは含めない。
    """
    switches: list[str] = []
    if instance_id:
        switches.append(f"--instance-id={instance_id}")
    if output_file is not None:
        switches.append(f"--output-file={output_file}")
    if append:
        switches.append("--append")
    if runtime_dir is not None:
        switches.append(f"--runtime-dir={runtime_dir}")
    return tuple(switches)


def _prog_name(argv0: str) -> str:
    name = Path(argv0).name
    if not name or name == "__main__.py":
        return _PROG_NAME
    return name


def run(argv: Sequence[str]) -> int:
    """コマンドラインを分離して Typer アプリを実行し、終了コードを返す。

    エラー表示は Typer に任せ、使い方の誤り（未知のオプションなど、
    Typer の終了コード 2）も終了コード 1 として返す。
    """
    try:
        split = split_command_line(argv)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return ExitCode.FAILURE

    try:
        app(
            args=list(split.controller_args[1:]),
            prog_name=_prog_name(split.controller_args[0]),
            obj={WRAPPED_COMMAND_KEY: split.wrapped_command},
        )
    except SystemExit as e:
        return ExitCode.FAILURE if e.code else ExitCode.SUCCESS
    return ExitCode.SUCCESS


def main() -> None:
    """CLI エントリポイント。pyproject.toml の [project.scripts] から呼び出される。"""
    sys.exit(run(sys.argv))

