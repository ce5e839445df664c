"""loggerctl CLI パッケージ。

公開 API:
    app: Typer アプリケーションインスタンス。
    run: コマンドラインを分離して実行し、終了コードを返す。
    main: CLI エントリポイント。pyproject.toml から参照される。
"""

from loggerctl.cli._app import app, main, run
from loggerctl.cli._splitter import CommandLineSplit, split_command_line

__all__ = ["CommandLineSplit", "app", "main", "run", "split_command_line"]
