"""設定リゾルバー。

CLI > .loggerctl/config.toml > pyproject.toml [tool.loggerctl]
> ~/.config/loggerctl/config.toml > デフォルト値 の順に解決する。
"""

from __future__ import annotations

from pathlib import Path

from loggerctl.config._loader import load_pyproject_config, load_toml_config
from loggerctl.config._locator import (
    find_config_file,
    find_pyproject_toml,
    get_user_config_path,
)
from loggerctl.models.config import LoggerctlConfig


def merge_config_layers(
    *layers: dict[str, object] | None,
) -> dict[str, object]:
    """複数の設定レイヤーを項目単位でマージする。

    後のレイヤーが先のレイヤーを上書きする。None のレイヤーはスキップされる。

    Args:
        layers: マージ対象の設定辞書。低優先度から高優先度の順。

    Returns:
        マージ済みの設定辞書。
    """
    result: dict[str, object] = {}
    for layer in layers:
        if layer is None:
            continue
        result.update(layer)
    return result


def filter_cli_overrides(cli_options: dict[str, object]) -> dict[str, object]:
    """CLI オプション辞書から None 値（未指定）を除外する。"""
    return {k: v for k, v in cli_options.items() if v is not None}


def resolve_config(
    start_dir: Path | None = None,
    cli_overrides: dict[str, object] | None = None,
) -> LoggerctlConfig:
    """設定ソースを階層的に解決し LoggerctlConfig を構築する。

    設定ファイルが存在しない場合は該当レイヤーをスキップする。
    全ファイルが存在しない場合はデフォルト値のみで構築する。

    Args:
        start_dir: 探索開始ディレクトリ。None の場合はカレントディレクトリ。
        cli_overrides: CLI オプションの辞書。None 値は未指定扱い。

    Returns:
        解決済みの LoggerctlConfig インスタンス。

    Raises:
        pydantic.ValidationError: マージ後の設定が不正な場合。
        tomllib.TOMLDecodeError: 設定ファイルの TOML 構文が不正な場合。
        PermissionError: 設定ファイルの読み取り権限がない場合。
    """
    effective_start = start_dir if start_dir is not None else Path.cwd()

    # Layer 1 (最低優先): ユーザーグローバル設定
    user_layer: dict[str, object] | None = None
    try:
        user_layer = load_toml_config(get_user_config_path())
    except FileNotFoundError:
        pass

    # Layer 2: pyproject.toml [tool.loggerctl]
    pyproject_layer: dict[str, object] | None = None
    pyproject_path = find_pyproject_toml(effective_start)
    if pyproject_path is not None:
        pyproject_layer = load_pyproject_config(pyproject_path)

    # Layer 3: .loggerctl/config.toml
    config_layer: dict[str, object] | None = None
    config_path = find_config_file(effective_start)
    if config_path is not None:
        # .loggerctl/ はあるが config.toml が未作成のケース
        try:
            config_layer = load_toml_config(config_path)
        except FileNotFoundError:
            pass

    # Layer 4 (最高優先): CLI overrides
    cli_layer: dict[str, object] | None = None
    if cli_overrides is not None:
        cli_layer = filter_cli_overrides(cli_overrides)

    merged = merge_config_layers(user_layer, pyproject_layer, config_layer, cli_layer)

    # デフォルト値は LoggerctlConfig のフィールドデフォルトが適用される
    return LoggerctlConfig(**merged)  # type: ignore[arg-type]
