"""階層化された TOML 設定の解決。"""

from loggerctl.config._resolver import resolve_config

__all__ = ["resolve_config"]
