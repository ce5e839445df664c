"""loggerctl — 単一インスタンスのロギングサービスを起動・停止する。"""


def main() -> None:
    """loggerctl.cli.main() を呼ぶ。プログラムから起動する場合に使う。"""
    from loggerctl.cli import main as cli_main

    cli_main()
