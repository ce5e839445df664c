"""python -m loggerctl のエントリポイント。spawn が自身を再起動する際に使う。"""

from loggerctl.cli import main

main()
