"""ライフサイクル操作のエラー分類。

各アクションハンドラはこれらの例外を送出し、run_action が終了コードに変換する。
"""

from __future__ import annotations


class LifecycleError(Exception):
    """ライフサイクル操作エラーの基底クラス。"""


class ConfigurationError(LifecycleError):
    """コマンドライン・設定の不正。副作用は一切発生していない。"""


class ContentionError(LifecycleError):
    """同一インスタンス ID のガードが他プロセスに保持されている。"""


class SyncError(LifecycleError):
    """名前付き同期オブジェクトの作成・操作に失敗した。"""


class OutputSinkError(LifecycleError):
    """出力先ファイルを開けなかった。"""


class LaunchError(LifecycleError):
    """子プロセスの起動、または終了待機に失敗した。"""


class RpcError(LifecycleError):
    """制御チャネルを開けない、またはリモート呼び出しが失敗を返した。"""


class EngineError(LifecycleError):
    """ロガーエンジンの起動、または割り込みハンドラの登録に失敗した。"""
