"""ドメインモデルの基底クラス。"""

from pydantic import BaseModel, ConfigDict


class LoggerctlBaseModel(BaseModel):
    """全モデル共通の基底。未定義フィールドを拒否し、構築後は変更できない。"""

    model_config = ConfigDict(extra="forbid", frozen=True)
