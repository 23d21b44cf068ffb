"""Record Store の抽象インターフェース。

記録IDをキーとする順序付き辞書。検証や集計の責務は持たず、
get / put / remove / values の4操作だけを提供する。
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class Quality(str, Enum):
    """睡眠の質。宣言順（good → average → poor）が集計時のタイブレーク順になる。"""

    GOOD = "good"
    AVERAGE = "average"
    POOR = "poor"


@dataclass(frozen=True)
class SleepRecord:
    """睡眠記録（ドメインモデル）。

    date は YYYY-MM-DD 形式のゼロ埋め文字列で、辞書順が暦順と一致する前提。
    updated_at は一度も更新されていなければ None。
    """

    id: str
    date: str
    hours_slept: float
    quality: Quality
    created_at: datetime
    updated_at: datetime | None = None


class RecordStoreInterface(ABC):
    """Record Store の抽象インターフェース。

    挿入か更新かの判断は呼び出し側の責務。ストア自体は意味を持たない。
    """

    @abstractmethod
    def get(self, record_id: str) -> SleepRecord | None:
        """IDで1件取得する。存在しなければ None。"""
        ...

    @abstractmethod
    def put(self, record: SleepRecord) -> None:
        """record.id をキーに挿入する。既存なら置き換える。"""
        ...

    @abstractmethod
    def remove(self, record_id: str) -> SleepRecord | None:
        """削除して直前の値を返す。存在しない場合もエラーにしない。"""
        ...

    @abstractmethod
    def values(self) -> list[SleepRecord]:
        """全記録をキー（id）昇順で返す。"""
        ...

    @abstractmethod
    def count(self) -> int:
        """保持している記録数を返す。"""
        ...

    def close(self) -> None:
        """保持しているリソースを解放する。既定では何もしない。"""
