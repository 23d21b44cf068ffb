"""クエリ層の失敗種別。

タグは NotFound / InvalidQuality / NoRecordsFound の3種のみ。
API層はタグでステータスコードを決める。
"""

from sleeplog.interfaces.record_store import Quality


class SleepRecordError(Exception):
    """クエリ層が返す失敗の基底クラス。"""

    tag: str = "SleepRecordError"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(SleepRecordError):
    """指定IDの記録が存在しない。"""

    tag = "NotFound"

    def __init__(self, record_id: str) -> None:
        super().__init__(f"Sleep record with id={record_id} not found")
        self.record_id = record_id


class InvalidQualityError(SleepRecordError):
    """quality が good / average / poor のいずれでもない。"""

    tag = "InvalidQuality"

    def __init__(self, quality: object) -> None:
        allowed = ", ".join(q.value for q in Quality)
        super().__init__(
            f"Invalid quality {quality!r}: must be one of {allowed}"
        )
        self.quality = quality


class NoRecordsFoundError(SleepRecordError):
    """集計対象の記録が1件もない。"""

    tag = "NoRecordsFound"

    def __init__(self) -> None:
        super().__init__("No sleep records found.")
