"""Store層のインメモリ実装（テスト・memoryバックエンド用）。"""

from sleeplog.interfaces.record_store import RecordStoreInterface, SleepRecord


class InMemoryRecordStore(RecordStoreInterface):
    """dict による Record Store 実装。"""

    def __init__(self) -> None:
        self._records: dict[str, SleepRecord] = {}

    def get(self, record_id: str) -> SleepRecord | None:
        return self._records.get(record_id)

    def put(self, record: SleepRecord) -> None:
        self._records[record.id] = record

    def remove(self, record_id: str) -> SleepRecord | None:
        return self._records.pop(record_id, None)

    def values(self) -> list[SleepRecord]:
        return [self._records[key] for key in sorted(self._records)]

    def count(self) -> int:
        return len(self._records)
