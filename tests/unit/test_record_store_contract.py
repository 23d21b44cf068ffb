"""Store層の契約テスト。

RecordStoreInterface の契約を検証する。
インメモリ実装・SQLite実装のどちらでもこのテストが通ることを保証する。
"""

from datetime import UTC, datetime

import pytest

from sleeplog.interfaces.record_store import (
    Quality,
    RecordStoreInterface,
    SleepRecord,
)

CREATED = datetime(2024, 1, 1, 8, 0, tzinfo=UTC)


def _record(record_id: str, date: str = "2024-01-01", hours: float = 7.5):
    return SleepRecord(
        id=record_id,
        date=date,
        hours_slept=hours,
        quality=Quality.GOOD,
        created_at=CREATED,
    )


@pytest.fixture(params=["memory", "sqlite"])
def record_store(request, tmp_path):
    """Store層の実装インスタンスを返す。"""
    if request.param == "memory":
        from sleeplog.store.memory import InMemoryRecordStore

        yield InMemoryRecordStore()
        return

    from sleeplog.store.sqlite import SqliteRecordStore

    store = SqliteRecordStore(str(tmp_path / "test.db"))
    yield store
    store.close()


class TestGetAndPut:
    """点取得と挿入・置換の契約テスト。"""

    def test_get_missing_returns_none(self, record_store: RecordStoreInterface):
        assert record_store.get("missing") is None

    def test_put_then_get_returns_equal_record(
        self, record_store: RecordStoreInterface
    ):
        record = _record("a")
        record_store.put(record)
        assert record_store.get("a") == record

    def test_put_replaces_existing(self, record_store: RecordStoreInterface):
        """同じIDで put すると置き換わり、件数は増えない。"""
        record_store.put(_record("a", hours=6.0))
        updated = SleepRecord(
            id="a",
            date="2024-01-02",
            hours_slept=8.0,
            quality=Quality.POOR,
            created_at=CREATED,
            updated_at=datetime(2024, 1, 3, tzinfo=UTC),
        )
        record_store.put(updated)

        assert record_store.count() == 1
        assert record_store.get("a") == updated

    def test_updated_at_none_survives(self, record_store: RecordStoreInterface):
        record_store.put(_record("a"))
        assert record_store.get("a").updated_at is None


class TestRemove:
    """削除の契約テスト。"""

    def test_remove_returns_prior_value(self, record_store: RecordStoreInterface):
        record = _record("a")
        record_store.put(record)
        assert record_store.remove("a") == record
        assert record_store.get("a") is None

    def test_remove_missing_is_noop(self, record_store: RecordStoreInterface):
        record_store.put(_record("a"))
        assert record_store.remove("b") is None
        assert record_store.remove("b") is None
        assert record_store.count() == 1


class TestValues:
    """全件走査の契約テスト。"""

    def test_empty_store(self, record_store: RecordStoreInterface):
        assert record_store.values() == []
        assert record_store.count() == 0

    def test_values_sorted_by_key(self, record_store: RecordStoreInterface):
        """挿入順に関係なくキー昇順で返る。"""
        for record_id in ["c", "a", "b"]:
            record_store.put(_record(record_id))
        assert [r.id for r in record_store.values()] == ["a", "b", "c"]


class TestSqlitePersistence:
    """SQLite実装はファイルを開き直しても内容を保持する。"""

    def test_reopen_keeps_records(self, tmp_path):
        from sleeplog.store.sqlite import SqliteRecordStore

        db_path = str(tmp_path / "persist.db")
        kept = _record("a", date="2024-01-02", hours=6.5)
        updated = SleepRecord(
            id="b",
            date="2024-01-03",
            hours_slept=8.0,
            quality=Quality.AVERAGE,
            created_at=CREATED,
            updated_at=datetime(2024, 1, 4, 9, 30, tzinfo=UTC),
        )

        first = SqliteRecordStore(db_path)
        first.put(kept)
        first.put(_record("b"))
        first.put(updated)
        first.put(_record("c"))
        first.remove("c")
        first.close()

        reopened = SqliteRecordStore(db_path)
        try:
            assert reopened.values() == [kept, updated]
            assert reopened.get("c") is None
        finally:
            reopened.close()
