"""クエリ・更新層 — 睡眠記録の CRUD と派生クエリ."""

import logging
import threading
import uuid
from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import UTC, datetime

from sleeplog.interfaces.record_store import (
    Quality,
    RecordStoreInterface,
    SleepRecord,
)
from sleeplog.query.aggregate import average_hours, dominant_quality, total_hours
from sleeplog.query.errors import (
    InvalidQualityError,
    NoRecordsFoundError,
    NotFoundError,
)

logger = logging.getLogger(__name__)

_ALLOWED_QUALITIES = frozenset(q.value for q in Quality)


def parse_quality(value: object) -> Quality:
    """quality 文字列を検証して Quality に変換する.

    値が {"good", "average", "poor"} の要素であるかを判定する。

    Raises:
        InvalidQualityError: 許可された値でない場合
    """
    if not isinstance(value, str) or value not in _ALLOWED_QUALITIES:
        raise InvalidQualityError(value)
    return Quality(value)


def _default_id() -> str:
    return str(uuid.uuid4())


def _default_clock() -> datetime:
    return datetime.now(UTC)


class SleepRecordService:
    """睡眠記録サービス.

    全ての検証・フィルタ・集計ロジックを持つ。ストアへのアクセスは
    RecordStoreInterface 経由のみ。各操作はインスタンス単位のロック下で
    実行されるため、走査が更新途中の状態を観測することはなく、
    update 系の「取得→保存」も同一IDへの並行更新に対して原子的になる。
    """

    def __init__(
        self,
        store: RecordStoreInterface,
        id_factory: Callable[[], str] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = store
        self._id_factory = id_factory or _default_id
        self._clock = clock or _default_clock
        self._lock = threading.Lock()

    # ---------- CRUD ----------

    def get_all(self) -> list[SleepRecord]:
        """全記録をキー順で返す."""
        with self._lock:
            return self._store.values()

    def get_one(self, record_id: str) -> SleepRecord:
        """IDで1件取得する.

        Raises:
            NotFoundError: 存在しない場合
        """
        with self._lock:
            return self._require(record_id)

    def add(self, date: str, hours_slept: float, quality: str) -> SleepRecord:
        """記録を新規作成する.

        Raises:
            InvalidQualityError: quality が不正な場合（ストアは変更しない）
        """
        parsed = self._validate(quality)
        with self._lock:
            return self._create(date, hours_slept, parsed)

    def add_many(
        self, items: Iterable[tuple[str, float, str]]
    ) -> list[SleepRecord]:
        """(date, hours_slept, quality) の組をまとめて作成する.

        書き込みの前に全件の quality を検証する。

        Raises:
            InvalidQualityError: 1件でも quality が不正な場合
        """
        validated = [
            (date, hours_slept, self._validate(quality))
            for date, hours_slept, quality in items
        ]
        with self._lock:
            created = [
                self._create(date, hours_slept, quality)
                for date, hours_slept, quality in validated
            ]
        logger.info("Imported %d sleep records", len(created))
        return created

    def update(
        self, record_id: str, date: str, hours_slept: float, quality: str
    ) -> SleepRecord:
        """date / hours_slept / quality をまとめて更新する.

        Raises:
            InvalidQualityError: quality が不正な場合
            NotFoundError: 存在しない場合
        """
        parsed = self._validate(quality)
        with self._lock:
            return self._mutate(
                record_id, date=date, hours_slept=hours_slept, quality=parsed
            )

    def delete(self, record_id: str) -> SleepRecord:
        """削除して削除前の記録を返す.

        Raises:
            NotFoundError: 存在しない場合
        """
        with self._lock:
            removed = self._store.remove(record_id)
        if removed is None:
            raise NotFoundError(record_id)
        logger.info("Deleted sleep record %s", record_id)
        return removed

    def update_quality(self, record_id: str, quality: str) -> SleepRecord:
        """quality のみ更新する."""
        parsed = self._validate(quality)
        with self._lock:
            return self._mutate(record_id, quality=parsed)

    def update_hours_slept(
        self, record_id: str, hours_slept: float
    ) -> SleepRecord:
        """hours_slept のみ更新する."""
        with self._lock:
            return self._mutate(record_id, hours_slept=hours_slept)

    # ---------- 派生クエリ ----------

    def search_by_date(self, date: str) -> list[SleepRecord]:
        """date が一致する記録."""
        return self._filter(lambda r: r.date == date)

    def filter_by_quality(self, quality: str) -> list[SleepRecord]:
        """quality が一致する記録.

        Raises:
            InvalidQualityError: quality が不正な場合
        """
        parsed = self._validate(quality)
        return self._filter(lambda r: r.quality == parsed)

    def get_by_date_range(
        self, start_date: str, end_date: str
    ) -> list[SleepRecord]:
        """start_date <= date <= end_date の記録（両端含む・辞書順比較）."""
        return self._filter(lambda r: start_date <= r.date <= end_date)

    def get_total_hours_by_date_range(
        self, start_date: str, end_date: str
    ) -> float:
        """期間内の hours_slept 合計. 該当なしなら 0."""
        return total_hours(self.get_by_date_range(start_date, end_date))

    def paginate(self, page: int, page_size: int) -> list[SleepRecord]:
        """1始まりの page 番目を返す. 範囲外や page < 1 は空リスト."""
        if page < 1 or page_size < 1:
            return []
        start = (page - 1) * page_size
        with self._lock:
            records = self._store.values()
        return records[start : start + page_size]

    def delete_older_than(self, cutoff_date: str) -> list[SleepRecord]:
        """date < cutoff_date の記録を全て削除し、削除した記録を返す."""
        with self._lock:
            targets = [r for r in self._store.values() if r.date < cutoff_date]
            for record in targets:
                self._store.remove(record.id)
        logger.info(
            "Deleted %d sleep records older than %s", len(targets), cutoff_date
        )
        return targets

    def get_average_duration(self) -> float:
        """全記録の平均睡眠時間.

        Raises:
            NoRecordsFoundError: 記録が1件もない場合
        """
        with self._lock:
            records = self._store.values()
        if not records:
            raise NoRecordsFoundError()
        return average_hours(records)

    def get_dominant_quality(self) -> Quality:
        """最も多い quality. 同数は good → average → poor の順で優先.

        Raises:
            NoRecordsFoundError: 記録が1件もない場合
        """
        with self._lock:
            records = self._store.values()
        if not records:
            raise NoRecordsFoundError()
        return dominant_quality(records)

    # ---------- 内部ヘルパー ----------

    @staticmethod
    def _validate(quality: str) -> Quality:
        try:
            return parse_quality(quality)
        except InvalidQualityError:
            logger.warning("Rejected invalid quality %r", quality)
            raise

    def _require(self, record_id: str) -> SleepRecord:
        record = self._store.get(record_id)
        if record is None:
            raise NotFoundError(record_id)
        return record

    def _create(
        self, date: str, hours_slept: float, quality: Quality
    ) -> SleepRecord:
        record = SleepRecord(
            id=self._id_factory(),
            date=date,
            hours_slept=hours_slept,
            quality=quality,
            created_at=self._clock(),
        )
        self._store.put(record)
        logger.info("Created sleep record %s for %s", record.id, date)
        return record

    def _mutate(self, record_id: str, **changes) -> SleepRecord:
        """既存記録に changes をマージし updated_at を更新して保存する."""
        current = self._require(record_id)
        updated = replace(current, **changes, updated_at=self._clock())
        self._store.put(updated)
        logger.info(
            "Updated sleep record %s (%s)", record_id, ", ".join(sorted(changes))
        )
        return updated

    def _filter(
        self, predicate: Callable[[SleepRecord], bool]
    ) -> list[SleepRecord]:
        """全件走査して predicate を満たす記録をキー順のまま返す."""
        with self._lock:
            records = self._store.values()
        matched = [r for r in records if predicate(r)]
        logger.debug("Scanned %d records, matched %d", len(records), len(matched))
        return matched
