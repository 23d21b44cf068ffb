"""Store層のSQLite実装。

RecordStoreInterface に準拠したSQLite実装を提供する。
"""

import logging
import sqlite3
from datetime import datetime

from sleeplog.interfaces.record_store import (
    Quality,
    RecordStoreInterface,
    SleepRecord,
)

logger = logging.getLogger(__name__)

# スキーマ定義
SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS sleep_records (
    id           TEXT PRIMARY KEY,
    date         TEXT NOT NULL,
    hours_slept  REAL NOT NULL,
    quality      TEXT NOT NULL,
    created_at   TEXT NOT NULL,
    updated_at   TEXT
);
"""

_COLUMNS = "id, date, hours_slept, quality, created_at, updated_at"


class SqliteRecordStore(RecordStoreInterface):
    """SQLiteによるStore層実装。

    接続はインスタンスの生存期間中保持する。スレッド間の排他は
    呼び出し側（クエリ層のロック）が担う。
    """

    def __init__(self, db_path: str):
        """初期化。

        Args:
            db_path: SQLiteデータベースファイルのパス（":memory:" も可）
        """
        self._db_path = db_path
        self._conn = sqlite3.connect(db_path, check_same_thread=False)
        self._conn.executescript(SCHEMA_SQL)
        self._conn.commit()
        logger.debug("Opened sqlite record store at %s", db_path)

    def close(self) -> None:
        """接続を閉じる。"""
        self._conn.close()

    def get(self, record_id: str) -> SleepRecord | None:
        row = self._conn.execute(
            f"SELECT {_COLUMNS} FROM sleep_records WHERE id = ?",
            (record_id,),
        ).fetchone()
        return _row_to_record(row) if row else None

    def put(self, record: SleepRecord) -> None:
        self._conn.execute(
            f"""
            INSERT INTO sleep_records ({_COLUMNS})
            VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                date = excluded.date,
                hours_slept = excluded.hours_slept,
                quality = excluded.quality,
                created_at = excluded.created_at,
                updated_at = excluded.updated_at
            """,
            (
                record.id,
                record.date,
                record.hours_slept,
                record.quality.value,
                record.created_at.isoformat(),
                record.updated_at.isoformat() if record.updated_at else None,
            ),
        )
        self._conn.commit()

    def remove(self, record_id: str) -> SleepRecord | None:
        existing = self.get(record_id)
        if existing is None:
            return None
        self._conn.execute("DELETE FROM sleep_records WHERE id = ?", (record_id,))
        self._conn.commit()
        return existing

    def values(self) -> list[SleepRecord]:
        rows = self._conn.execute(
            f"SELECT {_COLUMNS} FROM sleep_records ORDER BY id ASC"
        ).fetchall()
        return [_row_to_record(row) for row in rows]

    def count(self) -> int:
        (n,) = self._conn.execute("SELECT COUNT(*) FROM sleep_records").fetchone()
        return n


def _row_to_record(row: tuple) -> SleepRecord:
    """DB行 → SleepRecord の変換。"""
    record_id, date, hours_slept, quality, created_at, updated_at = row
    return SleepRecord(
        id=record_id,
        date=date,
        hours_slept=hours_slept,
        quality=Quality(quality),
        created_at=datetime.fromisoformat(created_at),
        updated_at=datetime.fromisoformat(updated_at) if updated_at else None,
    )
