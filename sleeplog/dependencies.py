"""DI用ファクトリ関数。

sleeplog/ 直下に配置することで、api/ から store/ への
直接依存を避けつつ、FastAPI の Depends() で注入できる。
"""

from pathlib import Path

from sleeplog.config import settings
from sleeplog.interfaces.record_store import RecordStoreInterface
from sleeplog.query.service import SleepRecordService

_record_store: RecordStoreInterface | None = None
_record_service: SleepRecordService | None = None


def get_record_store() -> RecordStoreInterface:
    """RecordStoreのシングルトンインスタンスを返す。"""
    global _record_store
    if _record_store is None:
        if settings.store_backend == "memory":
            from sleeplog.store.memory import InMemoryRecordStore

            _record_store = InMemoryRecordStore()
        else:
            from sleeplog.store.sqlite import SqliteRecordStore

            Path(settings.db_path).parent.mkdir(parents=True, exist_ok=True)
            _record_store = SqliteRecordStore(settings.db_path)
    return _record_store


def get_record_service() -> SleepRecordService:
    """SleepRecordServiceのシングルトンインスタンスを返す。"""
    global _record_service
    if _record_service is None:
        _record_service = SleepRecordService(get_record_store())
    return _record_service


def _reset_all() -> None:
    """全シングルトンをリセットする（テスト用）。"""
    global _record_store, _record_service
    _record_store = None
    _record_service = None


def close_record_store() -> None:
    """生成済みの RecordStore を閉じ、シングルトンを破棄する（シャットダウン用）。"""
    global _record_store, _record_service
    if _record_store is not None:
        _record_store.close()
    _record_store = None
    _record_service = None
