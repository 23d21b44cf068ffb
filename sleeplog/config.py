"""環境変数による設定。

全項目にデフォルト値を持つ。テストでは Settings.from_env() で読み直す。
"""

import os
from dataclasses import dataclass

from sleeplog.logging_config import DEFAULT_DATE_FORMAT, DEFAULT_LOG_FORMAT

STORE_BACKENDS = ("sqlite", "memory")


@dataclass(frozen=True)
class Settings:
    """アプリケーション設定。"""

    store_backend: str = "sqlite"
    db_path: str = "data/sleep_records.db"
    log_level: str = "INFO"
    log_file: str | None = None
    log_format: str = DEFAULT_LOG_FORMAT
    log_date_format: str = DEFAULT_DATE_FORMAT

    @classmethod
    def from_env(cls) -> "Settings":
        """環境変数から設定を構築する。

        Raises:
            ValueError: SLEEPLOG_STORE が sqlite / memory 以外の場合
        """
        backend = os.getenv("SLEEPLOG_STORE", cls.store_backend).lower()
        if backend not in STORE_BACKENDS:
            raise ValueError(
                f"SLEEPLOG_STORE must be one of {', '.join(STORE_BACKENDS)}, "
                f"got {backend!r}"
            )
        return cls(
            store_backend=backend,
            db_path=os.getenv("SLEEPLOG_DB_PATH", cls.db_path),
            log_level=os.getenv("LOG_LEVEL", cls.log_level),
            log_file=os.getenv("LOG_FILE") or None,
            log_format=os.getenv("LOG_FORMAT") or cls.log_format,
            log_date_format=os.getenv("LOG_DATEFMT") or cls.log_date_format,
        )


settings = Settings.from_env()
