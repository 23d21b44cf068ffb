"""設定・ロギングのユニットテスト。"""

import logging

import pytest

from sleeplog.config import Settings
from sleeplog.logging_config import (
    DEFAULT_DATE_FORMAT,
    DEFAULT_LOG_FORMAT,
    resolve_level,
    setup_logging,
)

ENV_NAMES = (
    "SLEEPLOG_STORE",
    "SLEEPLOG_DB_PATH",
    "LOG_LEVEL",
    "LOG_FILE",
    "LOG_FORMAT",
    "LOG_DATEFMT",
)


class TestSettingsFromEnv:
    def test_defaults(self, monkeypatch):
        for name in ENV_NAMES:
            monkeypatch.delenv(name, raising=False)
        s = Settings.from_env()
        assert s.store_backend == "sqlite"
        assert s.db_path == "data/sleep_records.db"
        assert s.log_level == "INFO"
        assert s.log_file is None
        assert s.log_format == DEFAULT_LOG_FORMAT
        assert s.log_date_format == DEFAULT_DATE_FORMAT

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("SLEEPLOG_STORE", "MEMORY")
        monkeypatch.setenv("SLEEPLOG_DB_PATH", "/tmp/x.db")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("LOG_FILE", "logs/app.log")
        monkeypatch.setenv("LOG_FORMAT", "%(levelname)s %(message)s")
        monkeypatch.setenv("LOG_DATEFMT", "%H:%M")
        s = Settings.from_env()
        assert s.store_backend == "memory"
        assert s.db_path == "/tmp/x.db"
        assert s.log_level == "DEBUG"
        assert s.log_file == "logs/app.log"
        assert s.log_format == "%(levelname)s %(message)s"
        assert s.log_date_format == "%H:%M"

    def test_rejects_unknown_backend(self, monkeypatch):
        monkeypatch.setenv("SLEEPLOG_STORE", "redis")
        with pytest.raises(ValueError, match="SLEEPLOG_STORE"):
            Settings.from_env()


class TestSetupLogging:
    @pytest.fixture
    def root(self):
        """ルートロガーを返し、終了後にレベルを戻す。"""
        root = logging.getLogger()
        saved_level = root.level
        yield root
        root.setLevel(saved_level)

    @staticmethod
    def _detach(root):
        saved = root.handlers[:]
        root.handlers.clear()
        return saved

    @staticmethod
    def _restore(root, saved):
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = saved

    def test_configures_once(self, root, tmp_path):
        """2回目以降の呼び出しは既存設定を変更しない。"""
        saved = self._detach(root)
        try:
            logfile = tmp_path / "logs" / "sleeplog.log"
            setup_logging("debug", str(logfile))
            assert root.level == logging.DEBUG
            assert len(root.handlers) == 2

            setup_logging("error")
            assert root.level == logging.DEBUG
            assert len(root.handlers) == 2

            logging.getLogger("sleeplog.test").info("hello")
            for handler in root.handlers:
                handler.flush()
            text = logfile.read_text(encoding="utf-8")
            assert "[INFO] sleeplog.test: hello" in text
        finally:
            self._restore(root, saved)

    def test_custom_format(self, root, tmp_path):
        """Settings 由来の書式がファイル出力に反映される。"""
        saved = self._detach(root)
        try:
            logfile = tmp_path / "custom.log"
            setup_logging(
                "info",
                str(logfile),
                fmt="%(asctime)s|%(levelname)s|%(message)s",
                datefmt="%Y",
            )
            logging.getLogger("sleeplog.test").warning("custom")
            for handler in root.handlers:
                handler.flush()
            line = logfile.read_text(encoding="utf-8").strip()
            year, level, message = line.split("|")
            assert len(year) == 4 and year.isdigit()
            assert (level, message) == ("WARNING", "custom")
        finally:
            self._restore(root, saved)

    def test_invalid_format_attaches_nothing(self, root):
        saved = self._detach(root)
        try:
            with pytest.raises(ValueError):
                setup_logging("info", fmt="%(no_such_field")
            assert root.handlers == []
        finally:
            self._restore(root, saved)


@pytest.mark.parametrize(
    "name,expected",
    [("debug", logging.DEBUG), ("WARNING", logging.WARNING), ("verbose", logging.INFO)],
)
def test_resolve_level(name, expected):
    assert resolve_level(name) == expected
