"""Tests for taskfsm.utils module - logging setup."""

import logging
import time

import pytest

from taskfsm.utils import cleanup_old_logs, get_logs_dir, setup_logging

pytestmark = pytest.mark.usefixtures("isolate_logging")


class TestGetLogsDir:
    def test_creates_dir_under_root(self, tmp_path, monkeypatch):
        monkeypatch.delenv("TASKFSM_LOG_DIR", raising=False)

        logs_dir = get_logs_dir(tmp_path)

        assert logs_dir == tmp_path / ".taskfsm" / "logs"
        assert logs_dir.is_dir()

    def test_env_override(self, tmp_path, monkeypatch):
        target = tmp_path / "elsewhere"
        monkeypatch.setenv("TASKFSM_LOG_DIR", str(target))

        assert get_logs_dir(tmp_path) == target
        assert target.is_dir()


class TestSetupLogging:
    """Tests for logging configuration."""

    def test_always_sets_debug_level(self, tmp_path):
        logging.getLogger("taskfsm").setLevel(logging.WARNING)

        setup_logging(tmp_path)

        assert logging.getLogger("taskfsm").level == logging.DEBUG

    def test_delays_file_creation(self, tmp_path):
        """Log file should not exist until first message written."""
        log_path = setup_logging(tmp_path)

        assert not log_path.exists()

        logging.getLogger("taskfsm.machine").debug("test message")

        assert log_path.exists()
        assert "test message" in log_path.read_text()
        assert "[DEBUG] taskfsm.machine" in log_path.read_text()

    def test_verbose_adds_console_handler(self, tmp_path):
        setup_logging(tmp_path, verbose=True)

        handler_types = [type(h).__name__ for h in logging.getLogger("taskfsm").handlers]
        assert handler_types == ["FileHandler", "RichHandler"]

    def test_default_no_console_handler(self, tmp_path):
        setup_logging(tmp_path)

        handler_types = [type(h).__name__ for h in logging.getLogger("taskfsm").handlers]
        assert handler_types == ["FileHandler"]


class TestCleanupOldLogs:
    def test_removes_only_expired_logs(self, tmp_path):
        old = tmp_path / "2000-01-01-0000.log"
        recent = tmp_path / f"{time.strftime('%Y-%m-%d')}-0000.log"
        unrelated = tmp_path / "notes.log"
        for path in (old, recent, unrelated):
            path.write_text("x")

        deleted = cleanup_old_logs(tmp_path, retention_days=7)

        assert deleted == 1
        assert not old.exists()
        assert recent.exists()
        assert unrelated.exists()

    def test_missing_dir(self, tmp_path):
        assert cleanup_old_logs(tmp_path / "nope") == 0
