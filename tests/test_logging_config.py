# tests/test_logging_config.py

"""Tests for the per-run logging configuration."""

import logging
import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from pricewatch.config.logging_config import prune_run_logs, setup_logging


class TestLoggingConfig(unittest.TestCase):
    """Verify logging setup behaviour."""

    def setUp(self) -> None:
        """Clean up the pricewatch logger before each test."""
        self.root_logger = logging.getLogger("pricewatch")
        self._drop_handlers()
        self.logs_dir = Path(tempfile.mkdtemp()) / "logs"
        self.addCleanup(self._drop_handlers)

    def _drop_handlers(self) -> None:
        for handler in list(self.root_logger.handlers):
            handler.close()
            self.root_logger.removeHandler(handler)

    def test_setup_creates_log_file(self) -> None:
        """setup_logging returns a path that exists on disk."""
        log_path = setup_logging(self.logs_dir)
        self.assertTrue(log_path.exists())

    def test_log_file_naming_convention(self) -> None:
        """Log file name matches run_YYYYMMDD_HHMMSS.log format."""
        log_path = setup_logging(self.logs_dir)
        self.assertRegex(log_path.name, r"^run_\d{8}_\d{6}\.log$")

    def test_log_file_inside_logs_dir(self) -> None:
        """Log file is created inside the requested directory."""
        log_path = setup_logging(self.logs_dir)
        self.assertEqual(log_path.parent, self.logs_dir)

    def test_file_handler_level_debug(self) -> None:
        """File handler should be set to DEBUG level."""
        setup_logging(self.logs_dir)
        file_handlers = [
            h
            for h in self.root_logger.handlers
            if isinstance(h, logging.FileHandler)
        ]
        self.assertEqual(len(file_handlers), 1)
        self.assertEqual(file_handlers[0].level, logging.DEBUG)

    def test_console_handler_level_warning(self) -> None:
        """Console handler should be set to WARNING level."""
        setup_logging(self.logs_dir)
        stream_handlers = [
            h
            for h in self.root_logger.handlers
            if isinstance(h, logging.StreamHandler)
            and not isinstance(h, logging.FileHandler)
        ]
        self.assertEqual(len(stream_handlers), 1)
        self.assertEqual(stream_handlers[0].level, logging.WARNING)

    def test_repeated_calls_no_duplicate_handlers(self) -> None:
        """Calling setup_logging twice does not duplicate handlers."""
        setup_logging(self.logs_dir)
        count_before = len(self.root_logger.handlers)
        setup_logging(self.logs_dir)
        self.assertEqual(len(self.root_logger.handlers), count_before)

    def test_module_loggers_reach_run_file(self) -> None:
        """Records from pricewatch.* loggers land in the run log."""
        log_path = setup_logging(self.logs_dir)
        logging.getLogger("pricewatch.fetcher").info("sample line")
        for handler in self.root_logger.handlers:
            handler.flush()
        self.assertIn("sample line", log_path.read_text(encoding="utf-8"))

    def test_console_level_from_env(self) -> None:
        """PRICEWATCH_LOG_LEVEL lowers the stderr threshold."""
        with patch.dict(os.environ, {"PRICEWATCH_LOG_LEVEL": "info"}):
            setup_logging(self.logs_dir)
        levels = [
            h.level
            for h in self.root_logger.handlers
            if not isinstance(h, logging.FileHandler)
        ]
        self.assertEqual(levels, [logging.INFO])

    def test_unknown_env_level_falls_back(self) -> None:
        """An unrecognised level name keeps the WARNING default."""
        with patch.dict(os.environ, {"PRICEWATCH_LOG_LEVEL": "loud"}):
            setup_logging(self.logs_dir)
        levels = [
            h.level
            for h in self.root_logger.handlers
            if not isinstance(h, logging.FileHandler)
        ]
        self.assertEqual(levels, [logging.WARNING])

    def test_old_run_logs_pruned(self) -> None:
        """Only the newest run logs survive setup."""
        self.logs_dir.mkdir(parents=True)
        for stamp in ("20250101_000000", "20250102_000000", "20250103_000000"):
            (self.logs_dir / f"run_{stamp}.log").write_text("x")
        log_path = setup_logging(self.logs_dir, keep=2)
        remaining = sorted(p.name for p in self.logs_dir.glob("run_*.log"))
        self.assertEqual(remaining, ["run_20250103_000000.log", log_path.name])


class TestPruneRunLogs(unittest.TestCase):
    """prune_run_logs retention rules."""

    def setUp(self) -> None:
        self.logs_dir = Path(tempfile.mkdtemp())
        for stamp in ("20250101_000000", "20250102_000000"):
            (self.logs_dir / f"run_{stamp}.log").write_text("x")
        (self.logs_dir / "notes.txt").write_text("keep")

    def test_keep_zero_keeps_everything(self) -> None:
        """A retention of 0 disables pruning."""
        self.assertEqual(prune_run_logs(self.logs_dir, 0), [])
        self.assertEqual(len(list(self.logs_dir.iterdir())), 3)

    def test_removes_oldest_only(self) -> None:
        """The oldest run log goes; other files are untouched."""
        removed = prune_run_logs(self.logs_dir, 1)
        self.assertEqual([p.name for p in removed], ["run_20250101_000000.log"])
        self.assertTrue((self.logs_dir / "notes.txt").exists())


if __name__ == "__main__":
    unittest.main()
