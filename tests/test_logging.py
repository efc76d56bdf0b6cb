"""Tests for logging utilities."""

import logging

import pytest

from club_convergence.utils.logging import LogContext, get_logger, log_exception, setup_logging


class TestGetLogger:

    def test_prefixes_package_name(self):
        assert get_logger("scripts.run").name == "club_convergence.scripts.run"

    def test_keeps_package_loggers(self):
        assert get_logger("club_convergence.analysis").name == "club_convergence.analysis"


class TestLogContext:

    def test_logs_start_and_completion(self, caplog):
        logger = get_logger("tests")
        with caplog.at_level(logging.INFO, logger="club_convergence"):
            with LogContext(logger, "Merging clubs"):
                pass

        assert "Merging clubs..." in caplog.text
        assert "Merging clubs completed" in caplog.text

    def test_logs_failure_and_reraises(self, caplog):
        logger = get_logger("tests")
        with caplog.at_level(logging.INFO, logger="club_convergence"):
            with pytest.raises(ValueError):
                with LogContext(logger, "Merging clubs"):
                    raise ValueError("boom")

        assert "Merging clubs failed" in caplog.text

    def test_records_elapsed_time(self):
        context = LogContext(get_logger("tests"), "Merging clubs")
        assert context.elapsed is None
        with context:
            pass

        assert context.elapsed >= 0


class TestSetupLogging:

    @pytest.fixture(autouse=True)
    def restore_logging(self):
        """setup_logging reconfigures the root logger; put it back afterwards."""
        root = logging.getLogger()
        root_level = root.level
        package_level = logging.getLogger("club_convergence").level
        yield
        for handler in root.handlers[:]:
            if type(handler) in (logging.StreamHandler, logging.FileHandler):
                root.removeHandler(handler)
                handler.close()
        root.setLevel(root_level)
        logging.getLogger("club_convergence").setLevel(package_level)

    def test_quiet_mode_raises_level(self):
        setup_logging(quiet=True)
        assert logging.getLogger("club_convergence").level == logging.WARNING
        setup_logging(level=logging.DEBUG)
        assert logging.getLogger("club_convergence").level == logging.DEBUG

    def test_log_file(self, tmp_path):
        log_file = tmp_path / "logs" / "run.log"
        setup_logging(log_file=log_file)
        get_logger("tests").info("written to file")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert "written to file" in log_file.read_text(encoding="utf-8")

    def test_log_exception(self, caplog):
        logger = get_logger("tests")
        with caplog.at_level(logging.ERROR, logger="club_convergence"):
            log_exception(logger, RuntimeError("bad panel"), "Loading")

        assert "Loading: bad panel" in caplog.text
