"""Tests for hunkstage.log module."""

import json

import structlog
from structlog.testing import capture_logs

from hunkstage.log import _configure_defaults, configure_logging, get_logger


class TestGetLogger:
    """Tests for get_logger function."""

    def test_events_carry_module_name(self):
        """Test the name is bound to every event."""
        logger = get_logger("hunkstage.git.runner")

        with capture_logs() as logs:
            logger.info("git_command", args=["status"])

        assert logs[0]["event"] == "git_command"
        assert logs[0]["logger_name"] == "hunkstage.git.runner"

    def test_proxy_follows_later_configuration(self, tmp_path):
        """Test a logger created at import time uses the final configuration."""
        logger = get_logger("hunkstage.status.refresh")
        log_file = tmp_path / "logs" / "hunkstage.log"

        configure_logging(level="debug", log_file=log_file, log_format="json")
        logger.debug("refresh_start", reason="open")

        entry = json.loads(log_file.read_text().splitlines()[0])
        assert entry["event"] == "refresh_start"
        assert entry["level"] == "debug"
        assert entry["logger_name"] == "hunkstage.status.refresh"


class TestDefaults:
    """Tests for the configuration used before configure_logging."""

    def test_debug_events_are_filtered(self, capsys):
        """Test only warnings and errors are written by default."""
        _configure_defaults()
        logger = get_logger("hunkstage.test")

        logger.debug("refresh_lock_acquired")
        logger.warning("refresh_lock_expired")

        err = capsys.readouterr().err
        assert "refresh_lock_acquired" not in err
        assert "refresh_lock_expired" in err

    def test_existing_configuration_is_kept(self):
        """Test an application's own configuration is not replaced."""
        wrapper = structlog.make_filtering_bound_logger(0)
        structlog.configure(wrapper_class=wrapper)

        _configure_defaults()

        assert structlog.get_config()["wrapper_class"] is wrapper
