"""Tests for the command line, run settings and logging setup."""

import logging

import pytest

from anomalysim.__main__ import main, parse_settings
from anomalysim.config import TS, RunSettings
from anomalysim.controller.universe import Universe
from anomalysim.logging_config import level_from_name, setup_logging
from anomalysim.main import run_headless


@pytest.fixture(autouse=True)
def reset_app_logger():
    """Drop handlers added by setup_logging so they do not outlive captured streams."""
    yield
    logger = logging.getLogger("anomalysim")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


class TestParseSettings:
    def test_defaults(self):
        settings = parse_settings([])
        assert settings == RunSettings()
        assert settings.dt == TS
        assert not settings.headless

    def test_overrides(self):
        settings = parse_settings(
            ["--headless", "--frames", "3", "--seed", "7", "--pairs", "2", "--dt", "0.02", "--log-level", "debug"]
        )
        assert settings.headless
        assert (settings.frames, settings.seed, settings.pairs) == (3, 7, 2)
        assert settings.dt == pytest.approx(0.02)
        assert settings.log_level == logging.DEBUG

    @pytest.mark.parametrize("argv", [
        ["--dt", "0"],
        ["--pairs", "-1"],
        ["--frames", "-5"],
        ["--log-level", "chatty"],
    ])
    def test_invalid(self, argv):
        with pytest.raises(SystemExit):
            parse_settings(argv)


class TestLogging:
    def test_level_from_name(self):
        assert level_from_name("warning") == logging.WARNING
        with pytest.raises(ValueError):
            level_from_name("loud")

    def test_setup_is_idempotent(self):
        setup_logging(logging.INFO)
        setup_logging(logging.INFO)
        assert len(logging.getLogger("anomalysim").handlers) == 1

    def test_log_file(self, tmp_path):
        path = tmp_path / "run.log"
        setup_logging(logging.INFO, log_file=str(path))
        logging.getLogger("anomalysim.test").info("hello from the test")
        for handler in logging.getLogger("anomalysim").handlers:
            handler.flush()
        assert "hello from the test" in path.read_text(encoding="utf-8")


class TestHeadless:
    def test_run_headless(self):
        history = run_headless(Universe.seeded(seed=1, pairs=2), frames=4)
        assert [s.frame for s in history] == [1, 2, 3, 4]
        assert all(s.active == 4 for s in history)

    def test_zero_frames(self):
        assert run_headless(Universe.seeded(seed=1, pairs=1), frames=0) == []

    def test_main(self, caplog):
        with caplog.at_level(logging.INFO, logger="anomalysim"):
            assert main(["--headless", "--frames", "3", "--pairs", "1", "--seed", "0"]) == 0
        assert "Headless run finished: 3 frames" in caplog.text
