"""
Tests for logging setup and the build listener.
"""

import io
import logging
from pathlib import Path

import pytest

from nugetstep.core.observability.logging_config import (
    _parse_level,
    configure_from_cli,
    resolve_level,
    setup_logging,
)
from nugetstep.core.services.listener import BuildListener


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for h in root.handlers:
        if h not in handlers:
            h.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestSetupLogging:
    def test_level(self):
        setup_logging("INFO")
        assert logging.getLogger().level == logging.INFO

    def test_file_level_lowers_root(self, tmp_path: Path):
        log_file = tmp_path / "nugetstep.log"
        setup_logging("WARNING", log_file=str(log_file), log_file_level="DEBUG")
        assert logging.getLogger().level == logging.DEBUG

        BuildListener(io.StringIO()).info("Path To NuGet.exe: nuget.exe")
        for h in logging.getLogger().handlers:
            h.flush()
        assert "Path To NuGet.exe" in log_file.read_text()

    def test_step_log_kept_off_console(self, capsys):
        setup_logging("DEBUG")
        BuildListener(io.StringIO()).write("child output")
        logging.getLogger("nugetstep.other").debug("runner message")
        err = capsys.readouterr().err
        assert "child output" not in err
        assert "runner message" in err

    @pytest.mark.parametrize(
        "name,expected",
        [("debug", logging.DEBUG), ("ERROR", logging.ERROR), ("bogus", logging.WARNING), (None, logging.WARNING)],
    )
    def test_parse_level(self, name, expected):
        assert _parse_level(name) == expected


class TestLevelResolution:
    @pytest.mark.parametrize(
        "flags,expected",
        [
            ({"debug": True, "verbose": True, "quiet": True}, "DEBUG"),
            ({"verbose": True, "quiet": True}, "INFO"),
            ({"quiet": True}, "ERROR"),
        ],
    )
    def test_flags_beat_env(self, flags, expected):
        assert resolve_level(**flags, env={"NUGETSTEP_LOG_LEVEL": "CRITICAL"}) == expected

    def test_env_then_default(self):
        assert resolve_level(env={"NUGETSTEP_LOG_LEVEL": "INFO"}) == "INFO"
        assert resolve_level(env={"NUGETSTEP_LOG_LEVEL": ""}) == "WARNING"
        assert resolve_level(env={}) == "WARNING"

    def test_configure_from_cli_reads_file_env(self, tmp_path: Path):
        log_file = tmp_path / "step.log"
        configure_from_cli(env={"NUGETSTEP_LOG_FILE": str(log_file), "NUGETSTEP_LOG_FILE_LEVEL": "DEBUG"})
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert any(isinstance(h, logging.FileHandler) for h in root.handlers)


class TestBuildListener:
    def test_prefixes(self):
        stream = io.StringIO()
        listener = BuildListener(stream)
        listener.info("hello")
        listener.error("bad")
        listener.fatal_error("worse")
        assert stream.getvalue() == "hello\nERROR: bad\nFATAL: worse\n"

    def test_write_strips_line_endings(self):
        stream = io.StringIO()
        BuildListener(stream).write("line\r\n")
        assert stream.getvalue() == "line\n"
