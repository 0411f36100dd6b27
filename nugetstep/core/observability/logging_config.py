"""
Logging configuration for the nugetstep CLI.

``configure_from_cli`` is called once by the root command in main.py;
modules only do ``logger = logging.getLogger(__name__)``.

Console level precedence:
    --debug > --verbose > --quiet > NUGETSTEP_LOG_LEVEL > WARNING

A log file is opt-in through NUGETSTEP_LOG_FILE, with its own level in
NUGETSTEP_LOG_FILE_LEVEL. At DEBUG the file also carries the step log
(runner messages and tool output) that the listener prints.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping

ENV_LEVEL = "NUGETSTEP_LOG_LEVEL"
ENV_FILE = "NUGETSTEP_LOG_FILE"
ENV_FILE_LEVEL = "NUGETSTEP_LOG_FILE_LEVEL"

# (threshold, format, datefmt): first row whose threshold >= level wins
_CONSOLE_LAYOUTS = (
    (logging.DEBUG, "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d  %(message)s", "%H:%M:%S"),
    (logging.INFO, "%(asctime)s [%(name)s] %(message)s", "%H:%M:%S"),
)
_CONSOLE_PLAIN = "%(message)s"

_FILE_LAYOUT = ("%(asctime)s %(levelname)-5s %(name)s:%(lineno)d  %(message)s", "%Y-%m-%d %H:%M:%S")

# Already echoed to stdout by BuildListener
_STEP_LOG_LOGGER = "nugetstep.core.services.listener"


class _SkipLogger(logging.Filter):
    def __init__(self, name: str):
        super().__init__()
        self._skip = name

    def filter(self, record: logging.LogRecord) -> bool:
        return record.name != self._skip


def resolve_level(
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    env: Mapping[str, str] | None = None,
) -> str:
    """Pick the console level name from CLI flags, then the environment."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    env = os.environ if env is None else env
    return env.get(ENV_LEVEL) or "WARNING"


def configure_from_cli(
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    env: Mapping[str, str] | None = None,
) -> None:
    env = os.environ if env is None else env
    setup_logging(
        level=resolve_level(debug, verbose, quiet, env),
        log_file=env.get(ENV_FILE),
        log_file_level=env.get(ENV_FILE_LEVEL),
    )


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Replace the root logger's handlers with a console handler and an optional file.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path to a log file.
        log_file_level: Level for the log file; defaults to ``level``.
    """
    console_level = _parse_level(level)
    handlers: list[logging.Handler] = [_console_handler(console_level)]
    root_level = console_level

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        handlers.append(_file_handler(log_file, file_level))
        root_level = min(root_level, file_level)

    root = logging.getLogger()
    root.handlers.clear()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(root_level)

    logging.raiseExceptions = False


def _console_handler(level: int) -> logging.Handler:
    fmt, datefmt = _CONSOLE_PLAIN, None
    for threshold, layout_fmt, layout_datefmt in _CONSOLE_LAYOUTS:
        if level <= threshold:
            fmt, datefmt = layout_fmt, layout_datefmt
            break

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    handler.addFilter(_SkipLogger(_STEP_LOG_LOGGER))
    return handler


def _file_handler(path: str, level: int) -> logging.Handler:
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(*_FILE_LAYOUT))
    return handler


def _parse_level(level: str | None) -> int:
    """Level name to its numeric value; unknown names fall back to WARNING."""
    if not level:
        return logging.WARNING
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.WARNING
    return numeric
