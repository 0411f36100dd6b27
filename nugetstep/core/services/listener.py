"""
Build listener — the output sink of a build step.

Runner messages, child process output and fatal errors all go through
the listener, so a caller decides where a step's log ends up (the
terminal, a file, a buffer in tests).
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

import click

logger = logging.getLogger(__name__)


class BuildListener:
    """Write a build step's log to a text stream.

    Everything written is mirrored to the ``logging`` module at DEBUG,
    so a log file configured via ``setup_logging`` carries the step log.
    """

    def __init__(self, stream: TextIO | None = None):
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def info(self, message: str) -> None:
        """Runner message (executable path, command line)."""
        logger.debug(message)
        click.echo(message, file=self.stream)

    def write(self, line: str) -> None:
        """One line of child process output."""
        line = line.rstrip("\r\n")
        logger.debug("| %s", line)
        click.echo(line, file=self.stream)

    def error(self, message: str) -> None:
        logger.debug("ERROR: %s", message)
        click.echo(f"ERROR: {message}", file=self.stream)

    def fatal_error(self, message: str) -> None:
        """A non-retryable error that ends the step."""
        logger.debug("FATAL: %s", message)
        click.echo(f"FATAL: {message}", file=self.stream)
