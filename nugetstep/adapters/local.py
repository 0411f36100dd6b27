"""
Local launcher — run processes on this machine.

This is the only place where the build step's child process is
started. Output is streamed line by line while the process runs.
"""

from __future__ import annotations

import logging
import os
import subprocess
import time
from collections.abc import Mapping
from pathlib import Path

from nugetstep.adapters.base import BuildInterrupted, Launcher
from nugetstep.core.services.listener import BuildListener

logger = logging.getLogger(__name__)


class LocalLauncher(Launcher):
    """Launch processes on the host running nugetstep.

    Args:
        is_unix: Override platform detection (default: ``os.name != "nt"``).
    """

    def __init__(self, is_unix: bool | None = None):
        self._is_unix = (os.name != "nt") if is_unix is None else is_unix

    @property
    def is_unix(self) -> bool:
        return self._is_unix

    def file_exists(self, path: str) -> bool:
        return Path(path).is_file()

    def path_exists(self, path: str) -> bool:
        return Path(path).exists()

    def launch(
        self,
        args: list[str],
        env: Mapping[str, str],
        cwd: str,
        listener: BuildListener,
    ) -> int:
        logger.debug("Launching: %s (cwd=%s)", args, cwd)
        start = time.monotonic()

        proc = subprocess.Popen(
            args,
            cwd=cwd,
            env=dict(env),
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            errors="replace",
            bufsize=1,
        )
        try:
            assert proc.stdout is not None
            with proc.stdout:
                for line in proc.stdout:
                    listener.write(line)
            code = proc.wait()
        except BaseException as e:
            logger.warning("Stopped reading %s output, killing pid %s", args[0], proc.pid)
            proc.kill()
            proc.wait()
            if isinstance(e, KeyboardInterrupt):
                raise BuildInterrupted(f"Interrupted while waiting for {args[0]}") from e
            raise

        elapsed_ms = int((time.monotonic() - start) * 1000)
        logger.debug("Process exited with %s after %dms", code, elapsed_ms)
        return code
