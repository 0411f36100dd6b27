"""
Launcher base — the contract between the executor and a machine.

The executor never calls subprocess or the filesystem directly for
the target machine. It asks a launcher, so the same step logic runs
against the local host or a test double.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from nugetstep.core.services.listener import BuildListener


class BuildInterrupted(Exception):
    """The step was interrupted while waiting on the target machine."""


class Launcher(ABC):
    """Abstract base class for process launchers.

    To create a new launcher:
        1. Subclass Launcher
        2. Implement is_unix, file_exists, path_exists, launch
    """

    @property
    @abstractmethod
    def is_unix(self) -> bool:
        """Whether the target machine is Unix-like (False means Windows)."""

    @abstractmethod
    def file_exists(self, path: str) -> bool:
        """Whether ``path`` is an existing regular file on the target.

        May raise ``OSError`` when the check itself fails.
        """

    @abstractmethod
    def path_exists(self, path: str) -> bool:
        """Whether anything exists at ``path`` on the target."""

    @abstractmethod
    def launch(
        self,
        args: list[str],
        env: Mapping[str, str],
        cwd: str,
        listener: BuildListener,
    ) -> int:
        """Run ``args`` to completion and return the exit code.

        Output (stdout and stderr) is streamed to ``listener``. Raises
        ``OSError`` if the process cannot be started and
        ``BuildInterrupted`` if the wait is interrupted.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} unix={self.is_unix!r}>"
