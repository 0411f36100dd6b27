"""
Mock launcher — test double for process launches.

Records every launch instead of starting a process and returns a
configured exit code (or raises a configured error). Filesystem checks
go to the real filesystem, so tests can lay out files in ``tmp_path``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from nugetstep.adapters.base import Launcher
from nugetstep.core.services.listener import BuildListener


@dataclass
class LaunchCall:
    """One recorded launch."""

    args: list[str]
    env: dict[str, str]
    cwd: str


@dataclass
class MockLauncher(Launcher):
    """Launcher that never starts a process.

    Attributes:
        unix: Platform reported by ``is_unix``.
        exit_code: Exit code returned by ``launch``.
        output: Lines written to the listener on each launch.
        launch_error: Raised by ``launch`` instead of returning.
        exists_error: Raised by ``file_exists``.
    """

    unix: bool = True
    exit_code: int = 0
    output: list[str] = field(default_factory=list)
    launch_error: BaseException | None = None
    exists_error: OSError | None = None
    calls: list[LaunchCall] = field(default_factory=list)

    @property
    def is_unix(self) -> bool:
        return self.unix

    @property
    def call_count(self) -> int:
        return len(self.calls)

    @property
    def last_call(self) -> LaunchCall | None:
        return self.calls[-1] if self.calls else None

    def file_exists(self, path: str) -> bool:
        if self.exists_error is not None:
            raise self.exists_error
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
        self.calls.append(LaunchCall(args=list(args), env=dict(env), cwd=cwd))
        if self.launch_error is not None:
            raise self.launch_error
        for line in self.output:
            listener.write(line)
        return self.exit_code

    def reset(self) -> None:
        """Clear the call log."""
        self.calls.clear()
