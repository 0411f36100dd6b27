"""
Shared test fixtures and configuration.
"""

import io
from pathlib import Path

import pytest

from nugetstep.adapters.mock import MockLauncher
from nugetstep.core.models.build import BuildContext
from nugetstep.core.services.listener import BuildListener


@pytest.fixture
def log_stream() -> io.StringIO:
    """Buffer that receives the build step log."""
    return io.StringIO()


@pytest.fixture
def listener(log_stream: io.StringIO) -> BuildListener:
    return BuildListener(log_stream)


@pytest.fixture
def launcher() -> MockLauncher:
    return MockLauncher()


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """A job workspace with a module checked out under src/app."""
    (tmp_path / "src" / "app").mkdir(parents=True)
    return tmp_path


@pytest.fixture
def context(workspace: Path) -> BuildContext:
    return BuildContext(
        environment={"PATH": "/usr/bin", "HOME": "/home/build"},
        module_root=str(workspace / "src" / "app"),
        workspace=str(workspace),
    )


@pytest.fixture
def nuget_exe(tmp_path: Path) -> Path:
    """A file standing in for an installed nuget.exe."""
    tools = tmp_path / "tools"
    tools.mkdir()
    exe = tools / "nuget.exe"
    exe.write_text("")
    return exe
