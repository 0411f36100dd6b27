"""Adapters — how build steps reach the machine they run on.

Public re-exports for convenient access.
"""

from nugetstep.adapters.base import BuildInterrupted, Launcher
from nugetstep.adapters.local import LocalLauncher
from nugetstep.adapters.mock import MockLauncher

__all__ = [
    "BuildInterrupted",
    "Launcher",
    "LocalLauncher",
    "MockLauncher",
]
