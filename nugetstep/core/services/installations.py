"""
Installation store — the configured NuGet installations.

The store is an explicitly-owned object: whoever loads the
configuration builds a store and hands it to the executor. It is
read-only while steps execute; edits replace the whole tuple so
readers never observe a half-updated list.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from nugetstep.core.models.installation import Installation, InstallationsConfig, Node

logger = logging.getLogger(__name__)


class InstallationStore:
    """Named installations with first-match lookup.

    Args:
        installations: Initial installation records.
        node: The node this process executes on.
        on_change: Called with the store after every edit. The config
            loader uses it to persist the file.
    """

    def __init__(
        self,
        installations: list[Installation] | tuple[Installation, ...] = (),
        node: Node | None = None,
        on_change: Callable[[InstallationStore], None] | None = None,
    ):
        self._installations: tuple[Installation, ...] = tuple(installations)
        self.node = node or Node()
        self._on_change = on_change

    @classmethod
    def from_file(cls, path: Path) -> InstallationStore:
        """Load a store from a config file; edits are saved back to it."""
        from nugetstep.core.config.loader import load_config, save_config

        config = load_config(path)
        return cls(
            config.installations,
            node=config.node,
            on_change=lambda store: save_config(store.to_config(), path),
        )

    @property
    def installations(self) -> tuple[Installation, ...]:
        return self._installations

    def resolve(self, name: str | None) -> Installation | None:
        """Return the first installation called ``name`` (case-sensitive).

        None means "not found": the caller falls back to the bare
        executable on PATH.
        """
        if name is None:
            return None
        for installation in self._installations:
            if installation.name == name:
                return installation
        logger.debug("No installation named %r", name)
        return None

    def list_names(self) -> list[str]:
        return [i.name for i in self._installations]

    def set_installations(self, *installations: Installation) -> None:
        """Replace the whole list and persist it."""
        self._installations = tuple(installations)
        if self._on_change is not None:
            self._on_change(self)

    def add(self, installation: Installation) -> None:
        """Add an installation, replacing any existing one with the same name."""
        kept = [i for i in self._installations if i.name != installation.name]
        if len(kept) != len(self._installations):
            logger.warning("Overwriting existing installation: %s", installation.name)
        self.set_installations(*kept, installation)

    def remove(self, name: str) -> bool:
        """Remove an installation by name. Returns False if it was not there."""
        kept = [i for i in self._installations if i.name != name]
        if len(kept) == len(self._installations):
            return False
        self.set_installations(*kept)
        return True

    def to_config(self) -> InstallationsConfig:
        return InstallationsConfig(installations=list(self._installations), node=self.node)
