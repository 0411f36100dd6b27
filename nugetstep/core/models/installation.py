"""
Installation and Node models — where the NuGet executable lives.

An Installation is a named record loaded from configuration. It is
never mutated: resolving it for a node or an environment produces a
new record.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, field_validator

from nugetstep.core.services.macros import replace_macro

if TYPE_CHECKING:
    from nugetstep.core.services.listener import BuildListener


class Node(BaseModel):
    """The machine a build step executes on.

    ``tool_locations`` maps an installation name to the path of that
    tool on this node, overriding the installation's own home.
    """

    name: str = "local"
    tool_locations: dict[str, str] = Field(default_factory=dict)

    def translate(self, installation: Installation, listener: BuildListener) -> str:
        """Return the node-local home for ``installation``.

        Subclasses that reach remote machines may block here and
        raise ``OSError`` or ``BuildInterrupted``.
        """
        override = self.tool_locations.get(installation.name)
        if override:
            listener.info(f"Using {installation.name} location on node {self.name}: {override}")
            return override
        return installation.home


class Installation(BaseModel):
    """A named NuGet installation: executable path plus default arguments."""

    model_config = ConfigDict(frozen=True)

    name: str
    home: str = ""
    default_args: str | None = None

    @field_validator("default_args", mode="before")
    @classmethod
    def _fix_empty(cls, value: str | None) -> str | None:
        if value is None or not str(value).strip():
            return None
        return value

    def for_node(self, node: Node, listener: BuildListener) -> Installation:
        """Re-derive this installation for ``node``.

        Must run before ``for_environment``: node translation may rely on
        placeholders that are only meaningful on the remote side.
        """
        return Installation(
            name=self.name,
            home=node.translate(self, listener),
            default_args=self.default_args,
        )

    def for_environment(self, environment: dict[str, str]) -> Installation:
        """Re-derive this installation with macros in ``home`` expanded."""
        return Installation(
            name=self.name,
            home=replace_macro(self.home, environment),
            default_args=self.default_args,
        )


class InstallationsConfig(BaseModel):
    """Root of the configuration file: installations plus the local node."""

    version: int = 2
    installations: list[Installation] = Field(default_factory=list)
    node: Node = Field(default_factory=Node)
