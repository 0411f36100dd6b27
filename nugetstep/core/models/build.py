"""
Build step models — what to run, where, and what happened.

BuildStepConfig is the user's configuration of one step. BuildContext
is the per-invocation world the step sees. StepOutcome is the result.
"""

from __future__ import annotations

import os
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class BuildStepConfig(BaseModel):
    """Configuration of a single NuGet build step. Read-only."""

    model_config = ConfigDict(frozen=True)

    installation_name: str | None = None
    command: str = "install"           # nuget sub-command (install, update, restore, ...)
    target_file: str | None = None     # packages.config, .sln, .csproj ...
    extra_args: str = ""


class BuildContext(BaseModel):
    """Everything a step invocation needs from its surroundings.

    ``result`` starts as None and is only set when the step decides
    the build itself must be marked (launch failure, abort).
    """

    environment: dict[str, str] = Field(default_factory=lambda: dict(os.environ))
    build_variables: dict[str, str] = Field(default_factory=dict)
    module_root: str = "."
    workspace: str | None = None
    result: Literal["FAILURE", "ABORTED"] | None = None

    @property
    def workspace_root(self) -> str:
        """The job's top-level checkout; the module root when unset."""
        return self.workspace or self.module_root

    def build_environment(self) -> dict[str, str]:
        """Process environment overlaid with the build variables."""
        env = dict(self.environment)
        env.update(self.build_variables)
        return env


class StepOutcome(BaseModel):
    """Result of one build step invocation."""

    success: bool = False
    exit_code: int | None = None
    args: list[str] = Field(default_factory=list)
    working_dir: str | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")
