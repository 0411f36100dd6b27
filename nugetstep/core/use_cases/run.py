"""
Run use case — execute one NuGet build step end to end.

Loads the installation store, builds the executor and runs the step.
Every failure, including the ones the executor lets propagate, is
turned into a RunResult so the CLI only has to map it to output and
an exit code.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from nugetstep.adapters.base import BuildInterrupted, Launcher
from nugetstep.core.config.loader import ConfigError, find_config_file
from nugetstep.core.engine.executor import CommandExecutor
from nugetstep.core.models.build import BuildContext, BuildStepConfig, StepOutcome
from nugetstep.core.services.installations import InstallationStore
from nugetstep.core.services.listener import BuildListener

logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    """Result of running a build step."""

    outcome: StepOutcome | None = None
    config_path: Path | None = None
    build_result: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.outcome is not None and self.outcome.success

    @property
    def exit_code(self) -> int:
        """The tool's exit code, or 1 when it never ran to completion.

        A tool killed by signal N reports 128 + N, as a shell would.
        """
        if self.outcome is not None and self.outcome.exit_code is not None:
            code = self.outcome.exit_code
            return 128 - code if code < 0 else code
        return 0 if self.ok else 1

    def to_dict(self) -> dict:
        result: dict = {
            "ok": self.ok,
            "exit_code": self.exit_code,
            "config_path": str(self.config_path) if self.config_path else None,
            "build_result": self.build_result,
        }
        if self.error:
            result["error"] = self.error
        if self.outcome is not None:
            result["outcome"] = self.outcome.to_dict()
        return result


def load_store(config_path: Path | None = None) -> tuple[InstallationStore, Path | None]:
    """Build the installation store from a config file.

    Without an explicit path the file is searched for upward; if none is
    found the store is empty.

    Raises:
        ConfigError: If the file is missing or invalid.
    """
    if config_path is None:
        config_path = find_config_file()
    if config_path is None:
        return InstallationStore(), None
    return InstallationStore.from_file(config_path), config_path


def run_step(
    step: BuildStepConfig,
    context: BuildContext,
    config_path: Path | None = None,
    launcher: Launcher | None = None,
    listener: BuildListener | None = None,
    store: InstallationStore | None = None,
) -> RunResult:
    """Run one NuGet build step.

    Args:
        step: What to run.
        context: Environment, build variables and directories.
        config_path: Optional explicit path to nugetstep.yml.
        launcher: Where to run (default: this machine).
        listener: Where the step log goes (default: stdout).
        store: Pre-built installation store; skips config loading.

    Returns:
        RunResult with the step outcome.
    """
    result = RunResult()

    if store is None:
        try:
            store, result.config_path = load_store(config_path)
        except ConfigError as e:
            result.error = str(e)
            return result

    if launcher is None:
        from nugetstep.adapters.local import LocalLauncher

        launcher = LocalLauncher()

    listener = listener or BuildListener()
    executor = CommandExecutor(launcher, listener, store=store)

    try:
        outcome = executor.perform(step, context)
    except BuildInterrupted as e:
        listener.fatal_error(str(e))
        context.result = "ABORTED"
        result.error = str(e)
    except OSError as e:
        message = f"Cannot resolve installation '{step.installation_name}': {e}"
        listener.fatal_error(message)
        context.result = "FAILURE"
        result.error = message
    else:
        result.outcome = outcome
        if not outcome.success and outcome.error:
            result.error = outcome.error

    result.build_result = context.result
    logger.info("Step %s finished: ok=%s exit=%s", step.command, result.ok, result.exit_code)
    return result
