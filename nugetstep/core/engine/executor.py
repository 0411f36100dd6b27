"""
Command executor — turn a build step configuration into a NuGet run.

One invocation is a straight line:
    resolve → validate → build args → select dir → launch → await → report

Nothing is kept between invocations. Expected failures (missing
executable, launch errors, non-zero exits) are reported to the
listener and returned as a failed StepOutcome. Node translation
errors propagate to the caller.
"""

from __future__ import annotations

import logging
import os
import traceback

from nugetstep.adapters.base import BuildInterrupted, Launcher
from nugetstep.core.models.build import BuildContext, BuildStepConfig, StepOutcome
from nugetstep.core.models.installation import Installation, Node
from nugetstep.core.services.installations import InstallationStore
from nugetstep.core.services.listener import BuildListener
from nugetstep.core.services.macros import format_command, normalize, tokenize

logger = logging.getLogger(__name__)

# Used when no installation is configured; found through PATH
DEFAULT_EXECUTABLE = "nuget.exe"


def normalize_target_file(config: BuildStepConfig, context: BuildContext) -> str | None:
    """Normalized target file, or None when the step names no file."""
    if config.target_file is None or not config.target_file.strip():
        return None
    return normalize(config.target_file, context.environment, context.build_variables)


def build_arguments(
    executable: str,
    config: BuildStepConfig,
    context: BuildContext,
    installation: Installation | None = None,
    target_file: str | None = None,
) -> list[str]:
    """Build the argument vector, in order:

        executable, command, [target file], extra args..., default args...

    Default arguments come last and are never deduplicated against the
    user's arguments; both end up on the command line.
    """
    args = [executable, config.command]

    if target_file:
        args.append(target_file)

    extra = normalize(config.extra_args or "", context.environment, context.build_variables)
    if extra.strip():
        args.extend(tokenize(extra))

    if installation is not None and installation.default_args is not None:
        args.extend(tokenize(installation.default_args))

    return args


def select_working_dir(
    target_file: str | None,
    context: BuildContext,
    launcher: Launcher,
) -> str:
    """Module root, unless the target file is not found under it.

    Handles checkouts where the module root is a subdirectory but the
    target file is given relative to the workspace.
    """
    cwd = context.module_root
    if target_file is not None and not launcher.path_exists(os.path.join(cwd, target_file)):
        cwd = context.workspace_root
    return cwd


def wrap_for_windows(args: list[str]) -> list[str]:
    """Run through cmd.exe and exit with the tool's own exit code."""
    return ["cmd.exe", "/C", *args, "&&", "exit", "%ERRORLEVEL%"]


class CommandExecutor:
    """Execute NuGet build steps through a launcher.

    Args:
        launcher: Where processes run and paths are checked.
        listener: Where the step log goes.
        store: Configured installations. None means every step uses
            the bare executable on PATH.
        node: The node the step runs on (default: the store's node).
    """

    def __init__(
        self,
        launcher: Launcher,
        listener: BuildListener,
        store: InstallationStore | None = None,
        node: Node | None = None,
    ):
        self.launcher = launcher
        self.listener = listener
        self.store = store or InstallationStore()
        self.node = node or self.store.node

    def execute(self, config: BuildStepConfig, context: BuildContext) -> bool:
        """Run the step. True iff the tool exited with code 0."""
        return self.perform(config, context).success

    def perform(self, config: BuildStepConfig, context: BuildContext) -> StepOutcome:
        """Run the step and return the full outcome.

        Raises:
            OSError, BuildInterrupted: if translating the installation
                for the node fails.
        """
        listener = self.listener

        # ── Resolve ──────────────────────────────────────────────
        installation = self.store.resolve(config.installation_name)

        if installation is None:
            executable = DEFAULT_EXECUTABLE
        else:
            installation = installation.for_node(self.node, listener)
            installation = installation.for_environment(context.build_environment())
            executable = installation.home

            # ── Validate ─────────────────────────────────────────
            try:
                exists = self.launcher.file_exists(executable)
            except OSError as e:
                logger.debug("Existence check for %s failed", executable, exc_info=True)
                message = f"Failed checking for existence of {executable}"
                listener.fatal_error(message)
                return StepOutcome(error=f"{message}: {e}")
            if not exists:
                message = f"{executable} doesn't exist"
                listener.fatal_error(message)
                return StepOutcome(error=message)

        listener.info(f"Path To NuGet.exe: {executable}")

        # ── Build args ───────────────────────────────────────────
        target_file = normalize_target_file(config, context)
        args = build_arguments(executable, config, context, installation, target_file)

        # ── Select dir ───────────────────────────────────────────
        cwd = select_working_dir(target_file, context, self.launcher)

        if not self.launcher.is_unix:
            args = wrap_for_windows(args)

        # ── Launch / await ───────────────────────────────────────
        listener.info(f"Executing the command {format_command(args)} from {cwd}")
        try:
            code = self.launcher.launch(args, context.build_environment(), cwd, listener)
        except BuildInterrupted as e:
            listener.fatal_error(str(e))
            context.result = "ABORTED"
            return StepOutcome(args=args, working_dir=cwd, error=str(e))
        except OSError as e:
            self._display_launch_error(e, installation)
            context.result = "FAILURE"
            return StepOutcome(args=args, working_dir=cwd, error=f"Command execution failed: {e}")

        # ── Report ───────────────────────────────────────────────
        logger.info("%s %s exited with code %d", executable, config.command, code)
        return StepOutcome(success=code == 0, exit_code=code, args=args, working_dir=cwd)

    def _display_launch_error(self, error: OSError, installation: Installation | None) -> None:
        listener = self.listener
        listener.error(f"Command execution failed: {error}")
        for line in traceback.format_exception(type(error), error, error.__traceback__):
            for part in line.rstrip("\n").splitlines():
                listener.write(part)
        if isinstance(error, FileNotFoundError) and installation is None:
            listener.info(
                f"Hint: {DEFAULT_EXECUTABLE} was not found on PATH. "
                "Configure an installation with 'nugetstep installations add'."
            )
