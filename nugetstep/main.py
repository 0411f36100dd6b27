"""
nugetstep — CLI entrypoint.

Usage:
    python -m nugetstep.main --help
    python -m nugetstep.main run --command restore --file MySolution.sln
    python -m nugetstep.main installations list
    python -m nugetstep.main config check
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from nugetstep import __version__
from nugetstep.core.observability.logging_config import configure_from_cli


def _parse_vars(ctx: click.Context, param: click.Parameter, values: tuple[str, ...]) -> dict[str, str]:
    """Turn repeated KEY=VALUE options into a mapping."""
    parsed: dict[str, str] = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got {item!r}", ctx=ctx, param=param)
        parsed[key] = value
    return parsed


@click.group()
@click.version_option(version=__version__, prog_name="nugetstep")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to nugetstep.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """nugetstep — run NuGet as a build step."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    configure_from_cli(debug=debug, verbose=verbose, quiet=quiet)


# ── Run ─────────────────────────────────────────────────────────


@cli.command()
@click.option("--installation", "installation_name", default=None, help="Installation name (default: nuget.exe on PATH).")
@click.option("--command", "nuget_command", default="install", show_default=True, help="NuGet command (install, update, restore, ...).")
@click.option("--file", "target_file", default="", help="Package, project or solution file.")
@click.option("--args", "extra_args", default="", help="Additional command line arguments.")
@click.option(
    "--module-root",
    type=click.Path(file_okay=False),
    default=".",
    show_default=True,
    help="Directory to run in.",
)
@click.option(
    "--workspace",
    type=click.Path(file_okay=False),
    default=None,
    help="Fallback directory when --file is not found under --module-root.",
)
@click.option("--var", "build_variables", multiple=True, callback=_parse_vars, help="Build variable KEY=VALUE (repeatable).")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Print the result as JSON.")
@click.pass_context
def run(
    ctx: click.Context,
    installation_name: str | None,
    nuget_command: str,
    target_file: str,
    extra_args: str,
    module_root: str,
    workspace: str | None,
    build_variables: dict[str, str],
    as_json: bool,
) -> None:
    """Run a NuGet command as a build step."""
    from nugetstep.core.models.build import BuildContext, BuildStepConfig
    from nugetstep.core.services.listener import BuildListener
    from nugetstep.core.use_cases.run import run_step

    step = BuildStepConfig(
        installation_name=installation_name,
        command=nuget_command,
        target_file=target_file,
        extra_args=extra_args,
    )
    context = BuildContext(
        build_variables=build_variables,
        module_root=module_root,
        workspace=workspace,
    )
    # Keep stdout clean for the JSON document
    listener = BuildListener(sys.stderr) if as_json else BuildListener()

    result = run_step(step, context, config_path=ctx.obj.get("config_path"), listener=listener)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(result.exit_code)

    if result.ok:
        if not ctx.obj.get("quiet", False):
            click.secho("✅ NuGet step succeeded", fg="green")
    elif result.error:
        click.secho(f"❌ {result.error}", fg="red")
    else:
        click.secho(f"❌ NuGet exited with code {result.exit_code}", fg="red")

    sys.exit(result.exit_code)


# ── Installations ───────────────────────────────────────────────


def _resolve_config_path(ctx: click.Context) -> Path:
    """Config path from --config, auto-detection, or ./nugetstep.yml."""
    from nugetstep.core.config.loader import CONFIG_FILE, find_config_file

    config_path: Path | None = ctx.obj.get("config_path") or find_config_file()
    return config_path or Path.cwd() / CONFIG_FILE


def _open_store(ctx: click.Context):
    from nugetstep.core.config.loader import ConfigError
    from nugetstep.core.services.installations import InstallationStore

    config_path = _resolve_config_path(ctx)
    if not config_path.exists():
        return InstallationStore(on_change=_saver(config_path)), config_path
    try:
        return InstallationStore.from_file(config_path), config_path
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)


def _saver(path: Path):
    from nugetstep.core.config.loader import save_config

    return lambda store: save_config(store.to_config(), path)


@cli.group()
def installations() -> None:
    """Installations — list, add, remove NuGet executables."""


@installations.command("list")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def installations_list(ctx: click.Context, as_json: bool) -> None:
    """List configured installations."""
    store, config_path = _open_store(ctx)

    if as_json:
        data = [i.model_dump(mode="json") for i in store.installations]
        click.echo(json.dumps(data, indent=2))
        return

    if not store.installations:
        click.secho("⚠️  No installations configured — steps use nuget.exe from PATH", fg="yellow")
        return

    click.secho(f"📦 Installations ({config_path}):", fg="cyan", bold=True)
    for inst in store.installations:
        defaults = f"  [{inst.default_args}]" if inst.default_args else ""
        click.echo(f"   • {inst.name:<20} {inst.home}{defaults}")


@installations.command("add")
@click.argument("name")
@click.option("--home", required=True, help="Path to nuget.exe (macros allowed).")
@click.option("--default-args", default=None, help="Arguments appended to every command.")
@click.pass_context
def installations_add(ctx: click.Context, name: str, home: str, default_args: str | None) -> None:
    """Add or replace an installation."""
    from nugetstep.core.models.installation import Installation

    store, config_path = _open_store(ctx)
    replacing = store.resolve(name) is not None
    store.add(Installation(name=name, home=home, default_args=default_args))
    verb = "Updated" if replacing else "Added"
    click.secho(f"✅ {verb} installation '{name}' in {config_path}", fg="green")


@installations.command("remove")
@click.argument("name")
@click.pass_context
def installations_remove(ctx: click.Context, name: str) -> None:
    """Remove an installation."""
    store, config_path = _open_store(ctx)
    if not store.remove(name):
        click.secho(f"❌ No installation named '{name}'", fg="red")
        sys.exit(1)
    click.secho(f"✅ Removed installation '{name}' from {config_path}", fg="green")


# ── Config ──────────────────────────────────────────────────────


@cli.group()
def config() -> None:
    """Configuration commands."""


@config.command("check")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def config_check(ctx: click.Context, as_json: bool) -> None:
    """Validate nugetstep.yml."""
    from nugetstep.core.use_cases.config_check import check_config

    result = check_config(config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.valid else 1)

    if result.valid:
        assert result.config is not None  # guaranteed when valid
        click.secho("✅ Configuration is valid", fg="green", bold=True)
        click.echo(f"   Installations: {len(result.config.installations)}")
        click.echo(f"   Node: {result.config.node.name}")
    else:
        click.secho("❌ Configuration errors:", fg="red", bold=True)
        for err in result.errors:
            click.echo(f"   • {err}")

    if result.warnings:
        click.echo()
        click.secho("⚠️  Warnings:", fg="yellow")
        for warn in result.warnings:
            click.echo(f"   • {warn}")

    if not result.valid:
        sys.exit(1)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
