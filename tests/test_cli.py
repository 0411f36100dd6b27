"""
Tests for CLI commands — run, installations, config check, global options.
"""

import json
import os
import stat
import textwrap
from pathlib import Path

import pytest
import yaml
from click.testing import CliRunner

from nugetstep.main import cli

unix_only = pytest.mark.skipif(os.name == "nt", reason="uses a shell script as nuget.exe")


def _fake_nuget(tmp_path: Path, exit_code: int = 0, last_line: str | None = None) -> Path:
    """A script that echoes its arguments and exits with ``exit_code``."""
    last_line = last_line or f"exit {exit_code}"
    script = tmp_path / "bin" / "nuget.exe"
    script.parent.mkdir(exist_ok=True)
    script.write_text(textwrap.dedent(f"""\
        #!/bin/sh
        echo "fake-nuget $@"
        {last_line}
    """))
    script.chmod(script.stat().st_mode | stat.S_IXUSR)
    return script


def _config(tmp_path: Path, *records: dict) -> Path:
    path = tmp_path / "nugetstep.yml"
    path.write_text(yaml.safe_dump({"version": 2, "installations": list(records)}))
    return path


class TestCLIGlobal:
    def test_help(self):
        result = CliRunner().invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "run NuGet as a build step" in result.output

    def test_version(self):
        result = CliRunner().invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output


class TestRunCommand:
    @unix_only
    def test_success(self, tmp_path: Path):
        exe = _fake_nuget(tmp_path)
        config = _config(tmp_path, {"name": "fake", "home": str(exe), "default_args": "-NonInteractive"})
        result = CliRunner().invoke(cli, [
            "--config", str(config), "run",
            "--installation", "fake",
            "--command", "install",
            "--args", "MyPackage -Version $VER",
            "--var", "VER=1.0",
            "--module-root", str(tmp_path),
        ])
        assert result.exit_code == 0, result.output
        assert "fake-nuget install MyPackage -Version 1.0 -NonInteractive" in result.output
        assert "NuGet step succeeded" in result.output

    @unix_only
    def test_exit_code_mirrored(self, tmp_path: Path):
        exe = _fake_nuget(tmp_path, exit_code=3)
        config = _config(tmp_path, {"name": "fake", "home": str(exe)})
        result = CliRunner().invoke(cli, [
            "--config", str(config), "run", "--installation", "fake", "--module-root", str(tmp_path),
        ])
        assert result.exit_code == 3
        assert "exited with code 3" in result.output

    @unix_only
    def test_killed_tool_exits_like_a_shell(self, tmp_path: Path):
        exe = _fake_nuget(tmp_path, last_line="kill -9 $$")
        config = _config(tmp_path, {"name": "fake", "home": str(exe)})
        result = CliRunner().invoke(cli, [
            "--config", str(config), "run", "--installation", "fake", "--module-root", str(tmp_path), "--json",
        ])
        assert result.exit_code == 137

    def test_missing_executable(self, tmp_path: Path):
        config = _config(tmp_path, {"name": "gone", "home": str(tmp_path / "gone.exe")})
        result = CliRunner().invoke(cli, [
            "--config", str(config), "run", "--installation", "gone", "--module-root", str(tmp_path),
        ])
        assert result.exit_code == 1
        assert "doesn't exist" in result.output

    def test_invalid_config(self, tmp_path: Path):
        config = tmp_path / "nugetstep.yml"
        config.write_text("installations: [unclosed")
        result = CliRunner().invoke(cli, ["--config", str(config), "run"])
        assert result.exit_code == 1
        assert "Invalid YAML" in result.output

    def test_bad_var(self, tmp_path: Path):
        result = CliRunner().invoke(cli, ["run", "--var", "NOVALUE"])
        assert result.exit_code == 2
        assert "KEY=VALUE" in result.output


class TestInstallationsCommands:
    def test_add_list_remove(self, tmp_path: Path):
        config = tmp_path / "nugetstep.yml"
        runner = CliRunner()

        result = runner.invoke(cli, [
            "--config", str(config), "installations", "add", "nuget-6",
            "--home", "/opt/nuget.exe", "--default-args", "-NonInteractive",
        ])
        assert result.exit_code == 0, result.output
        assert "Added installation 'nuget-6'" in result.output
        assert config.is_file()

        result = runner.invoke(cli, ["--config", str(config), "installations", "list", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data == [{"name": "nuget-6", "home": "/opt/nuget.exe", "default_args": "-NonInteractive"}]

        result = runner.invoke(cli, ["--config", str(config), "installations", "add", "nuget-6", "--home", "/new"])
        assert "Updated installation 'nuget-6'" in result.output

        result = runner.invoke(cli, ["--config", str(config), "installations", "remove", "nuget-6"])
        assert result.exit_code == 0
        result = runner.invoke(cli, ["--config", str(config), "installations", "list"])
        assert "No installations configured" in result.output

    def test_remove_unknown(self, tmp_path: Path):
        config = _config(tmp_path)
        result = CliRunner().invoke(cli, ["--config", str(config), "installations", "remove", "ghost"])
        assert result.exit_code == 1
        assert "No installation named 'ghost'" in result.output

    def test_list_table(self, tmp_path: Path):
        config = _config(tmp_path, {"name": "nuget-6", "home": "/opt/nuget.exe", "default_args": "-NoCache"})
        result = CliRunner().invoke(cli, ["--config", str(config), "installations", "list"])
        assert result.exit_code == 0
        assert "nuget-6" in result.output
        assert "[-NoCache]" in result.output

    def test_legacy_file_listed(self, tmp_path: Path):
        config = tmp_path / "nugetstep.yml"
        config.write_text("installations:\n  - name: old\n    path_to_nuget: /legacy/nuget.exe\n")
        result = CliRunner().invoke(cli, ["--config", str(config), "installations", "list", "--json"])
        assert json.loads(result.output)[0]["home"] == "/legacy/nuget.exe"


class TestConfigCheckCommand:
    def test_valid(self, tmp_path: Path, nuget_exe: Path):
        config = _config(tmp_path, {"name": "n", "home": str(nuget_exe)})
        result = CliRunner().invoke(cli, ["--config", str(config), "config", "check"])
        assert result.exit_code == 0
        assert "Configuration is valid" in result.output

    def test_invalid_json(self, tmp_path: Path):
        config = _config(tmp_path, {"name": "a", "home": "/x"}, {"name": "a", "home": "/y"})
        result = CliRunner().invoke(cli, ["--config", str(config), "config", "check", "--json"])
        assert result.exit_code == 1
        data = json.loads(result.output)
        assert data["valid"] is False
        assert "Duplicate installation names: a" in data["errors"]
