"""Tests for the root elabfront group."""

import pytest
from click.testing import CliRunner

from elabfront import __version__
from elabfront.cli import cli


class TestRootGroup:
    def test_help_lists_commands(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        for name in ("run", "parse", "--json", "--config"):
            assert name in result.output

    def test_version(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert result.output.strip() == f"elabfront, version {__version__}"

    def test_bare_invocation_prints_help(self, cli_runner: CliRunner, isolated_cwd) -> None:
        result = cli_runner.invoke(cli, [])
        assert result.exit_code == 0
        assert "Usage" in result.output

    def test_examples(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--examples"])
        assert result.exit_code == 0
        assert "elabfront run Main.lean" in result.output


@pytest.mark.parametrize(
    "flags",
    [["--json"], ["-q"], ["--quiet"], ["-v"], ["--log-json"], ["-c", "/tmp/elabfront-absent.toml"]],
)
def test_global_flags_parse(cli_runner: CliRunner, flags: list[str]) -> None:
    # --version is eager, so settings are never built here
    result = cli_runner.invoke(cli, [*flags, "--version"])
    assert result.exit_code == 0


def test_missing_config_file_is_an_error(cli_runner: CliRunner, isolated_cwd) -> None:
    result = cli_runner.invoke(cli, ["-c", str(isolated_cwd / "nope.toml"), "parse", "-"], input="")
    assert result.exit_code == 1
    assert "Config file not found" in result.output


def test_invalid_toml_is_an_error(cli_runner: CliRunner, isolated_cwd) -> None:
    (isolated_cwd / "elabfront.toml").write_text("[frontend\n", encoding="utf-8")
    result = cli_runner.invoke(cli, ["parse", "-"], input="")
    assert result.exit_code == 1
    assert "Invalid TOML" in result.output
