"""Tests for the top-level rustup-mirror CLI (version, help)."""

from click.testing import CliRunner

from rustup_mirror.cli import cli


class TestCliVersionFlag:
    """--version prints just the version number."""

    def test_prints_version_number(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "rustup-mirror" not in result.output
        assert result.output.strip() != ""


class TestCliVersionSubcommand:
    """rustup-mirror version prints just the version number."""

    def test_same_as_flag(self):
        runner = CliRunner()
        flag_result = runner.invoke(cli, ["--version"])
        cmd_result = runner.invoke(cli, ["version"])
        assert cmd_result.exit_code == 0
        assert flag_result.output.strip() == cmd_result.output.strip()


class TestCliHelp:
    """Help output and the hidden help subcommand."""

    def test_help_subcommand(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["help"])
        assert result.exit_code == 0
        assert "<command> --help" in result.output

    def test_short_help_flag_lists_commands(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["-h"])
        assert result.exit_code == 0
        for command in ("sync", "gc", "status", "version"):
            assert command in result.output
