import pytest
from typer.testing import CliRunner

from meow.cli.main import cli_app

runner = CliRunner()


def test_cli_app_exists():
    """Verify that the CLI app instance is available."""
    assert cli_app is not None


# --- Valid Commands ---
@pytest.mark.parametrize("command, expected_output_substring", [
    (["--help"], "install"),
    (["install", "--help"], "--dry-run"),
    (["install", "--help"], "--reinstall"),
    (["start", "--help"], "--no-pull"),
    (["stop", "--help"], "Usage"),
    (["remove", "--help"], "Usage"),
    (["version", "--help"], "Usage"),
])
def test_valid_commands_help_output(command, expected_output_substring):
    result = runner.invoke(cli_app, command)
    assert result.exit_code == 0
    assert expected_output_substring in result.output


@pytest.mark.parametrize("flag", ["--config", "--verbose", "--quiet", "--json"])
def test_global_flags_are_documented(flag):
    result = runner.invoke(cli_app, ["--help"])
    assert flag in result.output


# --- Invalid Commands ---
@pytest.mark.parametrize("command", [
    ["nonexistent-command"],
    ["install", "extra-arg"],
    ["--invalid-global-flag", "install"],
])
def test_invalid_commands_fail_loudly(command):
    result = runner.invoke(cli_app, command)
    assert result.exit_code != 0


# --- Flag validation ---
@pytest.mark.parametrize("flags", [["-v", "-q"], ["--verbose", "--quiet"], ["-q", "--verbose"]])
def test_verbose_and_quiet_conflict_before_any_work(mocker, flags):
    load_settings = mocker.patch("meow.cli.main.load_settings")
    installer_cls = mocker.patch("meow.cli.commands.install.Installer")
    downloader_cls = mocker.patch("meow.cli.commands.install.Downloader")

    result = runner.invoke(cli_app, [*flags, "install"])

    assert result.exit_code == 1
    assert "incompatible" in result.output
    load_settings.assert_not_called()
    installer_cls.assert_not_called()
    downloader_cls.assert_not_called()


def test_missing_config_file_exits_with_error(tmp_path):
    result = runner.invoke(cli_app, ["--config", str(tmp_path / "missing.yaml"), "version"])

    assert result.exit_code == 1
    assert "Config file not found" in result.output


def test_version_command():
    result = runner.invoke(cli_app, ["version"])

    assert result.exit_code == 0
    assert result.output.startswith("meow version ")
