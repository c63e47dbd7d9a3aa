"""Unit tests for config command."""

import tomllib

from gitlinks.cli.main import app
from gitlinks.core.paths import get_config_path
from typer.testing import CliRunner

runner = CliRunner()


class TestConfigShow:
    """Tests for gitlinks config show command."""

    def test_defaults(self) -> None:
        """Without a file the defaults are shown."""
        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 0
        assert "npm_executable" in result.stdout
        assert "No config file" in result.stdout

    def test_from_file(self) -> None:
        """Values from the config file are shown."""
        path = get_config_path()
        path.parent.mkdir(parents=True)
        path.write_text('npm_executable = "pnpm"\n')

        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 0
        assert "pnpm" in result.stdout
        assert "Loaded from" in result.stdout


class TestConfigInit:
    """Tests for gitlinks config init command."""

    def test_writes_defaults(self) -> None:
        """init writes a default config file."""
        result = runner.invoke(app, ["config", "init"])

        assert result.exit_code == 0
        assert "Config written to" in result.stdout
        with open(get_config_path(), "rb") as f:
            assert tomllib.load(f)["max_dependency_depth"] == 8

    def test_refuses_to_overwrite(self) -> None:
        """init keeps an existing file unless forced."""
        path = get_config_path()
        path.parent.mkdir(parents=True)
        path.write_text('npm_executable = "pnpm"\n')

        result = runner.invoke(app, ["config", "init"])

        assert result.exit_code == 1
        assert "already exists" in result.output
        assert "pnpm" in path.read_text()

    def test_force_overwrites(self) -> None:
        """init --force replaces an existing file."""
        path = get_config_path()
        path.parent.mkdir(parents=True)
        path.write_text('npm_executable = "pnpm"\n')

        result = runner.invoke(app, ["config", "init", "--force"])

        assert result.exit_code == 0
        assert "pnpm" not in path.read_text()
