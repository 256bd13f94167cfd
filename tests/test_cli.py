"""Tests for CLI commands."""

from pathlib import Path

import pytest

from vaultsync.__main__ import parse_args
from vaultsync.cli.account import run_projects, run_verify
from vaultsync.cli.settings import run_config
from vaultsync.cli.sync import run_sync
from vaultsync.cli.task import run_create
from vaultsync.services import ConfigService


@pytest.fixture(autouse=True)
def no_env_token(monkeypatch):
    """Keep a developer's real token out of the tests."""
    monkeypatch.delenv("TODOIST_API_TOKEN", raising=False)


class TestParseArgs:
    """Tests for argument parsing."""

    def test_global_options(self):
        """Vault and verbosity are parsed before the command."""
        args = parse_args(["--vault", "/tmp/v", "-vv", "sync"])

        assert args.vault == Path("/tmp/v")
        assert args.verbose == 2
        assert args.command == "sync"

    def test_create(self):
        """create takes a file and a line number."""
        args = parse_args(["create", "daily/today.md", "12"])

        assert args.file == "daily/today.md"
        assert args.line == 12

    def test_config_options(self):
        """config options map onto setting names."""
        args = parse_args(["config", "--marker", "work", "--policy", "ask", "--interval", "0"])

        assert args.sync_marker == "work"
        assert args.conflict_policy == "ask"
        assert args.sync_interval_minutes == 0
        assert args.api_token is None

    def test_invalid_policy(self):
        """Unknown policies are rejected by argparse."""
        with pytest.raises(SystemExit):
            parse_args(["config", "--policy", "coin-flip"])

    def test_command_required(self):
        """A command must be given."""
        with pytest.raises(SystemExit):
            parse_args([])


class TestRunConfig:
    """Tests for the config command."""

    def test_show_defaults(self, vault: Path, capsys):
        """Without changes the effective settings are printed."""
        assert run_config(vault, {}) == 0

        out = capsys.readouterr().out
        assert "sync_marker: #todoist" in out
        assert "conflict_policy: remote-wins" in out
        assert not (vault / ConfigService.CONFIG_FILE).exists()

    def test_apply_changes(self, vault: Path):
        """Changes are validated and saved."""
        assert run_config(vault, {"sync_marker": "work", "conflict_policy": "ask"}) == 0

        config = ConfigService(vault).get_config()
        assert config.sync_marker == "#work"
        assert config.conflict_policy.value == "ask"

    def test_invalid_change(self, vault: Path, capsys):
        """Invalid values fail with exit code 1."""
        assert run_config(vault, {"sync_interval_minutes": -1}) == 1
        assert "Invalid setting" in capsys.readouterr().err

    def test_broken_config_file(self, vault: Path):
        """A broken config file is not overwritten."""
        (vault / ConfigService.CONFIG_FILE).write_text("api_token: [unclosed\n")

        assert run_config(vault, {"sync_marker": "work"}) == 1
        assert (vault / ConfigService.CONFIG_FILE).read_text() == "api_token: [unclosed\n"


class TestCommandsWithoutToken:
    """Commands that need Todoist fail cleanly without a token."""

    def test_sync(self, vault: Path, capsys):
        """sync reports the missing token and still saves state."""
        (vault / "todo.md").write_text("- [ ] Call mom #todoist\n")

        assert run_sync(vault) == 1

        assert "not configured" in capsys.readouterr().err
        assert (vault / "todo.md").read_text() == "- [ ] Call mom #todoist\n"
        assert (vault / ConfigService.CONFIG_FILE).exists()

    def test_create(self, vault: Path, capsys):
        """create reports the missing token without touching the line."""
        (vault / "todo.md").write_text("Buy eggs\n")

        assert run_create(vault, "todo.md", 1) == 1

        assert "not configured" in capsys.readouterr().err
        assert (vault / "todo.md").read_text() == "Buy eggs\n"

    def test_create_bad_line_number(self, vault: Path):
        """Line numbers outside the document are refused."""
        (vault / "todo.md").write_text("Buy eggs")

        assert run_create(vault, "todo.md", 0) == 1
        assert run_create(vault, "todo.md", 5) == 1

    def test_create_missing_file(self, vault: Path, capsys):
        """A missing document is reported."""
        assert run_create(vault, "missing.md", 1) == 1
        assert "Cannot read" in capsys.readouterr().err

    def test_verify(self, vault: Path):
        """verify fails without a token."""
        assert run_verify(vault) == 1

    def test_projects(self, vault: Path):
        """projects fails without a token."""
        assert run_projects(vault) == 1
