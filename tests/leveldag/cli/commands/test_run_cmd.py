"""Tests for leveldag.cli.commands.run_cmd module."""

import pytest
from typer.testing import CliRunner

from leveldag.cli.commands.run_cmd import CommandFailedError, run_item_command
from leveldag.cli.main import app
from leveldag.core.domain.traversal import make_item


@pytest.fixture
def runner():
    """Fixture providing a Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def write_items(tmp_path):
    """Fixture writing an item file from (id, depends_on, command) tuples."""

    def write(entries, name="build"):
        lines = [f"name: {name}", "items:"]
        for item_id, deps, command in entries:
            lines.append(f"  - id: {item_id}")
            lines.append(f"    depends_on: [{', '.join(deps)}]")
            if command is not None:
                lines.append("    data:")
                lines.append(f"      command: {command!r}")
        path = tmp_path / f"{name}.yaml"
        path.write_text("\n".join(lines) + "\n")
        return path

    return write


def invoke_run(runner, path, *args):
    return runner.invoke(app, ["--log-level", "error", "run", str(path), *args])


class TestRunItemCommand:
    """Tests for the per-item shell command work function."""

    @pytest.mark.asyncio
    async def test_returns_stdout(self):
        """Command output becomes the return value."""
        item = make_item("a", data={"command": "echo hello"})
        assert (await run_item_command(item)).strip() == "hello"

    @pytest.mark.asyncio
    async def test_item_without_command(self):
        """Items without a command succeed with empty output."""
        assert await run_item_command(make_item("a")) == ""
        assert await run_item_command(make_item("b", data="not a mapping")) == ""

    @pytest.mark.asyncio
    async def test_non_zero_exit_raises(self):
        """A failing command raises with its exit status and last stderr line."""
        item = make_item("a", data={"command": "echo broken >&2; exit 3"})

        with pytest.raises(CommandFailedError) as exc_info:
            await run_item_command(item)

        assert exc_info.value.returncode == 3
        assert exc_info.value.item_id == "a"
        assert "broken" in str(exc_info.value)


class TestRunCommand:
    """Tests for the run CLI command."""

    def test_run_success(self, runner, write_items, isolated_config_env):
        """Every item runs and the summary reports success."""
        marker = isolated_config_env / "marker.txt"
        path = write_items([
            ("first", [], f"echo one > {marker}"),
            ("second", ["first"], f"echo two >> {marker}"),
        ])

        result = invoke_run(runner, path)

        assert result.exit_code == 0
        assert "All items succeeded" in result.output
        assert marker.read_text().split() == ["one", "two"]

    def test_run_fail_fast(self, runner, write_items, isolated_config_env):
        """A failure halts later levels and exits with code 1."""
        marker = isolated_config_env / "never.txt"
        path = write_items([
            ("broken", [], "exit 3"),
            ("after", ["broken"], f"touch {marker}"),
        ])

        result = invoke_run(runner, path)

        assert result.exit_code == 1
        assert "Failed: broken" in result.output
        assert not marker.exists()

    def test_run_continue_on_error(self, runner, write_items, isolated_config_env):
        """--continue-on-error keeps running dependent levels."""
        marker = isolated_config_env / "ran.txt"
        path = write_items([
            ("broken", [], "exit 3"),
            ("after", ["broken"], f"touch {marker}"),
        ])

        result = invoke_run(runner, path, "--continue-on-error")

        assert result.exit_code == 1
        assert marker.exists()
        assert "Failed: broken" in result.output

    def test_run_sequential(self, runner, write_items, isolated_config_env):
        """--sequential runs successfully."""
        path = write_items([("a", [], "true"), ("b", [], "true"), ("c", ["a", "b"], None)])

        result = invoke_run(runner, path, "--sequential")

        assert result.exit_code == 0
        assert "All items succeeded" in result.output

    def test_run_dry_run(self, runner, write_items, isolated_config_env):
        """--dry-run prints the plan and runs nothing."""
        marker = isolated_config_env / "dry.txt"
        path = write_items([("only", [], f"touch {marker}")])

        result = invoke_run(runner, path, "--dry-run")

        assert result.exit_code == 0
        assert "Execution plan for: build" in result.output
        assert "DAG Structure:" in result.output
        assert not marker.exists()

    def test_run_rejects_zero_concurrency(self, runner, write_items, isolated_config_env):
        """Concurrency below one is a usage error."""
        path = write_items([("a", [], "true")])

        result = invoke_run(runner, path, "--concurrency", "0")

        assert result.exit_code != 0

    def test_run_cycle(self, runner, write_items, isolated_config_env):
        """A cyclic item file is rejected before anything runs."""
        path = write_items([("a", ["b"], "true"), ("b", ["a"], "true")])

        result = invoke_run(runner, path)

        assert result.exit_code == 1
        assert "Circular dependency" in result.output

    def test_config_file_disables_fail_fast(self, runner, write_items, isolated_config_env):
        """fail_fast from the configuration file is honoured."""
        (isolated_config_env / "leveldag.toml").write_text("[execution]\nfail_fast = false\n")
        marker = isolated_config_env / "ran.txt"
        path = write_items([
            ("broken", [], "exit 1"),
            ("after", ["broken"], f"touch {marker}"),
        ])

        result = invoke_run(runner, path)

        assert result.exit_code == 1
        assert marker.exists()
