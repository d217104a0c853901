"""Tests for the db and nodes CLI command groups.

Testing approach:
- Uses Click's CliRunner for command invocation
- Each test points DATABASE_URL at its own SQLite file under tmp_path
- Every command runs against the real service and database layers
"""

import json

from click.testing import CliRunner
import pytest

from node_hierarchy.cli.main import cli
from node_hierarchy.core.settings import clear_all_caches

# =============================================================================
# Test Fixtures
# =============================================================================


@pytest.fixture
def cli_runner():
    """Create Click CLI runner for testing commands."""
    return CliRunner()


@pytest.fixture
def database_url(tmp_path, monkeypatch):
    """Point the CLI at a fresh SQLite file."""
    url = f"sqlite+aiosqlite:///{tmp_path / 'cli.db'}"
    monkeypatch.setenv("DATABASE_URL", url)
    clear_all_caches()
    return url


@pytest.fixture
def initialized(cli_runner, database_url):
    """Database with schema and root node."""
    result = cli_runner.invoke(cli, ["db", "init"])
    assert result.exit_code == 0, result.output
    return database_url


def _invoke(runner, *args):
    return runner.invoke(cli, list(args))


# =============================================================================
# db commands
# =============================================================================


@pytest.mark.unit
class TestDbCommands:
    def test_init_seeds_root(self, cli_runner, database_url):
        result = _invoke(cli_runner, "db", "init")

        assert result.exit_code == 0
        assert "root node 'root' seeded" in result.output

    def test_init_is_idempotent(self, cli_runner, initialized):
        result = _invoke(cli_runner, "db", "init")

        assert result.exit_code == 0
        assert "already present" in result.output

    def test_init_uses_configured_root_name(self, cli_runner, database_url, monkeypatch):
        monkeypatch.setenv("HIERARCHY_ROOT_NAME", "catalog")
        clear_all_caches()

        assert _invoke(cli_runner, "db", "init").exit_code == 0
        result = _invoke(cli_runner, "nodes", "descendants", "catalog", "--json")

        assert json.loads(result.output)["ancestor"] == "catalog"

    def test_info(self, cli_runner, database_url):
        result = _invoke(cli_runner, "db", "info")

        assert result.exit_code == 0
        assert "sqlite" in result.output
        assert "Root node:    root" in result.output


# =============================================================================
# nodes commands
# =============================================================================


@pytest.mark.unit
class TestNodesCommands:
    def test_add_and_list(self, cli_runner, initialized):
        assert _invoke(cli_runner, "nodes", "add", "root", "A").exit_code == 0
        assert _invoke(cli_runner, "nodes", "add", "A", "B").exit_code == 0

        result = _invoke(cli_runner, "nodes", "descendants", "root", "--json")

        assert result.exit_code == 0
        assert json.loads(result.output) == {
            "ancestor": "root",
            "descendants": ["A", "B"],
            "count": 2,
        }

    def test_add_json_output(self, cli_runner, initialized):
        result = _invoke(cli_runner, "nodes", "add", "root", "A", "--json")

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["name"] == "A"
        assert isinstance(data["id"], int)

    def test_table_output(self, cli_runner, initialized):
        _invoke(cli_runner, "nodes", "add", "root", "A")

        result = _invoke(cli_runner, "nodes", "descendants", "root")

        assert result.exit_code == 0
        assert "Descendants of 'root'" in result.output
        assert "1. A" in result.output

    def test_duplicate_add_fails(self, cli_runner, initialized):
        _invoke(cli_runner, "nodes", "add", "root", "A")

        result = _invoke(cli_runner, "nodes", "add", "root", "A")

        assert result.exit_code == 1
        assert "Node already registered with given name A" in result.output

    def test_move(self, cli_runner, initialized):
        for parent, child in [("root", "A"), ("root", "D"), ("A", "B")]:
            _invoke(cli_runner, "nodes", "add", parent, child)

        result = _invoke(cli_runner, "nodes", "move", "B", "D")

        assert result.exit_code == 0
        assert "Moved 'B' under 'D'" in result.output
        listing = _invoke(cli_runner, "nodes", "descendants", "D", "--json")
        assert json.loads(listing.output)["descendants"] == ["B"]

    def test_move_to_current_parent_fails(self, cli_runner, initialized):
        _invoke(cli_runner, "nodes", "add", "root", "A")

        result = _invoke(cli_runner, "nodes", "move", "A", "root")

        assert result.exit_code == 1
        assert "already under parent" in result.output

    def test_delete(self, cli_runner, initialized):
        _invoke(cli_runner, "nodes", "add", "root", "A")
        _invoke(cli_runner, "nodes", "add", "A", "B")

        result = _invoke(cli_runner, "nodes", "delete", "root", "A")

        assert result.exit_code == 0
        listing = _invoke(cli_runner, "nodes", "descendants", "root")
        assert "No descendants" in listing.output

    def test_unknown_node_fails(self, cli_runner, initialized):
        result = _invoke(cli_runner, "nodes", "descendants", "ghost")

        assert result.exit_code == 1
        assert "Node not found with name='ghost'" in result.output

    def test_uninitialized_database_reports_storage_failure(self, cli_runner, database_url):
        result = _invoke(cli_runner, "nodes", "add", "root", "A")

        assert result.exit_code == 1
        assert "Storage failure during add_child" in result.output


def test_version(cli_runner):
    result = cli_runner.invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert "node-hierarchy" in result.output
