from unittest.mock import Mock

from click.testing import CliRunner
from pytest import fixture

from notion_db_sync import __version__, cli as cli_module
from notion_db_sync.cli import cli
from notion_db_sync.exceptions import TransportError
from notion_db_sync.notion_api import DatabaseSchema, QueryPage
from notion_db_sync.sync_engine import SyncEngine

from conftest import make_record, select_prop, title_prop

RECORD = make_record(
    "rec-1",
    {"Name": title_prop("Hello World"), "Status": select_prop("Done")},
)


@fixture
def runner():
    return CliRunner()


@fixture
def env(monkeypatch, vault):
    vault.mkdir(parents=True, exist_ok=True)
    monkeypatch.setenv("NOTION_TOKEN", "secret_test")
    monkeypatch.setenv("NOTION_DATABASE_ID", "db123")
    monkeypatch.setenv("VAULT_ROOT", str(vault))
    monkeypatch.delenv("NOTION_SYNC_SETTINGS", raising=False)
    return vault


@fixture
def notion_api(monkeypatch):
    api = Mock()
    api.query_database.return_value = QueryPage(results=[RECORD], next_cursor=None)

    original_init = SyncEngine.__init__

    def init(self, config, notion_api=None, storage=None):
        original_init(self, config, notion_api=api, storage=storage)

    monkeypatch.setattr(cli_module.SyncEngine, "__init__", init)
    return api


def test_version(runner):
    result = runner.invoke(cli, ["version"], obj={})
    assert result.exit_code == 0
    assert __version__ in result.output


def test_sync_yes_creates_files(runner, env, notion_api):
    result = runner.invoke(cli, ["sync", "--yes"], obj={})

    assert result.exit_code == 0, result.output
    assert "Created: 1" in result.output
    assert (env / "Notion Sync" / "Hello World.md").is_file()


def test_sync_interactive_decline(runner, env, notion_api):
    result = runner.invoke(cli, ["sync"], obj={}, input="n\n")

    assert result.exit_code == 0, result.output
    assert "No files selected" in result.output
    assert not (env / "Notion Sync" / "Hello World.md").exists()


def test_sync_interactive_keep_existing(runner, env, notion_api):
    target = env / "Notion Sync" / "Hello World.md"
    target.parent.mkdir(parents=True)
    target.write_text("mine", encoding="utf-8")

    result = runner.invoke(cli, ["sync"], obj={}, input="y\nn\n")

    assert result.exit_code == 0, result.output
    assert "Unchanged: 1" in result.output
    assert target.read_text(encoding="utf-8") == "mine"


def test_sync_show_diff(runner, env, notion_api):
    target = env / "Notion Sync" / "Hello World.md"
    target.parent.mkdir(parents=True)
    target.write_text("old line", encoding="utf-8")

    result = runner.invoke(cli, ["sync", "--yes", "--show-diff"], obj={})

    assert result.exit_code == 0, result.output
    assert "- old line" in result.output
    assert "+ # Hello World" in result.output


def test_missing_token_is_configuration_error(runner, env, notion_api, monkeypatch):
    monkeypatch.setenv("NOTION_TOKEN", "")

    result = runner.invoke(cli, ["sync", "--yes"], obj={})

    assert result.exit_code == 1
    assert "Configuration error" in result.output
    notion_api.query_database.assert_not_called()


def test_templates_lists_markdown(runner, env):
    (env / "Templates").mkdir()
    (env / "Templates" / "note.md").write_text("{{title}}", encoding="utf-8")

    result = runner.invoke(cli, ["templates"], obj={})

    assert result.exit_code == 0
    assert "Templates/note.md" in result.output


def test_check_reports_database(runner, env, notion_api):
    notion_api.retrieve_database.return_value = DatabaseSchema(
        title="Reading List",
        properties={"Name": {"type": "title"}, "Status": {"type": "select"}},
    )

    result = runner.invoke(cli, ["check"], obj={})

    assert result.exit_code == 0, result.output
    assert "Connected." in result.output
    assert "Reading List" in result.output
    assert "2 properties" in result.output
    notion_api.retrieve_database.assert_called_once_with("db123")


def test_check_transport_failure(runner, env, notion_api):
    notion_api.retrieve_database.side_effect = TransportError(
        "Notion API error retrieving database: Could not find database"
    )

    result = runner.invoke(cli, ["check"], obj={})

    assert result.exit_code == 1
    assert "Error:" in result.output
    assert "Could not find database" in result.output


def test_check_missing_database_id(runner, env, notion_api, monkeypatch):
    monkeypatch.setenv("NOTION_DATABASE_ID", "")

    result = runner.invoke(cli, ["check"], obj={})

    assert result.exit_code == 1
    assert "Configuration error" in result.output
    notion_api.retrieve_database.assert_not_called()


def test_sync_lists_existing_count(runner, env, notion_api):
    target = env / "Notion Sync" / "Hello World.md"
    target.parent.mkdir(parents=True)
    target.write_text("old", encoding="utf-8")

    result = runner.invoke(cli, ["sync", "--yes"], obj={})

    assert result.exit_code == 0, result.output
    assert "1 already exist" in result.output
