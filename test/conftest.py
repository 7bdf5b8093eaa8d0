from pathlib import Path
from unittest.mock import Mock

from pytest import fixture

from notion_db_sync.config import Config, PropertyMapping
from notion_db_sync.notion_api import NotionRecord, QueryPage
from notion_db_sync.properties import extract_title
from notion_db_sync.storage import VaultStorage


def title_prop(text: str) -> dict:
    return {"type": "title", "title": [{"plain_text": text}] if text else []}


def select_prop(name: str) -> dict:
    return {"type": "select", "select": {"name": name} if name else None}


def checkbox_prop(checked: bool) -> dict:
    return {"type": "checkbox", "checkbox": checked}


def rich_text_prop(text: str) -> dict:
    return {"type": "rich_text", "rich_text": [{"plain_text": text}] if text else []}


def make_record(
    record_id: str = "rec-1",
    properties: dict = None,
    last_edited_time: str = "2024-05-01T12:00:00.000Z",
) -> NotionRecord:
    properties = properties or {}
    return NotionRecord(
        id=record_id,
        last_edited_time=last_edited_time,
        properties=properties,
        title=extract_title(properties),
    )


def mapping(name: str, prop_type: str, field: str = None, **kwargs) -> PropertyMapping:
    return PropertyMapping(
        notion_property=name,
        notion_type=prop_type,
        local_field=field or name.lower(),
        **kwargs,
    )


@fixture
def vault(tmp_path: Path) -> Path:
    return tmp_path / "vault"


@fixture
def config(vault: Path) -> Config:
    return Config(
        notion_token="secret_test",
        database_id="db123",
        vault_root=vault,
    )


@fixture
def storage(vault: Path) -> VaultStorage:
    vault.mkdir(parents=True, exist_ok=True)
    return VaultStorage(vault)


@fixture
def notion_api() -> Mock:
    """Transport returning a single page of records set by the test."""
    api = Mock()
    api.query_database.return_value = QueryPage(results=[], next_cursor=None)
    return api
