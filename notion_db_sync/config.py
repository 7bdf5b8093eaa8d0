"""
Configuration management for Notion database sync.

Secrets and locations come from environment variables (optionally
through a .env file). Structured settings such as property mappings,
sync rules and the file template live in a JSON settings file inside
the vault.
"""

import json
import os
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from notion_db_sync.exceptions import ConfigurationError

DEFAULT_SYNC_FOLDER = "Notion Sync"
DEFAULT_FILENAME_PROPERTY = "title"
DEFAULT_TEMPLATE = "---\n{{frontmatter}}\n---\n\n# {{title}}\n\n{{content}}"
SETTINGS_DIR = ".notion-sync"


class RuleCondition(str, Enum):
    """Conditions a sync rule can check."""
    EQUALS = "equals"
    NOT_EMPTY = "notEmpty"
    IS_TRUE = "isTrue"
    IS_FALSE = "isFalse"


@dataclass
class PropertyMapping:
    """Maps a Notion property to a frontmatter field."""

    notion_property: str
    notion_type: str
    local_field: str
    enabled: bool = True
    is_template_variable: bool = True

    def to_dict(self) -> dict:
        return {
            "notion_property": self.notion_property,
            "notion_type": self.notion_type,
            "local_field": self.local_field,
            "enabled": self.enabled,
            "is_template_variable": self.is_template_variable,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PropertyMapping":
        name = data.get("notion_property", "")
        return cls(
            notion_property=name,
            notion_type=data.get("notion_type", ""),
            local_field=data.get("local_field") or default_local_field(name),
            enabled=data.get("enabled", True),
            is_template_variable=data.get("is_template_variable", True),
        )


@dataclass
class SyncRule:
    """
    A filter on one property.

    ``condition`` is kept as a plain string so that settings written
    by newer versions still load; unknown conditions always pass.
    """

    property: str
    condition: str = RuleCondition.EQUALS.value
    value: Optional[str] = None

    def to_dict(self) -> dict:
        data = {"property": self.property, "condition": self.condition}
        if self.value is not None:
            data["value"] = self.value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "SyncRule":
        return cls(
            property=data.get("property", ""),
            condition=data.get("condition", RuleCondition.EQUALS.value),
            value=data.get("value"),
        )


def default_local_field(notion_property: str) -> str:
    """
    Default frontmatter field name for a Notion property.

    Examples:
        "Status" -> "status"
        "Due  Date" -> "due_date"
    """
    return re.sub(r"\s+", "_", notion_property.lower())


def rebuild_mappings(
    schema_properties: dict[str, Any],
    existing: list[PropertyMapping],
) -> list[PropertyMapping]:
    """
    Build one mapping per database property.

    User choices (field name, enabled, template flag) are kept for
    properties that were already mapped. When ``existing`` holds the
    same Notion property twice, the later entry wins.

    Args:
        schema_properties: The ``properties`` object of a database schema.
        existing: Currently configured mappings.

    Returns:
        New mapping list in schema order.
    """
    by_name = {m.notion_property: m for m in existing}

    mappings = []
    for name, prop in schema_properties.items():
        prop_type = prop.get("type", "") if isinstance(prop, dict) else ""
        current = by_name.get(name)
        mappings.append(
            PropertyMapping(
                notion_property=name,
                notion_type=prop_type,
                local_field=(current.local_field if current else "") or default_local_field(name),
                enabled=current.enabled if current else True,
                is_template_variable=current.is_template_variable if current else True,
            )
        )

    return mappings


@dataclass
class Config:
    """
    Central configuration for the sync system.

    Built from environment variables plus the JSON settings file.
    Passed explicitly into the engine for each run.
    """

    # Notion settings
    notion_token: str = ""
    database_id: str = ""

    # Vault layout
    vault_root: Path = field(default_factory=lambda: Path.cwd())
    sync_folder: str = DEFAULT_SYNC_FOLDER

    # Rendering
    filename_property: str = DEFAULT_FILENAME_PROPERTY
    file_template: str = DEFAULT_TEMPLATE
    template_file_path: str = ""
    property_mappings: list[PropertyMapping] = field(default_factory=list)
    sync_rules: list[SyncRule] = field(default_factory=list)

    debug: bool = False
    settings_file: Optional[Path] = None

    def __post_init__(self):
        if isinstance(self.vault_root, str):
            self.vault_root = Path(self.vault_root)
        if isinstance(self.settings_file, str):
            self.settings_file = Path(self.settings_file)
        if self.settings_file is None:
            self.settings_file = self.vault_root / SETTINGS_DIR / "settings.json"

    @classmethod
    def from_env(cls, env_file: Optional[Path] = None) -> "Config":
        """
        Load configuration from environment variables and the settings file.

        Args:
            env_file: Optional path to .env file. If not provided,
                     looks for .env in current directory.

        Returns:
            Configured Config instance. Call validate() before syncing.
        """
        if env_file:
            load_dotenv(env_file)
        else:
            load_dotenv()

        vault_root_str = os.getenv("VAULT_ROOT")
        vault_root = Path(vault_root_str) if vault_root_str else Path.cwd()

        settings_str = os.getenv("NOTION_SYNC_SETTINGS")

        config = cls(
            notion_token=os.getenv("NOTION_TOKEN", "").strip(),
            database_id=os.getenv("NOTION_DATABASE_ID", "").strip(),
            vault_root=vault_root,
            debug=os.getenv("DEBUG", "false").lower() == "true",
            settings_file=Path(settings_str) if settings_str else None,
        )
        config.load_settings()
        return config

    def validate(self) -> None:
        """
        Check that the settings needed to talk to Notion are present.

        Raises:
            ConfigurationError: If the token or database id is missing.
        """
        if not self.notion_token:
            raise ConfigurationError(
                "NOTION_TOKEN is required.\n"
                "Create a Notion integration at https://www.notion.so/my-integrations"
            )
        if not self.database_id:
            raise ConfigurationError(
                "NOTION_DATABASE_ID is required.\n"
                "Share the database with your integration and copy its ID."
            )

    def load_settings(self) -> None:
        """Apply the JSON settings file, if it exists."""
        if not self.settings_file.exists():
            return

        try:
            with open(self.settings_file, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid settings file {self.settings_file}: {e}") from e

        self.apply_settings(data)

    def apply_settings(self, data: dict) -> None:
        """Update structured settings from a settings dictionary."""
        # Environment wins over the file for credentials
        self.notion_token = self.notion_token or data.get("notion_token") or ""
        self.database_id = self.database_id or data.get("database_id") or ""

        self.sync_folder = (data.get("sync_folder") or "").strip() or DEFAULT_SYNC_FOLDER
        self.filename_property = (
            (data.get("filename_property") or "").strip() or DEFAULT_FILENAME_PROPERTY
        )
        self.file_template = data.get("file_template") or DEFAULT_TEMPLATE
        self.template_file_path = data.get("template_file_path") or ""
        self.property_mappings = [
            PropertyMapping.from_dict(m) for m in data.get("property_mappings") or []
        ]
        self.sync_rules = [SyncRule.from_dict(r) for r in data.get("sync_rules") or []]

    def settings_dict(self) -> dict:
        """Structured settings for JSON serialization (no secrets)."""
        return {
            "sync_folder": self.sync_folder,
            "filename_property": self.filename_property,
            "file_template": self.file_template,
            "template_file_path": self.template_file_path,
            "property_mappings": [m.to_dict() for m in self.property_mappings],
            "sync_rules": [r.to_dict() for r in self.sync_rules],
        }

    def save_settings(self) -> None:
        """Write structured settings back to the settings file."""
        self.settings_file.parent.mkdir(parents=True, exist_ok=True)

        with open(self.settings_file, "w", encoding="utf-8") as f:
            json.dump(self.settings_dict(), f, indent=2, ensure_ascii=False)
