"""
Main sync engine for Notion database → Markdown synchronization.

Orchestrates:
- Record discovery from Notion
- Sync rule filtering
- Candidate file planning
- Content rendering
- File writing and result reporting

A run is split in two at the point where the user picks files:
prepare() returns a SyncPlan, execute() takes the approved items.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from rich.console import Console

from notion_db_sync.config import Config, rebuild_mappings
from notion_db_sync.diff import DiffLine, compute_diff
from notion_db_sync.exceptions import StorageError, SyncAbortedError, TransportError
from notion_db_sync.notion_api import DatabaseSchema, NotionAPI, NotionRecord
from notion_db_sync.renderer import generate_file_content, generate_filename
from notion_db_sync.rules import check_sync_rules
from notion_db_sync.storage import VaultStorage, normalize_path

console = Console()

FILE_EXTENSION = ".md"


class SyncStage(Enum):
    """Stages of one sync run."""
    IDLE = "idle"
    FETCHING = "fetching"
    RULE_FILTERING = "rule_filtering"
    AWAITING_SELECTION = "awaiting_selection"
    EXECUTING = "executing"
    REPORTED = "reported"
    FAILED = "failed"


@dataclass
class FileSelectionItem:
    """A record that passed the sync rules, with its target file."""

    record: NotionRecord
    filename: str
    path: str
    exists: bool
    selected: bool = True
    overwrite: bool = True


@dataclass
class SyncPlan:
    """Candidate files for one run, waiting for the user's selection."""

    items: list[FileSelectionItem] = field(default_factory=list)
    skipped_count: int = 0
    folder: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def existing_count(self) -> int:
        return sum(1 for item in self.items if item.exists)


@dataclass
class UpdatedFile:
    """An existing file that was overwritten."""

    filename: str
    old_content: str
    new_content: str

    @property
    def changed(self) -> bool:
        return self.old_content != self.new_content

    def diff(self) -> list[DiffLine]:
        return compute_diff(self.old_content, self.new_content)


@dataclass
class SyncResult:
    """Result of a sync operation."""

    created: list[str] = field(default_factory=list)
    updated: list[UpdatedFile] = field(default_factory=list)
    unchanged_count: int = 0
    skipped_count: int = 0

    @property
    def has_changes(self) -> bool:
        """Check whether any file content actually changed."""
        return bool(self.created) or any(u.changed for u in self.updated)

    @property
    def summary(self) -> str:
        """One-line summary for notices."""
        return (
            f"Created: {len(self.created)}, Updated: {len(self.updated)}, "
            f"Unchanged: {self.unchanged_count}, Skipped: {self.skipped_count}"
        )


class SyncEngine:
    """
    Orchestrator for Notion database → Markdown synchronization.

    One engine handles one run at a time:
    1. Fetch every record of the database
    2. Drop records that fail the sync rules
    3. Plan a target file per record
    4. Wait for the caller to approve a subset
    5. Create or overwrite the approved files
    6. Return a SyncResult for reporting
    """

    def __init__(
        self,
        config: Config,
        notion_api: Optional[NotionAPI] = None,
        storage: Optional[VaultStorage] = None,
    ):
        """
        Initialize sync engine.

        Args:
            config: Configuration instance.
            notion_api: Transport to use instead of a new NotionAPI.
            storage: Storage to use instead of a VaultStorage on the vault root.
        """
        self.config = config
        self._notion_api = notion_api
        self.storage = storage or VaultStorage(config.vault_root)
        self.stage = SyncStage.IDLE

    @property
    def notion_api(self) -> NotionAPI:
        # Created lazily so configuration is validated first
        if self._notion_api is None:
            self._notion_api = NotionAPI(self.config)
        return self._notion_api

    def fetch_records(self) -> list[NotionRecord]:
        """
        Fetch all records of the configured database.

        Raises:
            TransportError: If any page request fails.
        """
        records: list[NotionRecord] = []
        cursor = None

        while True:
            page = self.notion_api.query_database(self.config.database_id, cursor)
            records.extend(page.results)
            cursor = page.next_cursor
            if not cursor:
                break

        return records

    def prepare(self) -> SyncPlan:
        """
        Fetch records and plan the files to sync.

        Returns:
            SyncPlan of candidates. An empty plan means no record
            passed the sync rules.

        Raises:
            ConfigurationError: If the token or database id is missing.
            TransportError: If fetching from Notion fails.
        """
        self.config.validate()

        self.stage = SyncStage.FETCHING
        try:
            records = self.fetch_records()
        except TransportError:
            self.stage = SyncStage.FAILED
            raise

        if self.config.debug:
            console.print(f"[dim]Fetched {len(records)} records from Notion[/dim]")

        self.stage = SyncStage.RULE_FILTERING
        folder = normalize_path(self.config.sync_folder)
        if not self.storage.exists(folder):
            self.storage.mkdir(folder)

        plan = SyncPlan(folder=folder)
        for record in records:
            if not check_sync_rules(self.config.sync_rules, record.properties):
                plan.skipped_count += 1
                continue

            filename = generate_filename(
                record,
                self.config.property_mappings,
                self.config.filename_property,
            )
            path = normalize_path(f"{folder}/{filename}{FILE_EXTENSION}")

            plan.items.append(
                FileSelectionItem(
                    record=record,
                    filename=filename,
                    path=path,
                    exists=self.storage.exists(path),
                )
            )

        if not plan.is_empty:
            self.stage = SyncStage.AWAITING_SELECTION

        return plan

    def load_template(self) -> str:
        """
        Get the template text for new files.

        A template file in the vault takes precedence over the inline
        template; if it cannot be read, the inline template is used.
        """
        template_path = self.config.template_file_path
        if template_path and self.storage.exists(template_path):
            try:
                return self.storage.read(template_path)
            except StorageError as e:
                console.print(f"[yellow]Warning: Could not read template file: {e}[/yellow]")

        return self.config.file_template

    def render_content(self, record: NotionRecord, template: Optional[str] = None) -> str:
        """Render the full file content for a record."""
        if template is None:
            template = self.load_template()
        return generate_file_content(record, template, self.config.property_mappings)

    def execute(self, items: list[FileSelectionItem], skipped_count: int = 0) -> SyncResult:
        """
        Write the approved files.

        Args:
            items: Items approved by the user.
            skipped_count: Records dropped by the sync rules.

        Returns:
            SyncResult describing created, updated and unchanged files.

        Raises:
            SyncAbortedError: If a file operation fails. Files written
                before the failure are kept and listed in the error's
                partial result.
        """
        self.stage = SyncStage.EXECUTING
        result = SyncResult(skipped_count=skipped_count)

        try:
            template = self.load_template()

            for item in items:
                if not item.selected:
                    continue

                content = self.render_content(item.record, template)

                if not item.exists:
                    self.storage.create(item.path, content)
                    result.created.append(item.filename)
                elif item.overwrite:
                    old_content = self.storage.read(item.path)
                    self.storage.write(item.path, content)
                    result.updated.append(
                        UpdatedFile(
                            filename=item.filename,
                            old_content=old_content,
                            new_content=content,
                        )
                    )
                else:
                    result.unchanged_count += 1

        except StorageError as e:
            self.stage = SyncStage.FAILED
            raise SyncAbortedError(str(e), result) from e

        self.stage = SyncStage.REPORTED
        return result

    def sync(
        self,
        select: Callable[[list[FileSelectionItem]], list[FileSelectionItem]],
        report: Optional[Callable[[SyncResult], None]] = None,
    ) -> Optional[SyncResult]:
        """
        Run the whole pipeline.

        Args:
            select: Receives the candidates and returns the approved
                subset with final overwrite choices.
            report: Optional callback receiving the result.

        Returns:
            SyncResult, or None if no record passed the sync rules.
        """
        plan = self.prepare()

        if plan.is_empty:
            console.print("[yellow]No records match the sync rules.[/yellow]")
            return None

        approved = select(plan.items)
        result = self.execute(approved, plan.skipped_count)

        if report:
            report(result)

        return result

    def retrieve_schema(self) -> DatabaseSchema:
        """
        Fetch the database title and property definitions.

        Raises:
            ConfigurationError: If the token or database id is missing.
            TransportError: If the request fails.
        """
        self.config.validate()
        return self.notion_api.retrieve_database(self.config.database_id)

    def refresh_mappings(self):
        """
        Rebuild property mappings from the database schema.

        Existing choices are kept for known properties. The caller is
        responsible for saving the configuration.

        Returns:
            The new mapping list.
        """
        schema = self.retrieve_schema()
        self.config.property_mappings = rebuild_mappings(
            schema.properties,
            self.config.property_mappings,
        )
        return self.config.property_mappings
