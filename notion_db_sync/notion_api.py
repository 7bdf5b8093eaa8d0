"""
Notion API wrapper for the sync system.

Provides a small interface to Notion's database endpoints with:
- Rate limiting compliance
- Cursor pagination of database queries
- Error translation into TransportError
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Optional

import httpx
from notion_client import Client
from notion_client.errors import HTTPResponseError, RequestTimeoutError
from ratelimit import limits, sleep_and_retry
from rich.console import Console

from notion_db_sync.config import Config
from notion_db_sync.exceptions import TransportError
from notion_db_sync.properties import extract_title

console = Console()

NOTION_VERSION = "2022-06-28"

# Notion API rate limit: 3 requests per second
RATE_LIMIT_CALLS = 3
RATE_LIMIT_PERIOD = 1  # second


@dataclass(frozen=True)
class NotionRecord:
    """Snapshot of one database page, taken once per sync run."""

    id: str
    last_edited_time: str
    properties: dict[str, Any] = field(default_factory=dict)
    title: str = "Untitled"

    @classmethod
    def from_api_response(cls, page: dict) -> "NotionRecord":
        """Create NotionRecord from a query result entry."""
        properties = page.get("properties") or {}
        return cls(
            id=page.get("id", ""),
            last_edited_time=page.get("last_edited_time", ""),
            properties=properties,
            title=extract_title(properties),
        )


@dataclass
class DatabaseSchema:
    """Title and property definitions of a database."""

    title: str
    properties: dict[str, Any]

    @classmethod
    def from_api_response(cls, database: dict) -> "DatabaseSchema":
        title = "".join(t.get("plain_text", "") for t in database.get("title") or [])
        return cls(title=title, properties=database.get("properties") or {})


@dataclass
class QueryPage:
    """One page of database query results."""

    results: list[NotionRecord]
    next_cursor: Optional[str] = None


class NotionAPI:
    """
    Wrapper around the Notion database endpoints.

    Handles:
    - Authentication and API versioning
    - Rate limiting (3 req/sec)
    - Error translation
    """

    def __init__(self, config: Config, client: Optional[Client] = None):
        """
        Initialize the Notion API client.

        Args:
            config: Configuration instance with Notion token.
            client: Optional preconfigured client.
        """
        self.config = config
        self.client = client or Client(auth=config.notion_token, notion_version=NOTION_VERSION)
        self._request_count = 0

    @sleep_and_retry
    @limits(calls=RATE_LIMIT_CALLS, period=RATE_LIMIT_PERIOD)
    def _rate_limited_call(self, func: Callable, *args, **kwargs) -> Any:
        """Execute a rate-limited API call."""
        self._request_count += 1
        return func(*args, **kwargs)

    def _call(self, description: str, func: Callable, **kwargs) -> Any:
        try:
            return self._rate_limited_call(func, **kwargs)
        except (HTTPResponseError, RequestTimeoutError, httpx.HTTPError) as e:
            if self.config.debug:
                console.print(f"[red]API Error {description}: {e}[/red]")
            raise TransportError(f"Notion API error {description}: {e}") from e

    def retrieve_database(self, database_id: str) -> DatabaseSchema:
        """
        Get the schema of a database.

        Args:
            database_id: The Notion database ID.

        Returns:
            DatabaseSchema with the database title and properties.
        """
        response = self._call(
            "retrieving database",
            self.client.databases.retrieve,
            database_id=database_id,
        )
        return DatabaseSchema.from_api_response(response)

    def query_database(self, database_id: str, cursor: Optional[str] = None) -> QueryPage:
        """
        Fetch one page of database records.

        Args:
            database_id: The Notion database ID.
            cursor: Cursor returned by the previous page, if any.

        Returns:
            QueryPage with the records and the cursor for the next page.
        """
        kwargs = {"database_id": database_id}
        if cursor:
            kwargs["start_cursor"] = cursor

        response = self._call("querying database", self.client.databases.query, **kwargs)

        return QueryPage(
            results=[NotionRecord.from_api_response(p) for p in response.get("results", [])],
            next_cursor=response.get("next_cursor") if response.get("has_more", True) else None,
        )

    @property
    def request_count(self) -> int:
        """Number of API requests made."""
        return self._request_count
