"""
Local file storage for synced notes.

Paths are vault-relative and ``/``-separated; they are normalized
before touching the filesystem.
"""

import re
import unicodedata
from pathlib import Path
from typing import Optional

from notion_db_sync.exceptions import StorageError


def normalize_path(path: str) -> str:
    """
    Normalize a vault-relative path.

    Examples:
        "Notion Sync//Note.md" -> "Notion Sync/Note.md"
        "/Notion Sync\\Note.md/" -> "Notion Sync/Note.md"
        "" -> "/"
    """
    path = re.sub(r"[\\/]+", "/", path)
    path = path.strip("/")
    path = path.replace("\u00a0", " ").replace("\u202f", " ")
    path = unicodedata.normalize("NFC", path)
    return path or "/"


class VaultStorage:
    """
    Reads and writes notes under a vault directory.

    All failures surface as StorageError.
    """

    def __init__(self, root: Path):
        self.root = Path(root)

    def _resolve(self, path: str) -> Path:
        normalized = normalize_path(path)
        if normalized == "/":
            return self.root
        return self.root / normalized

    def exists(self, path: str) -> bool:
        """Check whether a file or folder exists."""
        return self._resolve(path).exists()

    def read(self, path: str) -> str:
        """Read a note's content."""
        target = self._resolve(path)
        try:
            with open(target, encoding="utf-8", newline="") as f:
                return f.read()
        except OSError as e:
            raise StorageError(f"Could not read {path}: {e}", path=path) from e

    def write(self, path: str, content: str) -> None:
        """Create or replace a note."""
        target = self._resolve(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, "w", encoding="utf-8", newline="") as f:
                f.write(content)
        except OSError as e:
            raise StorageError(f"Could not write {path}: {e}", path=path) from e

    def create(self, path: str, content: str) -> None:
        """
        Create a new note.

        An existing file at the same path is replaced, so two records
        mapping to one filename end with the later record's content.
        """
        self.write(path, content)

    def mkdir(self, path: str) -> None:
        """Create a folder (and its parents) if missing."""
        try:
            self._resolve(path).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Could not create folder {path}: {e}", path=path) from e

    def list(self, suffix: Optional[str] = None) -> list[str]:
        """
        List files in the vault.

        Args:
            suffix: Only include files ending with this suffix (e.g. ".md").

        Returns:
            Sorted vault-relative paths. Hidden directories are skipped.
        """
        files = []
        for file_path in self.root.rglob("*"):
            relative = file_path.relative_to(self.root)
            if any(part.startswith(".") for part in relative.parts):
                continue
            if not file_path.is_file():
                continue
            if suffix and not file_path.name.endswith(suffix):
                continue
            files.append(relative.as_posix())

        return sorted(files)
