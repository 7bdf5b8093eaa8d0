from pytest import mark, raises

from notion_db_sync.exceptions import StorageError
from notion_db_sync.storage import VaultStorage, normalize_path


@mark.parametrize(
    "path,expected",
    [
        ("Notion Sync/Note.md", "Notion Sync/Note.md"),
        ("Notion Sync//Note.md", "Notion Sync/Note.md"),
        ("/Notion Sync\\Note.md/", "Notion Sync/Note.md"),
        ("Notion Sync", "Notion Sync"),
        ("", "/"),
        ("///", "/"),
    ],
)
def test_normalize_path(path, expected):
    assert normalize_path(path) == expected


def test_create_read_write(storage, vault):
    storage.create("Folder/Sub/Note.md", "one\r\ntwo\n")

    assert storage.exists("Folder/Sub/Note.md")
    assert (vault / "Folder" / "Sub" / "Note.md").is_file()
    # Newlines are kept as written
    assert storage.read("Folder/Sub/Note.md") == "one\r\ntwo\n"

    storage.write("Folder/Sub/Note.md", "three")
    assert storage.read("Folder/Sub/Note.md") == "three"


def test_create_replaces_existing_file(storage):
    storage.create("Note.md", "first")
    storage.create("Note.md", "second")
    assert storage.read("Note.md") == "second"


def test_mkdir_is_idempotent(storage, vault):
    storage.mkdir("A/B")
    storage.mkdir("A/B")
    assert (vault / "A" / "B").is_dir()
    assert storage.exists("A")


def test_read_missing_file_raises(storage):
    with raises(StorageError) as exc_info:
        storage.read("missing.md")
    assert exc_info.value.path == "missing.md"


def test_write_over_directory_raises(storage):
    storage.mkdir("Note.md")
    with raises(StorageError):
        storage.write("Note.md", "content")


def test_list(storage):
    storage.create("b.md", "")
    storage.create("Templates/a.md", "")
    storage.create("image.png", "")
    storage.create(".notion-sync/settings.md", "")

    assert storage.list() == ["Templates/a.md", "b.md", "image.png"]
    assert storage.list(suffix=".md") == ["Templates/a.md", "b.md"]
