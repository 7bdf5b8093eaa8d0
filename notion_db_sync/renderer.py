"""
Rendering of Notion records into Markdown files.

Covers the three pieces of a synced file:
- the filename, taken from a chosen property or the record title
- the YAML frontmatter built from the property mappings
- the file body, produced by filling placeholders in a template
"""

import re
from typing import Any

from notion_db_sync.config import PropertyMapping
from notion_db_sync.notion_api import NotionRecord
from notion_db_sync.properties import UNTITLED, extract_property_value, to_text

FRONTMATTER_PLACEHOLDER = "{{frontmatter}}"
TITLE_PLACEHOLDER = "{{title}}"
CONTENT_PLACEHOLDER = "{{content}}"

ILLEGAL_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*]')
YAML_SPECIAL_CHARS = re.compile(r"[:#\[\]{}|>&*!]")


def sanitize_filename(name: str) -> str:
    """
    Make a string safe to use as a filename.

    Examples:
        "a/b:c*d" -> "a_b_c_d"
        "  Notes  " -> "Notes"
        "***" -> "Untitled"
    """
    # Nothing but illegal characters and whitespace
    if not ILLEGAL_FILENAME_CHARS.sub("", name).strip():
        return UNTITLED
    return ILLEGAL_FILENAME_CHARS.sub("_", name).strip()


def generate_filename(
    record: NotionRecord,
    mappings: list[PropertyMapping],
    filename_property: str,
) -> str:
    """
    Derive the filename (without extension) for a record.

    The configured filename property is only used when it has a
    mapping; otherwise the record title is used.
    """
    has_mapping = any(m.notion_property == filename_property for m in mappings)

    name = record.title
    if has_mapping:
        prop = record.properties.get(filename_property)
        if prop:
            name = to_text(extract_property_value(prop))

    return sanitize_filename(name)


def _quote(text: str) -> str:
    return '"' + text.replace('"', '\\"') + '"'


def format_frontmatter_value(value: Any) -> str:
    """
    Format an extracted value for a frontmatter line.

    Lists are written as ``["a", "b"]``. The result, list or scalar, is
    double-quoted when it contains YAML indicator characters or
    newlines, so a list ends up as one quoted string.
    """
    if isinstance(value, (list, tuple)):
        text = "[" + ", ".join(f'"{to_text(v)}"' for v in value) + "]"
    else:
        text = to_text(value)

    if YAML_SPECIAL_CHARS.search(text) or "\n" in text:
        return _quote(text)
    return text


def generate_frontmatter(record: NotionRecord, mappings: list[PropertyMapping]) -> str:
    """
    Build the frontmatter lines for a record.

    Enabled mappings are rendered in configured order, skipping
    properties that are absent or empty. The Notion id and last edited
    time are always appended.

    Returns:
        Newline-joined lines, without the surrounding ``---`` markers.
    """
    lines = []

    for mapping in mappings:
        if not mapping.enabled:
            continue

        prop = record.properties.get(mapping.notion_property)
        if not prop:
            continue

        value = extract_property_value(prop)
        if value is None or value == "":
            continue
        if isinstance(value, (list, tuple)) and not value:
            continue

        lines.append(f"{mapping.local_field}: {format_frontmatter_value(value)}")

    lines.append(f"notion_id: {record.id}")
    lines.append(f"notion_last_edited: {record.last_edited_time}")

    return "\n".join(lines)


def generate_file_content(
    record: NotionRecord,
    template: str,
    mappings: list[PropertyMapping],
) -> str:
    """
    Fill a file template for a record.

    ``{{frontmatter}}``, ``{{title}}`` and ``{{content}}`` are replaced
    once each; ``{{content}}`` is left empty. Every enabled mapping
    flagged as a template variable then replaces all ``{{<local_field>}}``
    tokens with the property value.
    """
    content = template
    content = content.replace(FRONTMATTER_PLACEHOLDER, generate_frontmatter(record, mappings), 1)
    content = content.replace(TITLE_PLACEHOLDER, record.title, 1)
    content = content.replace(CONTENT_PLACEHOLDER, "", 1)

    for mapping in mappings:
        if not (mapping.is_template_variable and mapping.enabled):
            continue

        prop = record.properties.get(mapping.notion_property)
        value = to_text(extract_property_value(prop)) if prop else ""
        content = content.replace("{{" + mapping.local_field + "}}", value)

    return content
