"""
Notion property value extraction.

Notion returns every database property as a typed object, e.g.::

    {"type": "select", "select": {"name": "Done", "color": "green"}}

This module flattens those objects into plain Python values (strings,
numbers, booleans, lists) for filenames, sync rules and templates.
Extraction is total: unknown types and malformed payloads fall back
to an empty value instead of raising.
"""

import json
from typing import Any, Callable

UNTITLED = "Untitled"


def _plain_text(fragments: Any) -> str:
    """Join the plain_text of a rich text array."""
    if not fragments:
        return ""
    return "".join(f.get("plain_text", "") or "" for f in fragments)


def _name(option: Any) -> str:
    if not option:
        return ""
    return option.get("name") or ""


def _formula(payload: Any) -> Any:
    """Unwrap a formula result using its declared result type."""
    if not payload:
        return ""
    result = payload.get(payload.get("type"))
    if isinstance(result, dict):
        # date formulas carry a date object
        return result.get("start") or ""
    if result is None:
        return ""
    return result


_EXTRACTORS: dict[str, Callable[[Any], Any]] = {
    "title": _plain_text,
    "rich_text": _plain_text,
    "number": lambda payload: payload,
    "select": _name,
    "status": _name,
    "multi_select": lambda payload: [_name(o) for o in payload or []],
    "checkbox": lambda payload: payload,
    "url": lambda payload: payload or "",
    "email": lambda payload: payload or "",
    "phone_number": lambda payload: payload or "",
    "date": lambda payload: (payload or {}).get("start") or "",
    "formula": _formula,
    "rollup": lambda payload: (payload or {}).get("array") or [],
    "relation": lambda payload: [r.get("id") for r in payload or []],
    "created_time": lambda payload: payload,
    "last_edited_time": lambda payload: payload,
    "created_by": _name,
    "last_edited_by": _name,
}


def extract_property_value(prop: Any) -> Any:
    """
    Extract a plain value from a Notion property object.

    Args:
        prop: Property object as returned by the Notion API.

    Returns:
        A string, number, boolean, list or None. Unknown property
        types and malformed payloads yield an empty string.
    """
    if not isinstance(prop, dict):
        return ""

    prop_type = prop.get("type")
    extractor = _EXTRACTORS.get(prop_type)
    if extractor is None:
        return ""

    try:
        return extractor(prop.get(prop_type))
    except (AttributeError, TypeError, KeyError):
        # Payload shape didn't match the declared type
        return ""


def extract_title(properties: dict[str, Any]) -> str:
    """Return the text of the first non-empty title property."""
    for prop in (properties or {}).values():
        if isinstance(prop, dict) and prop.get("type") == "title" and prop.get("title"):
            try:
                return _plain_text(prop["title"])
            except (AttributeError, TypeError):
                continue
    return UNTITLED


def to_text(value: Any) -> str:
    """
    Coerce an extracted value to text.

    Examples:
        None -> ""
        True -> "true"
        3.0 -> "3"
        ["a", "b"] -> "a,b"
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return ",".join(to_text(v) for v in value)
    if isinstance(value, dict):
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    return str(value)
