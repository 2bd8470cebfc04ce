# =============================================================================
# lib/cell_values.py - Airtable Cell Coercion
# =============================================================================
# Airtable cells arrive in many shapes: select fields may be a string, a
# {"name": ...} object or a list of either; attachments are lists of dicts.
# These helpers coerce cells into plain strings / attachment lists so that
# templates and JSON responses never receive raw Airtable objects.
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Attachment:
    """A single Airtable attachment entry."""

    id: str
    url: str
    filename: str
    type: str | None = None
    size: int | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.id, "url": self.url, "filename": self.filename}
        if self.type:
            data["type"] = self.type
        if self.size is not None:
            data["size"] = self.size
        return data


def get_select_text(value: Any) -> str | None:
    """
    Extract a human-readable string from a single- or multi-select cell.

    Supports: string, list (first item), and dicts with name/label/value.
    """
    if value is None:
        return None

    if isinstance(value, list):
        if not value:
            return None
        return get_select_text(value[0])

    if isinstance(value, str):
        return value

    if isinstance(value, dict):
        if isinstance(value.get("name"), str):
            return value["name"]
        if isinstance(value.get("label"), str):
            return value["label"]
        inner = value.get("value")
        if isinstance(inner, str):
            return inner
        if isinstance(inner, (int, float)) and not isinstance(inner, bool):
            return str(inner)

    return None


def to_readable_string(value: Any) -> str | None:
    """
    Turn a wide variety of JSON-ish values into a readable string.

    Fallback for cells with unexpected shapes.
    """
    if value is None:
        return None

    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)

    if isinstance(value, list):
        if not value:
            return None
        return to_readable_string(value[0])

    if isinstance(value, dict):
        for key in ("name", "title", "label"):
            if isinstance(value.get(key), str):
                return value[key]

    return None


def string_field(fields: dict[str, Any], name: str) -> str | None:
    """Return fields[name] only if it is a string."""
    value = fields.get(name)
    return value if isinstance(value, str) else None


def first_attachment_url(value: Any) -> str | None:
    """Get the first attachment URL from an attachments cell, if present."""
    if isinstance(value, list) and value:
        first = value[0]
        if isinstance(first, dict) and first.get("url"):
            return first["url"]
    return None


def get_attachment_array(value: Any) -> list[Attachment]:
    """
    Safely extract attachments from a cell.

    Entries missing any of id/url/filename are dropped.
    """
    if not isinstance(value, list):
        return []

    attachments: list[Attachment] = []
    for item in value:
        if not isinstance(item, dict):
            continue
        att_id, url, filename = item.get("id"), item.get("url"), item.get("filename")
        if isinstance(att_id, str) and isinstance(url, str) and isinstance(filename, str) and att_id and url and filename:
            attachments.append(
                Attachment(
                    id=att_id,
                    url=url,
                    filename=filename,
                    type=item.get("type") if isinstance(item.get("type"), str) else None,
                    size=item.get("size") if isinstance(item.get("size"), int) else None,
                )
            )
    return attachments


def extract_attachments(fields: dict[str, Any]) -> list[Attachment]:
    """Scan every field of a record for attachment-like arrays."""
    found: list[Attachment] = []
    for value in fields.values():
        found.extend(get_attachment_array(value))
    return found
