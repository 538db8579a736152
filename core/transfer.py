"""JSON export and import of the whole item collection."""

import json

from .config import EXPORT_VERSION
from .models import Item


class ImportFormatError(ValueError):
    """Raised when an import file is not a valid export."""


def export_payload(items: list[Item], now: int) -> dict:
    return {
        'version': EXPORT_VERSION,
        'exportedAt': now,
        'words': [item.to_dict() for item in items]
    }


def export_json(items: list[Item], now: int) -> str:
    return json.dumps(export_payload(items, now), indent=2, ensure_ascii=False)


def parse_import(data) -> list[Item]:
    """Validate an export payload (dict or JSON text) and return its items."""
    if isinstance(data, (str, bytes)):
        try:
            data = json.loads(data)
        except json.JSONDecodeError as e:
            raise ImportFormatError(f"Failed to parse JSON: {e}") from e

    if not isinstance(data, dict) or data.get('version') != EXPORT_VERSION \
            or not isinstance(data.get('words'), list):
        raise ImportFormatError("Invalid file format")

    items = []
    for record in data['words']:
        if not isinstance(record, dict) or not isinstance(record.get('id'), str) \
                or not isinstance(record.get('word'), str):
            raise ImportFormatError("Invalid word data")
        try:
            items.append(Item.from_dict(record))
        except (KeyError, TypeError, ValueError) as e:
            raise ImportFormatError(f"Invalid word data: {e}") from e
    return items
