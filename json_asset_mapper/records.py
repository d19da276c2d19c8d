from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List, Set

from .io_utils import serialize_records


def collect_field_names(records: Iterable[Dict[str, Any]]) -> List[str]:
    """Sorted union of top-level keys across all records."""
    keys: Set[str] = set()
    for record in records or []:
        if isinstance(record, dict):
            keys.update(record.keys())
    return sorted(keys)


def preview_records(records: List[Dict[str, Any]], limit: int = 3) -> List[Dict[str, Any]]:
    if not records:
        return []
    return records[:max(1, int(limit))]


def format_file_size(num_bytes: int) -> str:
    if num_bytes < 1024:
        return f"{num_bytes} B"
    if num_bytes < 1024 * 1024:
        return f"{num_bytes / 1024:.1f} KB"
    return f"{num_bytes / (1024 * 1024):.1f} MB"


def summarize_records(records: List[Dict[str, Any]]) -> str:
    """e.g. '12 items • 3.4 KB', sized on the compact JSON text."""
    size = len(json.dumps(records, separators=(',', ':'), ensure_ascii=False))
    return f"{len(records)} items • {size / 1024:.1f} KB"


def describe_export(records: List[Dict[str, Any]]) -> str:
    """File size of the indented export, e.g. 'File size: 1.2 KB • Format: JSON'."""
    size = len(serialize_records(records).encode('utf-8'))
    return f"File size: {format_file_size(size)} • Format: JSON"
