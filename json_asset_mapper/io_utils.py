from __future__ import annotations

import json
import logging
import os
import tempfile
from typing import Any, Dict, List

logger = logging.getLogger(__name__)


def read_json_content(file_obj):
    """Read JSON content from an uploaded file or file path."""
    if file_obj is None:
        raise ValueError("No file uploaded.")

    if hasattr(file_obj, 'read'):
        if hasattr(file_obj, 'seek'):
            file_obj.seek(0)
        content = file_obj.read()
        if isinstance(content, bytes):
            content = content.decode('utf-8')
        return json.loads(content)

    path = file_obj.name if hasattr(file_obj, 'name') else file_obj
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def load_records(file_obj, label: str = 'file') -> List[Dict[str, Any]]:
    """Load a JSON array of records, raising ValueError with a user-facing message."""
    if file_obj is None:
        raise ValueError(f"No {label} file uploaded.")

    path = getattr(file_obj, 'name', file_obj)
    if isinstance(path, str) and not path.lower().endswith('.json'):
        raise ValueError(f"Please upload only JSON files ({label}).")

    try:
        data = read_json_content(file_obj)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ValueError(f"Invalid JSON format in {label}: {exc}") from exc

    if not isinstance(data, list):
        raise ValueError(f"{label} must contain a JSON array of records.")
    if not all(isinstance(item, dict) for item in data):
        raise ValueError(f"{label} must contain a JSON array of records.")

    logger.info("Loaded %d records from %s", len(data), label)
    return data


def serialize_records(records: Any) -> str:
    return json.dumps(records, indent=2, ensure_ascii=False)


def write_json_export(records: Any, file_name: str = None, default_name: str = 'merged-data.json') -> str:
    """Write records as indented JSON into the temp dir and return the path."""
    output_name = (file_name or '').strip() or default_name
    if not output_name.lower().endswith('.json'):
        output_name += '.json'

    path = os.path.join(tempfile.gettempdir(), os.path.basename(output_name))
    with open(path, 'w', encoding='utf-8') as f:
        f.write(serialize_records(records))
    return path
