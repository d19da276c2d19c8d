from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Optional, Sequence

MAPPING_TABLE_HEADERS = ["Source Field", "Target Field", "Match Key", "Replace With Key", "Remove Original"]

DEFAULT_MATCH_KEY = 'id'
DEFAULT_REPLACE_KEY = 'filename'

_TRUTHY = {'true', 'yes', 'y', '1', 'on'}


@dataclass
class FieldMapping:
    """One rule: replace entry[source_field] with asset[replace_with_key] via asset[match_key]."""

    source_field: str
    target_field: str
    match_key: str = DEFAULT_MATCH_KEY
    replace_with_key: str = DEFAULT_REPLACE_KEY
    remove_original: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'sourceField': self.source_field,
            'targetField': self.target_field,
            'matchKey': self.match_key,
            'replaceWithKey': self.replace_with_key,
            'removeOriginal': self.remove_original,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FieldMapping":
        """Accept both camelCase (exported) and snake_case keys."""
        def pick(camel, snake, default=None):
            if camel in data:
                return data[camel]
            return data.get(snake, default)

        source = pick('sourceField', 'source_field')
        if source is None:
            raise ValueError("Field mapping is missing a source field.")
        target = pick('targetField', 'target_field')
        return cls(
            source_field=source,
            target_field=source if target is None else target,
            match_key=pick('matchKey', 'match_key', DEFAULT_MATCH_KEY),
            replace_with_key=pick('replaceWithKey', 'replace_with_key', DEFAULT_REPLACE_KEY),
            remove_original=parse_flag(pick('removeOriginal', 'remove_original', False)),
        )


def coerce_mapping(mapping) -> FieldMapping:
    if isinstance(mapping, FieldMapping):
        return mapping
    if isinstance(mapping, dict):
        return FieldMapping.from_dict(mapping)
    raise TypeError(f"Unsupported mapping type: {type(mapping).__name__}")


def parse_flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY
    if value is None:
        return False
    try:
        if value != value:  # NaN from an empty Dataframe cell
            return False
    except TypeError:
        pass
    return bool(value)


def default_target_field(source_field: str) -> str:
    """'assetId' -> 'asset'; fields without a trailing 'Id' are kept as-is."""
    if source_field.endswith('Id') and len(source_field) > 2:
        return source_field[:-2]
    return source_field


def default_mapping(
    source_field: str,
    match_key: str = DEFAULT_MATCH_KEY,
    replace_with_key: str = DEFAULT_REPLACE_KEY,
) -> FieldMapping:
    return FieldMapping(
        source_field=source_field,
        target_field=default_target_field(source_field),
        match_key=match_key,
        replace_with_key=replace_with_key,
        remove_original=False,
    )


def build_default_mappings(
    selected_fields: Sequence[str],
    current_mappings: Optional[Iterable[FieldMapping]] = None,
    match_key: str = DEFAULT_MATCH_KEY,
    replace_with_key: str = DEFAULT_REPLACE_KEY,
) -> List[FieldMapping]:
    """One mapping per selected field, reusing existing ones for fields still selected."""
    existing: Dict[str, FieldMapping] = {}
    for mapping in current_mappings or []:
        existing.setdefault(mapping.source_field, mapping)

    mappings: List[FieldMapping] = []
    for field in selected_fields or []:
        if field in existing:
            mappings.append(existing[field])
        else:
            mappings.append(default_mapping(field, match_key, replace_with_key))
    return mappings


def apply_global_defaults(mappings: Iterable[FieldMapping], match_key: str, replace_with_key: str) -> List[FieldMapping]:
    """Set the same match/replace keys on every mapping."""
    return [replace(m, match_key=match_key, replace_with_key=replace_with_key) for m in mappings]


def mappings_to_rows(mappings: Iterable[FieldMapping]) -> List[List[Any]]:
    return [
        [m.source_field, m.target_field, m.match_key, m.replace_with_key, m.remove_original]
        for m in mappings
    ]


def _cell(value: Any) -> str:
    if value is None:
        return ''
    if isinstance(value, float) and value != value:
        return ''
    return str(value).strip()


def mappings_from_rows(rows) -> List[FieldMapping]:
    """Read mappings back from the editable table (Dataframe or list of rows)."""
    if rows is None:
        return []
    try:
        rows = rows.values.tolist()
    except AttributeError:
        rows = list(rows)

    mappings: List[FieldMapping] = []
    for row in rows:
        row = list(row) + [None] * (len(MAPPING_TABLE_HEADERS) - len(row))
        source = _cell(row[0])
        if not source:
            continue
        mappings.append(
            FieldMapping(
                source_field=source,
                target_field=_cell(row[1]) or source,
                match_key=_cell(row[2]) or DEFAULT_MATCH_KEY,
                replace_with_key=_cell(row[3]) or DEFAULT_REPLACE_KEY,
                remove_original=parse_flag(row[4]),
            )
        )
    return mappings
