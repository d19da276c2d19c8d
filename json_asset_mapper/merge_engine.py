"""Field-mapping merge: replace entry fields with values looked up from assets."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .lookup import LookupIndex, build_lookup_indices, find_asset
from .mappings import FieldMapping, coerce_mapping

logger = logging.getLogger(__name__)


@dataclass
class FieldStats:
    field: str
    matched: int = 0
    unmatched: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {'field': self.field, 'matched': self.matched, 'unmatched': self.unmatched}


@dataclass
class MergeStatistics:
    """Running totals plus a per-source-field breakdown in first-seen order."""

    total_entries: int = 0
    total_mapping_applications: int = 0
    matched_count: int = 0
    unmatched_count: int = 0
    field_stats: List[FieldStats] = field(default_factory=list)
    _by_field: Dict[str, FieldStats] = field(default_factory=dict, init=False, repr=False, compare=False)

    def record(self, source_field: str, matched: int, unmatched: int) -> None:
        bucket = self._by_field.get(source_field)
        if bucket is None:
            bucket = FieldStats(source_field)
            self._by_field[source_field] = bucket
            self.field_stats.append(bucket)
        bucket.matched += matched
        bucket.unmatched += unmatched
        self.matched_count += matched
        self.unmatched_count += unmatched

    def get_field(self, source_field: str) -> Optional[FieldStats]:
        return self._by_field.get(source_field)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total_entries': self.total_entries,
            'total_mapping_applications': self.total_mapping_applications,
            'matched_count': self.matched_count,
            'unmatched_count': self.unmatched_count,
            'field_stats': [s.to_dict() for s in self.field_stats],
        }


@dataclass
class MergeResult:
    merged_records: List[Dict[str, Any]]
    statistics: MergeStatistics

    def to_dict(self) -> Dict[str, Any]:
        return {'merged_records': self.merged_records, 'statistics': self.statistics.to_dict()}


def resolve_replacement(index: LookupIndex, value: Any, replace_with_key: str) -> Tuple[Any, bool]:
    """Return (replacement, matched) for a single lookup value."""
    asset = find_asset(index, value)
    if asset is not None and replace_with_key in asset:
        return asset[replace_with_key], True
    return None, False


def transform_entry(
    entry: Dict[str, Any],
    mappings: Sequence[FieldMapping],
    indices: Dict[str, LookupIndex],
    stats: MergeStatistics,
) -> Dict[str, Any]:
    """Apply every mapping, in order, to a shallow copy of `entry`.

    Source values are always read from the original entry, so a mapping never
    sees another mapping's writes.
    """
    new_entry = dict(entry)

    for mapping in mappings:
        index = indices.get(mapping.match_key)
        matched = unmatched = 0

        if not index:
            new_entry[mapping.target_field] = None
            unmatched = 1
        elif mapping.source_field not in entry:
            new_entry[mapping.target_field] = None
            unmatched = 1
        else:
            source_value = entry[mapping.source_field]
            if isinstance(source_value, list):
                results = []
                for item in source_value:
                    replacement, found = resolve_replacement(index, item, mapping.replace_with_key)
                    results.append(replacement)
                    if found:
                        matched += 1
                    else:
                        unmatched += 1
                new_entry[mapping.target_field] = results
            else:
                replacement, found = resolve_replacement(index, source_value, mapping.replace_with_key)
                new_entry[mapping.target_field] = replacement
                if found:
                    matched = 1
                else:
                    unmatched = 1

            if mapping.remove_original:
                # Also drops the value just written when target == source.
                new_entry.pop(mapping.source_field, None)

        stats.record(mapping.source_field, matched, unmatched)

    return new_entry


def merge_records(
    entries: Sequence[Dict[str, Any]],
    assets: Sequence[Dict[str, Any]],
    mappings: Iterable[Any],
) -> MergeResult:
    """Merge asset values into entries according to `mappings`.

    Mappings may be FieldMapping instances or dicts (camelCase or snake_case).
    Inputs are never mutated; every output record is a new dict.
    """
    mappings = [coerce_mapping(m) for m in mappings]
    indices = build_lookup_indices(assets, (m.match_key for m in mappings))

    stats = MergeStatistics(
        total_entries=len(entries),
        total_mapping_applications=len(mappings) * len(entries),
    )
    merged = [transform_entry(entry, mappings, indices, stats) for entry in entries]

    logger.info(
        "Merged %d entries with %d mappings: %d matched, %d unmatched",
        stats.total_entries,
        len(mappings),
        stats.matched_count,
        stats.unmatched_count,
    )
    return MergeResult(merged_records=merged, statistics=stats)
