from __future__ import annotations

import logging
from typing import Any, List

import gradio as gr

from .config import app_config
from .io_utils import load_records, serialize_records, write_json_export
from .mappings import apply_global_defaults, build_default_mappings, mappings_from_rows, mappings_to_rows
from .merge_engine import MergeStatistics, merge_records
from .records import collect_field_names, describe_export, preview_records, summarize_records

logger = logging.getLogger(__name__)


def update_key_dropdown(keys: List[str], preferred: str):
    """Offer the asset keys but keep the configured default selected."""
    return gr.update(choices=keys, value=preferred, interactive=True)


def handle_files_upload(entries_file, assets_file):
    """Load both datasets and populate the field selector and key dropdowns."""
    empty = (
        None,
        None,
        gr.update(choices=[], value=[]),
        gr.update(choices=[], value=app_config.default_match_key),
        gr.update(choices=[], value=app_config.default_replace_key),
    )
    if entries_file is None or assets_file is None:
        return (*empty, "Please upload both entries and assets files.")

    try:
        entries = load_records(entries_file, 'entries')
        assets = load_records(assets_file, 'assets')
    except ValueError as exc:
        logger.warning("Rejected upload: %s", exc)
        return (*empty, str(exc))

    entry_fields = collect_field_names(entries)
    asset_keys = collect_field_names(assets)
    status = (
        f"Loaded {len(entries)} entries ({len(entry_fields)} fields) "
        f"and {len(assets)} assets ({len(asset_keys)} keys)."
    )
    return (
        entries,
        assets,
        gr.update(choices=entry_fields, value=[]),
        update_key_dropdown(asset_keys, app_config.default_match_key),
        update_key_dropdown(asset_keys, app_config.default_replace_key),
        status,
    )


def select_all_fields(entries):
    return collect_field_names(entries or [])


def clear_selected_fields():
    return []


def update_mapping_table(selected_fields, mapping_df, match_key=None, replace_key=None):
    """Rebuild the mapping table for the current selection, keeping edited rows."""
    current = mappings_from_rows(mapping_df)
    mappings = build_default_mappings(
        selected_fields or [],
        current,
        match_key or app_config.default_match_key,
        replace_key or app_config.default_replace_key,
    )
    return mappings_to_rows(mappings)


def apply_global_defaults_handler(mapping_df, match_key, replace_key):
    mappings = mappings_from_rows(mapping_df)
    if not match_key or not replace_key:
        return mappings_to_rows(mappings)
    return mappings_to_rows(apply_global_defaults(mappings, match_key, replace_key))


def format_statistics(stats: MergeStatistics) -> str:
    lines = [
        f"Entries: {stats.total_entries} | Mapping applications: {stats.total_mapping_applications}",
        f"Matched: {stats.matched_count} | Unmatched: {stats.unmatched_count}",
    ]
    for item in stats.field_stats:
        lines.append(f"- {item.field}: {item.matched} matched, {item.unmatched} unmatched")
    return "\n".join(lines)


def statistics_rows(stats: MergeStatistics) -> List[List[Any]]:
    return [[s.field, s.matched, s.unmatched] for s in stats.field_stats]


def perform_merge(entries, assets, mapping_df):
    if entries is None or assets is None:
        raise ValueError("Please upload both entries and assets files.")

    mappings = mappings_from_rows(mapping_df)
    if not mappings:
        raise ValueError("Please configure at least one field mapping.")

    return merge_records(entries, assets, mappings)


def merge_datasets_handler(entries, assets, mapping_df, file_name):
    try:
        result = perform_merge(entries, assets, mapping_df)
    except ValueError as exc:
        return None, str(exc), [], "", None

    stats = result.statistics
    merged_json = serialize_records(result.merged_records)
    summary = (
        f"{summarize_records(result.merged_records)}\n"
        f"{describe_export(result.merged_records)}\n"
        f"{format_statistics(stats)}"
    )
    preview = preview_records(result.merged_records, app_config.preview_limit) or None

    try:
        path = write_json_export(result.merged_records, file_name, app_config.export_filename)
    except OSError as exc:
        logger.exception("Writing merged export failed")
        return None, f"Error writing merged file: {exc}\n{summary}", statistics_rows(stats), merged_json, preview

    return path, summary, statistics_rows(stats), merged_json, preview


def reset_handler():
    """Clear uploads, selections, mappings and results."""
    return (
        None,
        None,
        None,
        None,
        "",
        gr.update(choices=[], value=[]),
        gr.update(choices=[], value=app_config.default_match_key),
        gr.update(choices=[], value=app_config.default_replace_key),
        [],
        "",
        None,
        "",
        [],
        "",
        None,
    )
