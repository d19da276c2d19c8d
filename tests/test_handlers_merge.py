"""Tests for the Gradio event handlers (no UI launched)."""
import json
import os

import pytest

from json_asset_mapper.io_utils import serialize_records

from json_asset_mapper.handlers_merge import (
    apply_global_defaults_handler,
    handle_files_upload,
    merge_datasets_handler,
    reset_handler,
    select_all_fields,
    update_mapping_table,
)


@pytest.fixture
def uploaded(tmp_path):
    entries = tmp_path / "entries.json"
    assets = tmp_path / "assets.json"
    entries.write_text(json.dumps([{"id": 1, "assetId": 5, "title": "t"}]), encoding="utf-8")
    assets.write_text(json.dumps([{"id": 5, "filename": "a.png", "size": 10}]), encoding="utf-8")
    return str(entries), str(assets)


class TestUpload:
    """Loading both datasets."""

    def test_both_files_required(self, uploaded):
        result = handle_files_upload(uploaded[0], None)
        assert result[0] is None and result[1] is None
        assert result[-1] == "Please upload both entries and assets files."

    def test_successful_upload(self, uploaded):
        entries, assets, fields, match_key, replace_key, status = handle_files_upload(*uploaded)
        assert entries == [{"id": 1, "assetId": 5, "title": "t"}]
        assert assets == [{"id": 5, "filename": "a.png", "size": 10}]
        assert fields["choices"] == ["assetId", "id", "title"]
        assert match_key["value"] == "id"
        assert replace_key["value"] == "filename"
        assert status.startswith("Loaded 1 entries")

    def test_invalid_upload_reports_message(self, tmp_path, uploaded):
        bad = tmp_path / "bad.json"
        bad.write_text('{"id": 1}', encoding="utf-8")
        result = handle_files_upload(str(bad), uploaded[1])
        assert result[0] is None
        assert "must contain a JSON array" in result[-1]


class TestMappingTable:
    """Field selection and mapping editor."""

    def test_select_all(self):
        assert select_all_fields([{"b": 1}, {"a": 1}]) == ["a", "b"]
        assert select_all_fields(None) == []

    def test_default_rows_for_selection(self):
        rows = update_mapping_table(["assetId"], None)
        assert rows == [["assetId", "asset", "id", "filename", False]]

    def test_edited_rows_are_kept(self):
        current = [["assetId", "image", "id", "filename", True]]
        rows = update_mapping_table(["assetId", "coverId"], current, "id", "filename")
        assert rows == [
            ["assetId", "image", "id", "filename", True],
            ["coverId", "cover", "id", "filename", False],
        ]

    def test_apply_global_defaults(self):
        current = [["assetId", "image", "id", "filename", True]]
        rows = apply_global_defaults_handler(current, "uuid", "url")
        assert rows == [["assetId", "image", "uuid", "url", True]]


class TestMergeHandler:
    """Running a merge from the UI state."""

    def test_requires_mappings(self):
        path, status, stats, merged_json, preview = merge_datasets_handler([{"a": 1}], [], [], None)
        assert path is None
        assert status == "Please configure at least one field mapping."

    def test_requires_data(self):
        path, status, _, _, _ = merge_datasets_handler(None, None, [["a", "a", "id", "filename", False]], None)
        assert path is None
        assert status == "Please upload both entries and assets files."

    def test_merge_and_export(self):
        entries = [{"id": 1, "assetId": 5}, {"id": 2, "assetId": 6}]
        assets = [{"id": 5, "filename": "a.png"}]
        rows = [["assetId", "image", "id", "filename", True]]

        path, status, stats, merged_json, preview = merge_datasets_handler(entries, assets, rows, "out")

        assert os.path.basename(path) == "out.json"
        with open(path, encoding="utf-8") as f:
            assert json.load(f) == [{"id": 1, "image": "a.png"}, {"id": 2, "image": None}]
        assert "Matched: 1 | Unmatched: 1" in status
        assert stats == [["assetId", 1, 1]]
        assert merged_json == serialize_records([{"id": 1, "image": "a.png"}, {"id": 2, "image": None}])
        assert merged_json.startswith("[\n  {\n    \"id\": 1,")
        assert "2 items" in status
        assert preview == [{"id": 1, "image": "a.png"}, {"id": 2, "image": None}]


class TestDefaultKeys:
    """Configured match/replace defaults survive uploads without those keys."""

    def test_defaults_kept_when_assets_lack_keys(self, tmp_path):
        entries = tmp_path / "entries.json"
        assets = tmp_path / "assets.json"
        entries.write_text(json.dumps([{"assetId": 1}]), encoding="utf-8")
        assets.write_text(json.dumps([{"code": 1, "url": "x"}]), encoding="utf-8")

        _, _, _, match_key, replace_key, _ = handle_files_upload(str(entries), str(assets))
        assert match_key["choices"] == ["code", "url"]
        assert match_key["value"] == "id"
        assert replace_key["value"] == "filename"

        rows = update_mapping_table(["assetId"], None, match_key["value"], replace_key["value"])
        assert rows == [["assetId", "asset", "id", "filename", False]]


class TestReset:
    """Start Over clears every step."""

    def test_reset_clears_everything(self):
        (
            entries_file,
            assets_file,
            entries,
            assets,
            status,
            fields,
            match_key,
            replace_key,
            mapping_rows,
            file_name,
            download,
            summary,
            stats,
            merged_json,
            preview,
        ) = reset_handler()
        assert entries_file is None and assets_file is None
        assert entries is None and assets is None
        assert status == "" and summary == "" and merged_json == "" and file_name == ""
        assert fields["choices"] == [] and fields["value"] == []
        assert match_key["value"] == "id"
        assert replace_key["value"] == "filename"
        assert mapping_rows == [] and stats == []
        assert download is None and preview is None
