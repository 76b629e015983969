"""Tests for the shared JSON datastore."""

from __future__ import annotations

import json
from datetime import date

import pytest

from leaderboard_generator.datastore import (
    DATA_FILE_NAME,
    entries_frame,
    get_leaderboard,
    list_leaderboards,
    load_datastore,
    merge_leaderboard,
)
from leaderboard_generator.exceptions import DatastoreError


class TestMerge:
    """Read-modify-write of leaderboard records."""

    def test_creates_document(self, tmp_path, minimal_config):
        path = merge_leaderboard(minimal_config, tmp_path, today=date(2025, 3, 1))
        assert path == tmp_path / DATA_FILE_NAME
        document = json.loads(path.read_text(encoding="utf-8"))
        record = document["qc-test"]
        assert record["metadata"] == {
            "title": "QC Test",
            "description": "d",
            "created": "2025-03-01",
            "lastUpdated": "2025-03-01",
        }
        assert record["stats"] == {}
        assert record["entries"] == []
        assert len(record["columns"]) == 1
        assert record["content"] == {"sections": []}

    def test_two_space_indent(self, tmp_path, minimal_config):
        path = merge_leaderboard(minimal_config, tmp_path, today=date(2025, 3, 1))
        assert path.read_text(encoding="utf-8").startswith('{\n  "qc-test": {\n    "metadata"')

    def test_preserves_other_records(self, tmp_path, minimal_config, full_config):
        (tmp_path / DATA_FILE_NAME).write_text(json.dumps({"peak_circuits": {"entries": [1]}}), encoding="utf-8")
        merge_leaderboard(minimal_config, tmp_path)
        merge_leaderboard(full_config, tmp_path)
        document = load_datastore(tmp_path)
        assert set(document) == {"peak_circuits", "qc-test", "quantum-chemistry"}
        assert document["peak_circuits"] == {"entries": [1]}
        assert document["quantum-chemistry"]["stats"] == full_config["initialStats"]

    def test_remerge_only_changes_dates(self, tmp_path, full_config):
        merge_leaderboard(full_config, tmp_path, today=date(2025, 1, 1))
        first = load_datastore(tmp_path)["quantum-chemistry"]
        merge_leaderboard(full_config, tmp_path, today=date(2025, 2, 1))
        second = load_datastore(tmp_path)["quantum-chemistry"]

        assert second["metadata"]["created"] == "2025-02-01"
        assert second["metadata"]["lastUpdated"] == "2025-02-01"
        first.pop("metadata")
        second.pop("metadata")
        assert first == second

    def test_invalid_json_raises(self, tmp_path, minimal_config):
        (tmp_path / DATA_FILE_NAME).write_text("{broken", encoding="utf-8")
        with pytest.raises(DatastoreError, match="not valid JSON"):
            merge_leaderboard(minimal_config, tmp_path)

    def test_non_object_document_raises(self, tmp_path):
        (tmp_path / DATA_FILE_NAME).write_text("[]", encoding="utf-8")
        with pytest.raises(DatastoreError):
            load_datastore(tmp_path)

    def test_custom_data_file(self, tmp_path, minimal_config):
        path = merge_leaderboard(minimal_config, tmp_path, data_file="boards.json")
        assert path.name == "boards.json"
        assert get_leaderboard(tmp_path, "qc-test", data_file="boards.json") is not None


class TestReadHelpers:
    """Listing and exporting stored leaderboards."""

    def test_missing_document_is_empty(self, tmp_path):
        assert load_datastore(tmp_path) == {}
        assert list_leaderboards(tmp_path) == []
        assert get_leaderboard(tmp_path, "qc-test") is None

    def test_list_leaderboards(self, tmp_path, full_config):
        merge_leaderboard(full_config, tmp_path, today=date(2025, 5, 4))
        assert list_leaderboards(tmp_path) == [
            {
                "id": "quantum-chemistry",
                "title": "Quantum Chemistry",
                "description": "Ground-state energy benchmarks",
                "created": "2025-05-04",
                "lastUpdated": "2025-05-04",
                "entries": 2,
            }
        ]

    def test_entries_frame_column_order(self, tmp_path, full_config):
        merge_leaderboard(full_config, tmp_path)
        frame = entries_frame(tmp_path, "quantum-chemistry")
        assert list(frame.columns) == ["rank", "method", "accuracy", "runtime", "qubits", "hardware"]
        assert frame["method"].tolist() == ["VQE", "DMRG"]

    def test_entries_frame_empty(self, tmp_path, minimal_config):
        merge_leaderboard(minimal_config, tmp_path)
        frame = entries_frame(tmp_path, "qc-test")
        assert frame.empty
        assert list(frame.columns) == ["rank"]

    def test_entries_frame_unknown_id(self, tmp_path):
        with pytest.raises(DatastoreError, match="not found"):
            entries_frame(tmp_path, "nope")
