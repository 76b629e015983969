"""Tests for leaderboard configuration validation."""

from __future__ import annotations

import json

import pytest

from leaderboard_generator.exceptions import ConfigFileError, ConfigValidationError
from leaderboard_generator.validator import (
    ValidationIssue,
    format_validation_errors,
    load_config_file,
    validate,
    validate_config_file,
)


class TestValidate:
    """Schema validation of in-memory configurations."""

    def test_minimal_config_is_valid(self, minimal_config):
        result = validate(minimal_config)
        assert result.valid
        assert result.errors == []

    def test_full_config_is_valid(self, full_config):
        result = validate(full_config)
        assert result.valid, format_validation_errors(result.errors)

    @pytest.mark.parametrize("field", ["id", "title", "shortDescription", "columns", "visualization", "content"])
    def test_missing_required_field_reported_once(self, minimal_config, field):
        del minimal_config[field]
        result = validate(minimal_config)
        assert not result.valid
        matching = [e for e in result.errors if e.path == f"/{field}"]
        assert len(matching) == 1
        assert field in matching[0].message

    def test_bad_id_pattern(self, minimal_config):
        minimal_config["id"] = "Bad Id"
        result = validate(minimal_config)
        assert [e.path for e in result.errors] == ["/id"]

    def test_every_error_is_collected(self, minimal_config):
        minimal_config["id"] = "UPPER"
        minimal_config["columns"][0]["type"] = "colour"
        minimal_config["visualization"]["type"] = "pie"
        paths = {e.path for e in validate(minimal_config).errors}
        assert paths == {"/id", "/columns/0/type", "/visualization/type"}

    def test_empty_columns_rejected(self, minimal_config):
        minimal_config["columns"] = []
        assert not validate(minimal_config).valid

    def test_negative_navigation_position_rejected(self, minimal_config):
        minimal_config["navigation"] = {"position": -1}
        errors = validate(minimal_config).errors
        assert [e.path for e in errors] == ["/navigation/position"]

    def test_text_section_requires_content(self, minimal_config):
        minimal_config["content"]["sections"] = [{"title": "About", "type": "text"}]
        result = validate(minimal_config)
        assert not result.valid
        assert any(e.path == "/content/sections/0/content" for e in result.errors)

    @pytest.mark.parametrize(
        "field, value, path",
        [
            ("columns", 5, "/columns"),
            ("initialEntries", 3, "/initialEntries"),
            ("columns", [{"id": ["rank"], "name": "Rank", "type": "number"}], "/columns/0/id"),
        ],
    )
    def test_wrong_types_are_reported_not_raised(self, minimal_config, field, value, path):
        minimal_config[field] = value
        result = validate(minimal_config)
        assert not result.valid
        assert path in [e.path for e in result.errors]
        assert result.warnings == []

    def test_non_list_ticks_are_reported(self, minimal_config):
        minimal_config["visualization"]["xAxis"].update(ticks=5, tickLabels=5)
        result = validate(minimal_config)
        assert not result.valid
        assert {"/visualization/xAxis/ticks", "/visualization/xAxis/tickLabels"} <= {e.path for e in result.errors}

    def test_non_object_config(self):
        result = validate(["not", "a", "config"])
        assert not result.valid
        assert result.errors[0].path == "/"


class TestSemanticWarnings:
    """Non-fatal observations never change ``valid``."""

    def test_missing_rank_column_warns(self, minimal_config):
        minimal_config["columns"] = [{"id": "score", "name": "Score", "type": "number"}]
        result = validate(minimal_config)
        assert result.valid
        assert any("rank" in w.message for w in result.warnings)

    def test_duplicate_column_ids_warn(self, minimal_config):
        minimal_config["columns"].append({"id": "rank", "name": "Rank again", "type": "number"})
        result = validate(minimal_config)
        assert result.valid
        assert any(w.path == "/columns/1/id" for w in result.warnings)

    def test_tick_label_mismatch_warns(self, minimal_config):
        minimal_config["visualization"]["xAxis"].update(ticks=[0, 50, 100], tickLabels=["0", "100"])
        result = validate(minimal_config)
        assert result.valid
        assert any(w.path == "/visualization/xAxis" for w in result.warnings)

    def test_unknown_entry_fields_warn(self, full_config):
        full_config["initialEntries"][0]["extra"] = "?"
        warnings = validate(full_config).warnings
        assert [w.path for w in warnings] == ["/initialEntries/0"]
        assert "extra" in warnings[0].message

    def test_full_config_has_no_warnings(self, full_config):
        assert validate(full_config).warnings == []


class TestConfigFiles:
    """Loading configurations from disk."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigFileError, match="not found"):
            load_config_file(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{ not json", encoding="utf-8")
        with pytest.raises(ConfigFileError, match="Invalid JSON"):
            load_config_file(path)

    def test_validate_config_file_returns_config(self, config_file, full_config):
        assert validate_config_file(config_file) == full_config

    def test_validate_config_file_raises_with_issues(self, tmp_path, minimal_config):
        del minimal_config["title"]
        path = tmp_path / "bad.json"
        path.write_text(json.dumps(minimal_config), encoding="utf-8")
        with pytest.raises(ConfigValidationError) as excinfo:
            validate_config_file(path)
        assert [e.path for e in excinfo.value.errors] == ["/title"]
        assert excinfo.value.user_message == "Invalid configuration"


def test_format_validation_errors():
    issues = [ValidationIssue("/id", "bad id"), ValidationIssue("/title", "missing")]
    assert format_validation_errors(issues) == "/id: bad id\n/title: missing"
