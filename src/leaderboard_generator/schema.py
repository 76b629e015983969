"""JSON Schema describing a leaderboard configuration document."""

from __future__ import annotations

from typing import Any, Dict

ID_PATTERN = r"^[a-z0-9_-]+$"

COLUMN_TYPES = ("number", "text", "percentage", "time", "hardware")
SORT_DIRECTIONS = ("asc", "desc")
VISUALIZATION_TYPES = ("scatter", "bar", "line")
POINT_SHAPES = ("circle", "square", "triangle")
LINE_STYLES = ("solid", "dashed", "dotted")
SECTION_TYPES = ("text", "cards", "grid")

REQUIRED_FIELDS = ("id", "title", "shortDescription", "columns", "visualization", "content")


def _axis_schema() -> Dict[str, Any]:
    return {
        "type": "object",
        "required": ["field", "label"],
        "properties": {
            "field": {"type": "string"},
            "label": {"type": "string"},
            "min": {"type": "number"},
            "max": {"type": "number"},
            "ticks": {"type": "array", "items": {"type": "number"}},
            "tickLabels": {"type": "array", "items": {"type": "string"}},
        },
    }


LEADERBOARD_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "required": list(REQUIRED_FIELDS),
    "properties": {
        "id": {"type": "string", "pattern": ID_PATTERN},
        "title": {"type": "string"},
        "shortDescription": {"type": "string"},
        "longDescription": {"type": "string"},
        "navigation": {
            "type": "object",
            "properties": {"position": {"type": "integer", "minimum": 0}},
        },
        "initialStats": {"type": "object", "additionalProperties": True},
        "columns": {
            "type": "array",
            "minItems": 1,
            "items": {
                "type": "object",
                "required": ["id", "name", "type"],
                "properties": {
                    "id": {"type": "string"},
                    "name": {"type": "string"},
                    "type": {"type": "string", "enum": list(COLUMN_TYPES)},
                    "width": {"type": "string"},
                    "className": {"type": "string"},
                    "sortable": {"type": "boolean"},
                    "defaultSort": {"type": "boolean"},
                    "sortDirection": {"type": "string", "enum": list(SORT_DIRECTIONS)},
                    "formatting": {
                        "type": "object",
                        "properties": {
                            "thresholds": {
                                "type": "array",
                                "items": {
                                    "type": "object",
                                    "required": ["value", "class"],
                                    "properties": {
                                        "value": {"type": "number"},
                                        "class": {"type": "string"},
                                    },
                                },
                            }
                        },
                    },
                },
            },
        },
        "initialEntries": {
            "type": "array",
            "items": {"type": "object", "additionalProperties": True},
        },
        "visualization": {
            "type": "object",
            "required": ["type", "xAxis", "yAxis", "dataPoints"],
            "properties": {
                "type": {"type": "string", "enum": list(VISUALIZATION_TYPES)},
                "xAxis": _axis_schema(),
                "yAxis": _axis_schema(),
                "dataPoints": {
                    "type": "object",
                    "required": ["categoryField", "categories"],
                    "properties": {
                        "categoryField": {"type": "string"},
                        "categories": {
                            "type": "object",
                            "additionalProperties": {
                                "type": "object",
                                "required": ["shape", "color", "label"],
                                "properties": {
                                    "shape": {"type": "string", "enum": list(POINT_SHAPES)},
                                    "color": {"type": "string"},
                                    "label": {"type": "string"},
                                },
                            },
                        },
                    },
                },
                "referenceLine": {
                    "type": "object",
                    "properties": {
                        "x": {"type": "number"},
                        "y": {"type": "number"},
                        "label": {"type": "string"},
                        "style": {"type": "string", "enum": list(LINE_STYLES)},
                    },
                },
            },
        },
        "content": {
            "type": "object",
            "required": ["sections"],
            "properties": {
                "sections": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "required": ["title", "type"],
                        # text sections need a body
                        "if": {"required": ["type"], "properties": {"type": {"const": "text"}}},
                        "then": {"required": ["content"]},
                        "properties": {
                            "title": {"type": "string"},
                            "type": {"type": "string", "enum": list(SECTION_TYPES)},
                            "content": {"type": "string"},
                            "cards": {
                                "type": "array",
                                "items": {
                                    "type": "object",
                                    "required": ["title", "content"],
                                    "properties": {
                                        "title": {"type": "string"},
                                        "content": {"type": "string"},
                                    },
                                },
                            },
                        },
                    },
                }
            },
        },
        "customCss": {"type": "string"},
    },
}
