"""Leaderboard configuration validation.

Validation collects every violated constraint instead of stopping at the first
one, so a caller can show the complete list at once. Each problem is reported
as a :class:`ValidationIssue` tagged with a JSON-pointer style path.

Contents
--------
Classes
^^^^^^^
* :class:`ValidationIssue` – One schema violation or warning.
* :class:`ValidationResult` – Outcome of :func:`validate`.

Functions
^^^^^^^^^
* :func:`validate` – Check a configuration against the leaderboard schema.
* :func:`format_validation_errors` – Render issues one per line.
* :func:`load_config_file` – Read a JSON configuration from disk.
* :func:`validate_config_file` – Load and validate, raising on failure.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Union

from jsonschema import Draft7Validator, validators
from jsonschema.exceptions import ValidationError as SchemaViolation

from leaderboard_generator.exceptions import ConfigFileError, ConfigValidationError
from leaderboard_generator.schema import LEADERBOARD_SCHEMA

logger = logging.getLogger(__name__)


def _required(validator, required, instance, schema) -> Iterator[SchemaViolation]:
    """``required`` keyword that reports each missing field at its own path."""
    if not validator.is_type(instance, "object"):
        return
    for prop in required:
        if prop not in instance:
            yield SchemaViolation(f"{prop!r} is a required property", path=[prop])


LeaderboardValidator = validators.extend(Draft7Validator, {"required": _required})
_VALIDATOR = LeaderboardValidator(LEADERBOARD_SCHEMA)


@dataclass(frozen=True)
class ValidationIssue:
    """A single validation problem.

    Attributes
    ----------
    path : str
        JSON-pointer style location, e.g. ``/columns/0/type``; ``/`` is the root.
    message : str
        Human readable description.
    """

    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


@dataclass
class ValidationResult:
    """Outcome of :func:`validate`.

    Attributes
    ----------
    valid : bool
        ``True`` when no schema constraint is violated.
    errors : List[ValidationIssue]
        Every violated constraint.
    warnings : List[ValidationIssue]
        Non-fatal observations that never affect ``valid``; only collected
        once the configuration passes the schema.
    """

    valid: bool
    errors: List[ValidationIssue] = field(default_factory=list)
    warnings: List[ValidationIssue] = field(default_factory=list)


def _pointer(parts: Iterable[Any]) -> str:
    parts = [str(p) for p in parts]
    return "/" + "/".join(parts) if parts else "/"


def _semantic_warnings(config: Dict[str, Any]) -> List[ValidationIssue]:
    """Checks that do not make a configuration invalid."""
    warnings: List[ValidationIssue] = []
    columns = [c for c in config.get("columns") or [] if isinstance(c, dict)]
    column_ids = [c.get("id") for c in columns]

    if columns and "rank" not in column_ids:
        warnings.append(ValidationIssue("/columns", "no 'rank' column defined"))

    seen = set()
    for index, col_id in enumerate(column_ids):
        if col_id in seen:
            warnings.append(ValidationIssue(f"/columns/{index}/id", f"duplicate column id {col_id!r}"))
        seen.add(col_id)

    default_sorted = [i for i, c in enumerate(columns) if c.get("defaultSort") is True]
    if len(default_sorted) > 1:
        warnings.append(
            ValidationIssue("/columns", f"{len(default_sorted)} columns set defaultSort; only one is used")
        )

    visualization = config.get("visualization")
    if not isinstance(visualization, dict):
        return warnings

    for axis_name in ("xAxis", "yAxis"):
        axis = visualization.get(axis_name)
        if not isinstance(axis, dict):
            continue
        ticks, labels = axis.get("ticks"), axis.get("tickLabels")
        if ticks is not None and labels is not None and len(ticks) != len(labels):
            warnings.append(
                ValidationIssue(
                    f"/visualization/{axis_name}",
                    "ticks and tickLabels differ in length; tick labels will be omitted",
                )
            )

    known_fields = set(c for c in column_ids if c)
    for axis_name in ("xAxis", "yAxis"):
        axis = visualization.get(axis_name)
        if isinstance(axis, dict) and axis.get("field"):
            known_fields.add(axis["field"])
    data_points = visualization.get("dataPoints")
    if isinstance(data_points, dict):
        if data_points.get("categoryField"):
            known_fields.add(data_points["categoryField"])
        if isinstance(data_points.get("categories"), dict):
            known_fields.update(data_points["categories"].keys())

    for index, entry in enumerate(config.get("initialEntries") or []):
        if not isinstance(entry, dict):
            continue
        unknown = sorted(k for k in entry if k not in known_fields)
        if unknown:
            warnings.append(
                ValidationIssue(f"/initialEntries/{index}", f"fields not used by any column: {', '.join(unknown)}")
            )
    return warnings


def validate(config: Any) -> ValidationResult:
    """Validate a leaderboard configuration.

    Parameters
    ----------
    config : Any
        Parsed configuration document (normally a ``dict``).

    Returns
    -------
    ValidationResult
        ``valid`` plus every error found. Missing required fields are reported
        at the path of the field itself (``/title``), once each.

    Examples
    --------
    >>> validate({"id": "Bad Id"}).valid
    False
    """
    errors = [
        ValidationIssue(_pointer(error.absolute_path), error.message) for error in _VALIDATOR.iter_errors(config)
    ]
    # semantic checks assume the schema types hold
    warnings = [] if errors else _semantic_warnings(config)
    return ValidationResult(valid=not errors, errors=errors, warnings=warnings)


def format_validation_errors(errors: Iterable[ValidationIssue]) -> str:
    """Format issues as ``path: message`` lines."""
    return "\n".join(str(error) for error in errors)


def load_config_file(config_path: Union[str, Path]) -> Dict[str, Any]:
    """Read and parse a JSON configuration file.

    Raises
    ------
    ConfigFileError
        If the file does not exist or does not contain valid JSON.
    """
    path = Path(config_path)
    if not path.exists():
        raise ConfigFileError(f"Configuration file not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigFileError(f"Invalid JSON in configuration file: {e}") from e


def validate_config_file(config_path: Union[str, Path]) -> Dict[str, Any]:
    """Load a configuration file and validate it.

    Warnings are logged; errors raise :class:`ConfigValidationError`.
    """
    config = load_config_file(config_path)
    result = validate(config)
    for warning in result.warnings:
        logger.warning("Configuration warning at %s", warning)
    if not result.valid:
        logger.error("Configuration validation failed:\n%s", format_validation_errors(result.errors))
        raise ConfigValidationError(result.errors)
    return config


__all__ = [
    "ValidationIssue",
    "ValidationResult",
    "validate",
    "format_validation_errors",
    "load_config_file",
    "validate_config_file",
]
