"""Shared JSON datastore read by every leaderboard page.

The document maps leaderboard id to a record holding metadata, stats,
columns, entries, visualization and content. Writes rewrite the whole
document; concurrent generators are not coordinated and the last writer
wins.
"""

from __future__ import annotations

import json
import logging
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import pandas as pd

from leaderboard_generator.exceptions import DatastoreError

logger = logging.getLogger(__name__)

DATA_FILE_NAME = "leaderboard_data.json"


def _today_utc() -> date:
    return datetime.now(timezone.utc).date()


def load_datastore(base_dir: Union[str, Path], data_file: str = DATA_FILE_NAME) -> Dict[str, Any]:
    """Read the datastore document, or an empty one if the file is absent.

    Raises
    ------
    DatastoreError
        If the file exists but cannot be read or is not a JSON object.
    """
    path = Path(base_dir) / data_file
    if not path.exists():
        return {}

    try:
        with open(path, "r", encoding="utf-8") as f:
            document = json.load(f)
    except json.JSONDecodeError as e:
        logger.error("Datastore %s is not valid JSON: %s", path, e)
        raise DatastoreError(f"Datastore {path} is not valid JSON: {e}") from e
    except OSError as e:
        logger.error("Failed to read datastore %s: %s", path, e)
        raise DatastoreError(f"Failed to read datastore {path}: {e}") from e

    if not isinstance(document, dict):
        raise DatastoreError(f"Datastore {path} must contain a JSON object")
    return document


def build_record(config: Mapping[str, Any], today: date) -> Dict[str, Any]:
    """Datastore record for one leaderboard configuration."""
    stamp = today.isoformat()
    return {
        "metadata": {
            "title": config["title"],
            "description": config["shortDescription"],
            "created": stamp,
            "lastUpdated": stamp,
        },
        "stats": config.get("initialStats") or {},
        "columns": config["columns"],
        "entries": config.get("initialEntries") or [],
        "visualization": config["visualization"],
        "content": config.get("content"),
    }


def merge_leaderboard(
    config: Mapping[str, Any],
    base_dir: Union[str, Path],
    today: Optional[date] = None,
    data_file: str = DATA_FILE_NAME,
) -> Path:
    """Insert or replace the record for ``config["id"]`` and rewrite the document.

    Records for other leaderboards are preserved. ``created`` is stamped with
    the current date on every merge, so regenerating a board resets it.

    Parameters
    ----------
    config : Mapping[str, Any]
        Validated leaderboard configuration.
    base_dir : str or Path
        Site root holding the datastore.
    today : date, optional
        Date stamp to use; defaults to the current UTC date.
    data_file : str, default="leaderboard_data.json"
        Datastore file name under ``base_dir``.

    Returns
    -------
    Path
        Path of the written datastore.
    """
    path = Path(base_dir) / data_file
    document = load_datastore(base_dir, data_file)
    document[config["id"]] = build_record(config, today or _today_utc())

    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(document, f, indent=2, ensure_ascii=False)
    except OSError as e:
        logger.error("Failed to write datastore %s: %s", path, e)
        raise DatastoreError(f"Failed to write datastore {path}: {e}") from e

    logger.info("Updated data file: %s", path)
    return path


def list_leaderboards(base_dir: Union[str, Path], data_file: str = DATA_FILE_NAME) -> List[Dict[str, Any]]:
    """Summaries (id, title, description, dates, entry count) of every stored board."""
    document = load_datastore(base_dir, data_file)
    summaries = []
    for leaderboard_id, record in document.items():
        metadata = record.get("metadata") or {}
        summaries.append(
            {
                "id": leaderboard_id,
                "title": metadata.get("title", ""),
                "description": metadata.get("description", ""),
                "created": metadata.get("created", ""),
                "lastUpdated": metadata.get("lastUpdated", ""),
                "entries": len(record.get("entries") or []),
            }
        )
    return summaries


def get_leaderboard(
    base_dir: Union[str, Path], leaderboard_id: str, data_file: str = DATA_FILE_NAME
) -> Optional[Dict[str, Any]]:
    return load_datastore(base_dir, data_file).get(leaderboard_id)


def entries_frame(
    base_dir: Union[str, Path], leaderboard_id: str, data_file: str = DATA_FILE_NAME
) -> pd.DataFrame:
    """Entries of one leaderboard as a DataFrame, columns in table order.

    Entry fields that are not table columns (e.g. the chart category field)
    follow the table columns.

    Raises
    ------
    DatastoreError
        If no leaderboard with ``leaderboard_id`` is stored.
    """
    record = get_leaderboard(base_dir, leaderboard_id, data_file)
    if record is None:
        raise DatastoreError(f"Leaderboard not found: {leaderboard_id}")

    frame = pd.DataFrame(record.get("entries") or [])
    column_ids = [column["id"] for column in record.get("columns") or []]
    ordered = [c for c in column_ids if c in frame.columns]
    ordered += [c for c in frame.columns if c not in ordered]
    if frame.empty:
        return pd.DataFrame(columns=column_ids)
    return frame[ordered]
