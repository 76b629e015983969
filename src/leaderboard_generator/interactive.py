"""Build a leaderboard configuration by asking questions on the terminal.

The prompt functions are injectable so the flow can be driven by a script in
tests. By default they are backed by :mod:`rich.prompt`.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

from rich.console import Console
from rich.prompt import Confirm, IntPrompt, Prompt

from leaderboard_generator.schema import COLUMN_TYPES, ID_PATTERN, VISUALIZATION_TYPES

logger = logging.getLogger(__name__)

COLUMN_ID_PATTERN = r"^[a-zA-Z0-9_]+$"

RANK_COLUMN = {
    "id": "rank",
    "name": "Rank",
    "type": "number",
    "width": "60px",
    "className": "rank-column",
    "sortable": True,
    "defaultSort": True,
    "sortDirection": "asc",
}
DEFAULT_TICKS = [0, 25, 50, 75, 100]
DEFAULT_CATEGORIES = {
    "quantum": {"shape": "circle", "color": "#0f62fe", "label": "Quantum Hardware"},
    "classical": {"shape": "square", "color": "#9B5CFF", "label": "Classical Hardware"},
}
DEFAULT_REFERENCE_LINE = {"y": 95, "label": "Classical Limit", "style": "dashed"}
DEFAULT_STATS = {"totalEntries": 0, "institutions": 0, "bestScore": "0%", "averageTime": "0 min"}

AskFn = Callable[..., str]
ConfirmFn = Callable[..., bool]
ChooseFn = Callable[[str, Sequence[str], str], str]


def rich_ask(message: str, default: Optional[str] = None) -> str:
    if default is None:
        return Prompt.ask(message)
    return Prompt.ask(message, default=default)


def rich_confirm(message: str, default: bool = False) -> bool:
    return Confirm.ask(message, default=default)


def rich_choose(message: str, choices: Sequence[str], default: str) -> str:
    return Prompt.ask(message, choices=list(choices), default=default)


def rich_ask_int(message: str, default: int) -> int:
    return IntPrompt.ask(message, default=default)


class InteractiveSession:
    """Question flow producing a configuration dict.

    Parameters
    ----------
    ask, confirm, choose, ask_int : callable, optional
        Prompt functions; default to the :mod:`rich.prompt` backed ones.
    console : rich.console.Console, optional
        Where section headings and validation hints are printed.
    """

    def __init__(
        self,
        ask: AskFn = rich_ask,
        confirm: ConfirmFn = rich_confirm,
        choose: ChooseFn = rich_choose,
        ask_int: Callable[[str, int], int] = rich_ask_int,
        console: Optional[Console] = None,
    ):
        self.ask = ask
        self.confirm = confirm
        self.choose = choose
        self.ask_int = ask_int
        self.console = console or Console()

    def _ask_until(self, message: str, pattern: str, hint: str, default: Optional[str] = None) -> str:
        while True:
            answer = self.ask(message, default=default)
            if re.match(pattern, answer or ""):
                return answer
            self.console.print(f"[yellow]{hint}[/yellow]")

    def _ask_required(self, message: str, hint: str) -> str:
        return self._ask_until(message, r"^\s*\S", hint)

    def basic_info(self) -> Dict[str, Any]:
        leaderboard_id = self._ask_until(
            "Enter leaderboard ID (URL-friendly, e.g., quantum-chemistry)",
            ID_PATTERN,
            "ID must contain only lowercase letters, numbers, underscores, and hyphens",
        )
        title = self._ask_required("Enter leaderboard title", "Title is required")
        short_description = self._ask_required("Enter short description", "Description is required")
        long_description = self.ask("Enter longer description (optional)", default="")
        return {
            "id": leaderboard_id,
            "title": title,
            "shortDescription": short_description,
            "longDescription": long_description or short_description,
        }

    def navigation(self) -> Dict[str, Any]:
        position = self.ask_int("Enter position in navigation menu (0-based index, -1 for end)", -1)
        return {"position": position} if position >= 0 else {}

    def columns(self) -> List[Dict[str, Any]]:
        self.console.print("\n[blue]Defining columns for the leaderboard table:[/blue]")
        columns = [dict(RANK_COLUMN)]
        while True:
            columns.append(
                {
                    "id": self._ask_until(
                        "Enter column ID",
                        COLUMN_ID_PATTERN,
                        "ID must contain only letters, numbers, and underscores",
                    ),
                    "name": self._ask_required("Enter column display name", "Name is required"),
                    "type": self.choose("Select column data type", COLUMN_TYPES, "number"),
                    "width": self.ask("Enter column width (CSS value, e.g., 100px)", default="100px"),
                    "sortable": self.confirm("Is this column sortable?", default=True),
                }
            )
            if not self.confirm("Add another column?", default=False):
                return columns

    def visualization(self, columns: List[Dict[str, Any]]) -> Dict[str, Any]:
        self.console.print("\n[blue]Defining visualization:[/blue]")
        x_default = columns[1] if len(columns) > 1 else {"id": "value", "name": "Value"}
        y_default = columns[2] if len(columns) > 2 else {"id": "score", "name": "Score"}

        chart_type = self.choose("Select visualization type", VISUALIZATION_TYPES, "scatter")
        x_field = self.ask("Enter data field for x-axis", default=x_default["id"])
        x_label = self.ask("Enter label for x-axis", default=x_default["name"])
        y_field = self.ask("Enter data field for y-axis", default=y_default["id"])
        y_label = self.ask("Enter label for y-axis", default=y_default["name"])
        category_field = self.ask("Enter field for categorizing data points", default="hardware")

        return {
            "type": chart_type,
            "xAxis": {
                "field": x_field,
                "label": x_label,
                "min": 0,
                "max": 100,
                "ticks": list(DEFAULT_TICKS),
                "tickLabels": [str(t) for t in DEFAULT_TICKS],
            },
            "yAxis": {
                "field": y_field,
                "label": y_label,
                "min": 0,
                "max": 100,
                "ticks": list(DEFAULT_TICKS),
                "tickLabels": [f"{t}%" for t in DEFAULT_TICKS],
            },
            "dataPoints": {
                "categoryField": category_field,
                "categories": {key: dict(value) for key, value in DEFAULT_CATEGORIES.items()},
            },
            "referenceLine": dict(DEFAULT_REFERENCE_LINE),
        }

    def content(self) -> Dict[str, Any]:
        self.console.print("\n[blue]Defining content sections:[/blue]")
        sections: List[Dict[str, Any]] = []
        if not self.confirm("Add a content section?", default=True):
            return {"sections": sections}

        title = self._ask_required("Enter section title", "Title is required")
        section_type = self.choose("Select section type", ("text", "cards"), "text")
        if section_type == "text":
            sections.append(
                {"title": title, "type": "text", "content": self._ask_required("Enter section content", "Content is required")}
            )
            return {"sections": sections}

        cards = []
        while True:
            cards.append(
                {
                    "title": self._ask_required("Enter card title", "Title is required"),
                    "content": self._ask_required("Enter card content", "Content is required"),
                }
            )
            if not self.confirm("Add another card?", default=False):
                break
        sections.append({"title": title, "type": "cards", "cards": cards})
        return {"sections": sections}

    def collect(self) -> Dict[str, Any]:
        """Run the full question flow and return the configuration."""
        config = self.basic_info()
        config["navigation"] = self.navigation()
        config["columns"] = self.columns()
        config["visualization"] = self.visualization(config["columns"])
        config["content"] = self.content()
        config["initialStats"] = dict(DEFAULT_STATS)
        config["initialEntries"] = []
        return config

    def offer_save(self, config: Dict[str, Any]) -> Optional[Path]:
        """Ask whether to save ``config`` as JSON and where."""
        if not self.confirm("Save this configuration to a file?", default=True):
            return None
        target = Path(self.ask("Enter file path", default=f"./examples/{config['id']}.json"))
        return save_config(config, target)


def save_config(config: Dict[str, Any], path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config, f, indent=2, ensure_ascii=False)
    logger.info("Configuration saved to: %s", path)
    return path


def collect_config(session: Optional[InteractiveSession] = None, offer_save: bool = True) -> Dict[str, Any]:
    """Interactively build a configuration, optionally saving it to disk."""
    session = session or InteractiveSession()
    session.console.print("[blue]Running in interactive mode...[/blue]")
    config = session.collect()
    if offer_save:
        session.offer_save(config)
    return config
