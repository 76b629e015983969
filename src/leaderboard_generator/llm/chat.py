"""Guided chat that fills in a leaderboard configuration.

A :class:`ChatSession` walks through fixed stages. After every assistant
reply the first fenced JSON block's ``extractedConfig`` object is merged into
the draft configuration and the stage advances once the draft has what the
current stage needs.
"""

from __future__ import annotations

import copy
import json
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional

from leaderboard_generator.interactive import RANK_COLUMN
from leaderboard_generator.llm.providers import ChatResponse

logger = logging.getLogger(__name__)

HISTORY_WINDOW = 10
CONFIG_BLOCK_PATTERN = re.compile(r"```(?:json)?\s*({[\s\S]*?})\s*```")

WELCOME_MESSAGE = (
    "Welcome to the Leaderboard Generator! I'll help you create a custom leaderboard "
    "for the Quantum Advantage Framework.\n\n"
    "I'll guide you through the process step by step, asking questions about your leaderboard. "
    "You can provide information in any order, and I'll help organize it into a proper configuration.\n\n"
    "Let's start with the basics. What kind of leaderboard would you like to create? For example, it could be "
    "for quantum chemistry simulations, error correction codes, or any other quantum computing domain."
)


class Stage(str, Enum):
    WELCOME = "welcome"
    PROJECT_UNDERSTANDING = "project_understanding"
    BASIC_CONFIGURATION = "basic_configuration"
    COLUMN_DEFINITION = "column_definition"
    VISUALIZATION_SETUP = "visualization_setup"
    CONTENT_CREATION = "content_creation"
    FINAL_REVIEW = "final_review"
    GENERATION = "generation"


STAGE_INSTRUCTIONS = {
    Stage.WELCOME: (
        "You are in the welcome stage. Ask the user about the type of leaderboard they want to create.\n"
        "Focus on understanding the domain and purpose of the leaderboard."
    ),
    Stage.PROJECT_UNDERSTANDING: (
        "You are in the project understanding stage. Ask about the purpose, domain, and target audience "
        "of the leaderboard.\nTry to extract the leaderboard's purpose and domain from the user's responses."
    ),
    Stage.BASIC_CONFIGURATION: (
        "You are in the basic configuration stage. Focus on getting the essential information:\n"
        "- id: URL-friendly identifier (lowercase with hyphens)\n"
        "- title: Display title for the leaderboard\n"
        "- shortDescription: Brief description shown in the hero section\n"
        "- longDescription: Detailed description of the leaderboard\n\n"
        "Missing fields: {missing}"
    ),
    Stage.COLUMN_DEFINITION: (
        "You are in the column definition stage. Help the user define the columns for their leaderboard table.\n"
        "Each column needs:\n"
        "- id: Unique identifier\n"
        "- name: Display name\n"
        "- type: Data type (number, text, percentage, time, hardware)\n"
        "- width: CSS width (e.g., 100px)\n"
        "- sortable: Whether the column is sortable (boolean)\n\n"
        "The 'rank' column is always included by default."
    ),
    Stage.VISUALIZATION_SETUP: (
        "You are in the visualization setup stage. Help the user configure the data visualization.\n"
        "The visualization needs:\n"
        "- type: Visualization type (scatter, bar, line)\n"
        "- xAxis: X-axis configuration (field, label, min, max)\n"
        "- yAxis: Y-axis configuration (field, label, min, max)\n"
        "- dataPoints: Data point configuration (categoryField, categories)"
    ),
    Stage.CONTENT_CREATION: (
        "You are in the content creation stage. Help the user create additional content sections "
        "for their leaderboard.\nContent sections can be:\n"
        "- text: Simple text content with a title\n"
        "- cards: Multiple cards with titles and content"
    ),
    Stage.FINAL_REVIEW: (
        "You are in the final review stage. Present a summary of the leaderboard configuration to the user.\n"
        "Ask if they want to make any changes before generating the leaderboard."
    ),
    Stage.GENERATION: (
        "You are in the generation stage. The leaderboard is ready to be generated.\n"
        "Confirm with the user that they want to proceed with generation."
    ),
}

SYSTEM_PROMPT = """You are an assistant helping to create a leaderboard for the Quantum Advantage Framework.

Current stage: {stage}
Completed stages: {completed}

The leaderboard configuration should follow this structure:
- id: URL-friendly identifier (lowercase with hyphens)
- title: Display title for the leaderboard
- shortDescription: Brief description shown in the hero section
- longDescription: Detailed description of the leaderboard
- columns: Array of column definitions for the table
- visualization: Configuration for the data visualization
- content: Additional content sections for the page

Current configuration state:
{config}

When the user provides information about the leaderboard they want to create, extract structured data from their request.
Respond conversationally, but also include a JSON object with the extracted configuration data.

The JSON should be formatted as follows:
```json
{{
  "extractedConfig": {{
    // Configuration fields based on the user's request
  }}
}}
```

Only include fields that you can confidently extract from the user's message."""


def initial_config() -> Dict[str, Any]:
    """Draft configuration a new session starts from."""
    return {
        "id": "",
        "title": "",
        "shortDescription": "",
        "columns": [dict(RANK_COLUMN)],
        "visualization": {
            "type": "scatter",
            "xAxis": {"field": "", "label": "", "min": 0, "max": 100},
            "yAxis": {"field": "", "label": "", "min": 0, "max": 100},
            "dataPoints": {"categoryField": "", "categories": {}},
        },
        "content": {"sections": []},
        "initialStats": {},
        "initialEntries": [],
    }


@dataclass
class StageContext:
    stage: Stage
    completed_stages: List[Stage]
    has_basic_info: bool
    has_columns: bool
    has_visualization: bool
    has_content: bool
    missing_fields: List[str] = field(default_factory=list)


def build_context(config: Mapping[str, Any], stage: Stage, completed_stages: List[Stage]) -> StageContext:
    """Summarize which parts of the draft are filled in."""
    visualization = config.get("visualization") or {}
    sections = (config.get("content") or {}).get("sections") or []
    context = StageContext(
        stage=stage,
        completed_stages=list(completed_stages),
        has_basic_info=bool(config.get("id") and config.get("title") and config.get("shortDescription")),
        has_columns=bool(config.get("columns")),
        has_visualization=bool(visualization.get("type")),
        has_content=bool(sections),
    )
    for name in ("id", "title", "shortDescription"):
        if not config.get(name):
            context.missing_fields.append(name)
    if not context.has_columns:
        context.missing_fields.append("columns")
    if not context.has_visualization:
        context.missing_fields.append("visualization")
    return context


def determine_next_stage(config: Mapping[str, Any], current: Stage, completed_stages: List[Stage]) -> Stage:
    """Advance at most one stage once the draft satisfies the current one."""
    context = build_context(config, current, completed_stages)
    if current is Stage.WELCOME and (config.get("title") or config.get("shortDescription")):
        return Stage.PROJECT_UNDERSTANDING
    if current is Stage.PROJECT_UNDERSTANDING and config.get("title") and config.get("shortDescription"):
        return Stage.BASIC_CONFIGURATION
    if current is Stage.BASIC_CONFIGURATION and context.has_basic_info:
        return Stage.COLUMN_DEFINITION
    if current is Stage.COLUMN_DEFINITION and context.has_columns:
        return Stage.VISUALIZATION_SETUP
    if current is Stage.VISUALIZATION_SETUP and context.has_visualization:
        return Stage.CONTENT_CREATION
    if current is Stage.CONTENT_CREATION and context.has_content:
        return Stage.FINAL_REVIEW
    if (
        current is Stage.FINAL_REVIEW
        and context.has_basic_info
        and context.has_columns
        and context.has_visualization
        and context.has_content
    ):
        return Stage.GENERATION
    return current


def build_prompt(
    config: Mapping[str, Any], context: StageContext, history: List[Mapping[str, str]]
) -> List[Dict[str, str]]:
    """System prompt, stage instructions, then the last few messages."""
    completed = ", ".join(stage.value for stage in context.completed_stages) or "none"
    messages = [
        {
            "role": "system",
            "content": SYSTEM_PROMPT.format(
                stage=context.stage.value, completed=completed, config=json.dumps(config, indent=2)
            ),
        },
        {
            "role": "system",
            "content": STAGE_INSTRUCTIONS[context.stage].format(missing=", ".join(context.missing_fields) or "none"),
        },
    ]
    messages.extend({"role": m["role"], "content": m["content"]} for m in history[-HISTORY_WINDOW:])
    return messages


def extract_config_update(reply: str) -> Optional[Dict[str, Any]]:
    """Return ``extractedConfig`` from the first fenced JSON block, if any.

    >>> extract_config_update('Sure! ```json\\n{"extractedConfig": {"title": "QC"}}\\n```')
    {'title': 'QC'}
    >>> extract_config_update("no block here") is None
    True
    """
    match = CONFIG_BLOCK_PATTERN.search(reply or "")
    if match is None:
        return None
    try:
        block = json.loads(match.group(1))
    except json.JSONDecodeError as e:
        logger.error("Error extracting configuration from response: %s", e)
        return None
    if not isinstance(block, dict):
        return None
    return block.get("extractedConfig") or None


def _merge_by_key(existing: List[Dict[str, Any]], updates: List[Any], key: str) -> None:
    for item in updates:
        if not isinstance(item, dict) or not item.get(key):
            continue
        index = next((i for i, current in enumerate(existing) if current.get(key) == item[key]), None)
        if index is None:
            existing.append(item)
        else:
            existing[index] = {**existing[index], **item}


def _apply(target: Dict[str, Any], updates: Mapping[str, Any]) -> None:
    for key, value in updates.items():
        if key == "columns" and isinstance(value, list):
            target.setdefault("columns", [])
            _merge_by_key(target["columns"], value, "id")
        elif key == "content" and isinstance(value, dict) and isinstance(value.get("sections"), list):
            content = target.get("content")
            if not isinstance(content, dict):
                content = target["content"] = {"sections": []}
            content.setdefault("sections", [])
            _merge_by_key(content["sections"], value["sections"], "title")
        elif isinstance(value, dict):
            if not isinstance(target.get(key), dict):
                target[key] = {}
            _apply(target[key], value)
        else:
            target[key] = value


def apply_config_update(config: Mapping[str, Any], update: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Return a copy of ``config`` with ``update`` merged in.

    Columns merge by ``id`` and content sections by ``title`` (matching items
    are shallow-merged, new ones appended); other objects merge recursively;
    scalars and arrays are replaced.
    """
    merged = copy.deepcopy(dict(config))
    if update:
        _apply(merged, copy.deepcopy(dict(update)))
    return merged


@dataclass
class ChatSession:
    """One guided conversation.

    Parameters
    ----------
    send : callable
        ``send(messages) -> ChatResponse``; usually ``LLMService.send``.
    """

    send: Callable[[List[Dict[str, str]]], ChatResponse]
    config: Dict[str, Any] = field(default_factory=initial_config)
    stage: Stage = Stage.WELCOME
    completed_stages: List[Stage] = field(default_factory=list)
    messages: List[Dict[str, str]] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.messages:
            self.messages.append({"role": "assistant", "content": WELCOME_MESSAGE})

    def send_message(self, text: str) -> ChatResponse:
        """Record ``text``, query the model and fold any extracted config in."""
        self.messages.append({"role": "user", "content": text})
        context = build_context(self.config, self.stage, self.completed_stages)
        response = self.send(build_prompt(self.config, context, self.messages))
        self.messages.append({"role": "assistant", "content": response.content})

        update = extract_config_update(response.content)
        if update:
            self.config = apply_config_update(self.config, update)
            next_stage = determine_next_stage(self.config, self.stage, self.completed_stages)
            if next_stage is not self.stage:
                if self.stage not in self.completed_stages:
                    self.completed_stages.append(self.stage)
                logger.info("Chat stage %s -> %s", self.stage.value, next_stage.value)
                self.stage = next_stage
        return response
