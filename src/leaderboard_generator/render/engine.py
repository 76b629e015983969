"""Template rendering for leaderboard pages.

Pages are rendered with Jinja2 with autoescaping disabled: values are
substituted verbatim. Escaping previously turned titles and pre-built HTML
fragments into visible entities, so the fragments passed in must already be
valid markup.
"""

from __future__ import annotations

import logging
import operator
from pathlib import Path
from typing import Any, Iterable, Mapping, Union

from jinja2 import Environment

from leaderboard_generator.exceptions import RenderError

logger = logging.getLogger(__name__)


def percentage(value: Any) -> str:
    """Format a value as a percentage string.

    >>> percentage(75)
    '75%'
    """
    return f"{value}%"


def join(values: Iterable[Any], separator: str = "") -> str:
    """Join values with ``separator``."""
    return separator.join(str(v) for v in values)


def _build_environment() -> Environment:
    env = Environment(autoescape=False, keep_trailing_newline=True)
    env.filters["percentage"] = percentage
    env.filters["join"] = join
    env.tests["equals"] = operator.eq
    env.tests["greater_than"] = operator.gt
    env.tests["less_than"] = operator.lt
    return env


def render(template_source: str, data: Mapping[str, Any]) -> str:
    """Render a template string with ``data``.

    Parameters
    ----------
    template_source : str
        Jinja2 template text.
    data : Mapping[str, Any]
        Values for the template slots.

    Returns
    -------
    str
        Rendered document.

    Raises
    ------
    RenderError
        If compiling or rendering fails. No partial output is returned.

    Examples
    --------
    >>> render("<h1>{{ title }}</h1>", {"title": "A & B"})
    '<h1>A & B</h1>'
    >>> render("{{ score | percentage }}", {"score": 75})
    '75%'
    """
    try:
        template = _build_environment().from_string(template_source)
        return template.render(**data)
    except Exception as e:
        logger.error("Template rendering failed: %s", e)
        raise RenderError(str(e)) from e


def render_template(template_path: Union[str, Path], data: Mapping[str, Any]) -> str:
    """Read a template file and render it.

    A missing or unreadable template raises ``OSError``; only failures during
    rendering are reported as :class:`RenderError`.
    """
    path = Path(template_path)
    with open(path, "r", encoding="utf-8") as f:
        source = f.read()
    logger.debug("Rendering template %s", path)
    return render(source, data)
