"""Pre-rendered HTML fragments for the leaderboard page template.

Each builder is a pure function returning markup that the template inserts
verbatim. Chart coordinates share one linear mapping onto a fixed plotting
rectangle so tick labels, reference lines and client-side markers line up.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Mapping, Optional, Sequence

from leaderboard_generator.navigation import insertion_index

# Plotting rectangle inside the 800x400 chart SVG.
PLOT_LEFT = 80
PLOT_RIGHT = 750
PLOT_WIDTH = PLOT_RIGHT - PLOT_LEFT
PLOT_TOP = 50
PLOT_BOTTOM = 350
PLOT_HEIGHT = PLOT_BOTTOM - PLOT_TOP
X_TICK_LABEL_Y = 375
Y_TICK_LABEL_X = 30

DEFAULT_AXIS_MIN = 0
DEFAULT_AXIS_MAX = 100

NAV_INDENT = "\n                "
TH_INDENT = "\n                            "

SITE_LINKS = (
    ("../../", "Overview"),
    ("../../confidence_bounds.html", "Confidence Bounds"),
    ("../../algorithmic_methods.html", "Algorithmic Methods"),
    ("../../classical_verification.html", "Classical Verification"),
)
EXISTING_LEADERBOARD_LINKS = (("../peak_circuits/", "Peak Circuits"),)


def format_number(value: Any) -> str:
    """Format a number the way it should appear in markup.

    Integral floats lose their trailing ``.0`` so that pixel coordinates read
    ``415`` rather than ``415.0``.

    >>> format_number(415.0)
    '415'
    >>> format_number(247.5)
    '247.5'
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _axis_bounds(axis: Optional[Mapping[str, Any]]) -> tuple:
    axis = axis or {}
    lo = axis.get("min", DEFAULT_AXIS_MIN)
    hi = axis.get("max", DEFAULT_AXIS_MAX)
    return (DEFAULT_AXIS_MIN if lo is None else lo, DEFAULT_AXIS_MAX if hi is None else hi)


def interpolate_x(value: float, axis_min: float, axis_max: float) -> float:
    """Map a data value onto the horizontal pixel range of the plot.

    >>> interpolate_x(50, 0, 100)
    415.0
    """
    span = axis_max - axis_min
    if span == 0:
        return float(PLOT_LEFT)
    return PLOT_LEFT + ((value - axis_min) / span) * PLOT_WIDTH


def interpolate_y(value: float, axis_min: float, axis_max: float) -> float:
    """Map a data value onto the vertical pixel range; larger values sit higher.

    >>> interpolate_y(100, 0, 100)
    50.0
    """
    span = axis_max - axis_min
    if span == 0:
        return float(PLOT_BOTTOM)
    return PLOT_BOTTOM - ((value - axis_min) / span) * PLOT_HEIGHT


def build_navigation_links(config: Mapping[str, Any]) -> str:
    """Build the ``<li>`` items for the new page's own navigation menu."""
    links: List[Dict[str, Any]] = [{"href": href, "text": text, "active": False} for href, text in SITE_LINKS]
    links.extend({"href": href, "text": text, "active": False} for href, text in EXISTING_LEADERBOARD_LINKS)

    index = insertion_index(config, len(links))
    links.insert(index, {"href": "./", "text": config["title"], "active": True})

    items = []
    for link in links:
        active = ' class="active"' if link["active"] else ""
        items.append(f'<li><a href="{link["href"]}"{active}>{link["text"]}</a></li>')
    return NAV_INDENT.join(items)


def build_table_headers(columns: Sequence[Mapping[str, Any]]) -> str:
    return TH_INDENT.join(f"<th>{column['name']}</th>" for column in columns)


def build_axis_labels(axis: Mapping[str, Any], orientation: str) -> str:
    """Build positioned tick labels for one axis.

    Parameters
    ----------
    axis : Mapping[str, Any]
        Axis configuration with ``ticks`` and ``tickLabels``.
    orientation : str
        ``"x"`` or ``"y"``.

    Returns
    -------
    str
        SVG ``<text>`` elements, or an empty string when ticks and labels are
        missing or of different lengths.
    """
    ticks = axis.get("ticks")
    labels = axis.get("tickLabels")
    if not ticks or not labels or len(ticks) != len(labels):
        return ""

    lo, hi = _axis_bounds(axis)
    elements = []
    for tick, label in zip(ticks, labels):
        if orientation == "x":
            x = format_number(interpolate_x(tick, lo, hi))
            elements.append(f'<text x="{x}" y="{X_TICK_LABEL_Y}" class="axis-tick" text-anchor="middle">{label}</text>')
        else:
            y = format_number(interpolate_y(tick, lo, hi))
            elements.append(f'<text x="{Y_TICK_LABEL_X}" y="{y}" class="axis-tick" text-anchor="end">{label}</text>')
    return TH_INDENT.join(elements)


def build_reference_line(
    reference_line: Optional[Mapping[str, Any]],
    visualization: Optional[Mapping[str, Any]] = None,
) -> str:
    """Build a horizontal and/or vertical reference line with optional label."""
    if not reference_line:
        return ""

    visualization = visualization or {}
    style = reference_line.get("style")
    css = f"reference-line reference-line-{style}" if style else "reference-line"
    label = reference_line.get("label")
    html = ""

    if reference_line.get("y") is not None:
        lo, hi = _axis_bounds(visualization.get("yAxis"))
        y = interpolate_y(reference_line["y"], lo, hi)
        html += f'<line x1="{PLOT_LEFT}" y1="{format_number(y)}" x2="{PLOT_RIGHT}" y2="{format_number(y)}" class="{css}"/>'
        if label:
            html += f'<text x="{PLOT_RIGHT + 5}" y="{format_number(y - 5)}" class="axis-tick">{label}</text>'

    if reference_line.get("x") is not None:
        lo, hi = _axis_bounds(visualization.get("xAxis"))
        x = format_number(interpolate_x(reference_line["x"], lo, hi))
        html += f'<line x1="{x}" y1="{PLOT_TOP}" x2="{x}" y2="{PLOT_BOTTOM}" class="{css}"/>'
        if label:
            html += f'<text x="{x}" y="{PLOT_TOP - 5}" class="axis-tick" text-anchor="middle">{label}</text>'

    return html


def build_legend_items(data_points: Optional[Mapping[str, Any]]) -> str:
    if not data_points or not data_points.get("categories"):
        return ""

    items = []
    for key, category in data_points["categories"].items():
        items.append(
            f"""
                        <div class="legend-item">
                            <div class="legend-{key.lower()}"></div>
                            <span>{category['label']}</span>
                        </div>"""
        )
    return "\n".join(items)


def build_legend_css(data_points: Optional[Mapping[str, Any]]) -> str:
    """CSS rules giving each legend swatch its category shape and colour."""
    if not data_points or not data_points.get("categories"):
        return ""

    rules = []
    for key, category in data_points["categories"].items():
        selector = f".legend-{key.lower()}"
        color = category["color"]
        shape = category["shape"]
        if shape == "circle":
            body = f"width: 14px; height: 14px; border: 3px solid {color}; border-radius: 50%;"
        elif shape == "triangle":
            body = (
                "width: 0; height: 0; border-left: 8px solid transparent; "
                f"border-right: 8px solid transparent; border-bottom: 16px solid {color};"
            )
        else:
            body = f"width: 16px; height: 16px; background: {color};"
        rules.append(f"{selector} {{ {body} }}")
    return "\n        ".join(rules)


def build_content_sections(content: Optional[Mapping[str, Any]]) -> str:
    """Build ``<section>`` blocks for text, cards and grid sections."""
    if not content or not content.get("sections"):
        return ""

    blocks = []
    for section in content["sections"]:
        html = f"""
        <section class="section">
            <div class="container">
                <h2>{section['title']}</h2>"""

        cards = section.get("cards")
        if section["type"] == "text" and section.get("content"):
            html += f"""
                <p>{section['content']}</p>"""
        elif section["type"] in ("cards", "grid") and cards:
            html += f"""
                <div class="grid grid-{min(len(cards), 3)}">"""
            for card in cards:
                html += f"""
                    <div class="card">
                        <h3>{card['title']}</h3>
                        <p>{card['content']}</p>
                    </div>"""
            html += """
                </div>"""

        html += """
            </div>
        </section>"""
        blocks.append(html)
    return "\n".join(blocks)


def build_submission_requirements(columns: Sequence[Mapping[str, Any]]) -> str:
    requirements = [
        f"<li><strong>{column['name']}:</strong> Required information for submission</li>" for column in columns
    ]
    requirements.append("<li><strong>Reproducibility:</strong> Code, parameters, and setup instructions</li>")
    return TH_INDENT.join(requirements)


def _to_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).strip())
    except (TypeError, ValueError):
        return None


def select_threshold_class(value: Any, thresholds: Sequence[Mapping[str, Any]]) -> str:
    """Pick the CSS class for a cell from ordered thresholds.

    Thresholds are checked in list order and every satisfied one overwrites
    the previous choice, so the *last* threshold with ``value >= threshold``
    wins. Ascending thresholds therefore give the highest band reached.

    >>> select_threshold_class(75, [{"value": 0, "class": "low"}, {"value": 50, "class": "high"}])
    'high'
    >>> select_threshold_class(75, [{"value": 50, "class": "high"}, {"value": 0, "class": "low"}])
    'low'
    """
    number = _to_number(value)
    chosen = ""
    if number is None:
        return chosen
    for threshold in thresholds:
        if number >= threshold["value"]:
            chosen = threshold["class"]
    return chosen


def rank_badge_class(rank: Any) -> str:
    """``rank-1`` .. ``rank-3`` for podium places, ``rank-other`` otherwise."""
    match = re.match(r"\s*(-?\d+)", str(rank))
    if match is None:
        return "rank-other"
    value = int(match.group(1))
    return f"rank-{value}" if 1 <= value <= 3 else "rank-other"


def time_to_minutes(value: Any) -> int:
    """Minutes in a duration such as ``"5 min"`` or ``"1h 25min"``.

    >>> time_to_minutes("1h 25min")
    85
    """
    text = str(value).lower()
    minutes = 0
    hours = re.search(r"(\d+)h", text)
    if hours:
        minutes += int(hours.group(1)) * 60
    mins = re.search(r"(\d+)\s*min", text)
    if mins:
        minutes += int(mins.group(1))
    return minutes


def default_sort_column(columns: Sequence[Mapping[str, Any]]) -> Optional[Mapping[str, Any]]:
    """First column flagged ``defaultSort``, if any."""
    return next((column for column in columns if column.get("defaultSort") is True), None)


def _sort_key(value: Any, column_type: str) -> tuple:
    # numbers before text, missing values last
    if value is None or value == "":
        return (2, "")
    if column_type == "time":
        return (0, time_to_minutes(value))
    if isinstance(value, bool):
        return (1, str(value))
    try:
        return (0, float(value))
    except (TypeError, ValueError):
        return (1, str(value))


def sort_entries(
    columns: Sequence[Mapping[str, Any]], entries: Sequence[Mapping[str, Any]]
) -> List[Mapping[str, Any]]:
    """Order entries by the ``defaultSort`` column and its ``sortDirection``.

    Without a default sort column the input order is kept. The sort is stable.
    """
    column = default_sort_column(columns)
    if column is None:
        return list(entries)
    column_type = column.get("type", "")
    descending = column.get("sortDirection") == "desc"
    present = [e for e in entries if _sort_key(e.get(column["id"]), column_type)[0] != 2]
    missing = [e for e in entries if _sort_key(e.get(column["id"]), column_type)[0] == 2]
    ordered = sorted(present, key=lambda e: _sort_key(e.get(column["id"]), column_type), reverse=descending)
    return ordered + missing


def _cell_text(value: Any) -> str:
    return "" if value is None else format_number(value)


def build_table_rows(columns: Sequence[Mapping[str, Any]], entries: Optional[Sequence[Mapping[str, Any]]]) -> str:
    """Render ``initialEntries`` as table rows.

    Uses the same ordering, rank-badge and threshold rules as the client script,
    which replaces these rows once the datastore has been fetched.
    """
    if not entries:
        return f'<tr><td colspan="{len(columns)}">Loading leaderboard data...</td></tr>'

    rows = []
    for entry in sort_entries(columns, entries):
        cells = []
        for column in columns:
            value = entry.get(column["id"])
            if column["id"] == "rank":
                cells.append(f'<td><span class="rank-badge {rank_badge_class(value)}">{_cell_text(value)}</span></td>')
                continue
            thresholds = (column.get("formatting") or {}).get("thresholds")
            if thresholds:
                cells.append(f'<td class="{select_threshold_class(value, thresholds)}">{_cell_text(value)}</td>')
            else:
                cells.append(f"<td>{_cell_text(value)}</td>")
        rows.append("<tr>" + "".join(cells) + "</tr>")
    return TH_INDENT.join(rows)
