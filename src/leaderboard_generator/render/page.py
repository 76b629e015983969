"""Assemble template data for a leaderboard page and render it."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Mapping, Union

from leaderboard_generator.render import fragments
from leaderboard_generator.render.client_script import DATA_URL, generate_client_script
from leaderboard_generator.render.engine import render_template


def build_page_data(config: Mapping[str, Any], data_url: str = DATA_URL) -> Dict[str, Any]:
    """Map a validated configuration onto the page template slots.

    Parameters
    ----------
    config : Mapping[str, Any]
        Validated leaderboard configuration.
    data_url : str, default="../../leaderboard_data.json"
        Datastore location relative to the generated page.

    Returns
    -------
    Dict[str, Any]
        Plain values and pre-rendered HTML fragments keyed by slot name.
    """
    visualization = config["visualization"]
    return {
        "id": config["id"],
        "title": config["title"],
        "shortDescription": config["shortDescription"],
        "leaderboardDescription": config.get("longDescription") or config["shortDescription"],
        "customCss": config.get("customCss") or "",
        "visualizationType": visualization["type"],
        "navigationLinks": fragments.build_navigation_links(config),
        "tableHeaders": fragments.build_table_headers(config["columns"]),
        "tableRows": fragments.build_table_rows(config["columns"], config.get("initialEntries")),
        "xAxisTitle": visualization["xAxis"]["label"],
        "yAxisTitle": visualization["yAxis"]["label"],
        "xAxisLabels": fragments.build_axis_labels(visualization["xAxis"], "x"),
        "yAxisLabels": fragments.build_axis_labels(visualization["yAxis"], "y"),
        "referenceLine": fragments.build_reference_line(visualization.get("referenceLine"), visualization),
        "legendItems": fragments.build_legend_items(visualization["dataPoints"]),
        "legendCss": fragments.build_legend_css(visualization["dataPoints"]),
        "contentSections": fragments.build_content_sections(config.get("content")),
        "submissionRequirements": fragments.build_submission_requirements(config["columns"]),
        "javascript": generate_client_script(config, data_url=data_url),
    }


def render_page(config: Mapping[str, Any], template_path: Union[str, Path], data_url: str = DATA_URL) -> str:
    """Render the full HTML document for one leaderboard."""
    return render_template(template_path, build_page_data(config, data_url=data_url))
