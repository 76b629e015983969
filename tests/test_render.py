"""Tests for template rendering, HTML fragments and the page script."""

from __future__ import annotations

import json

import pytest

from leaderboard_generator.exceptions import RenderError
from leaderboard_generator.render import build_page_data, generate_client_script, render, render_page, render_template
from leaderboard_generator.render import fragments
from leaderboard_generator.settings import PACKAGED_TEMPLATE


class TestEngine:
    """Jinja2 rendering with escaping disabled."""

    def test_values_are_not_escaped(self):
        out = render("<h1>{{ title }}</h1>", {"title": "Q<1> & friends"})
        assert out == "<h1>Q<1> & friends</h1>"

    def test_percentage_filter(self):
        assert render("{{ score | percentage }}", {"score": 97}) == "97%"

    def test_join_filter(self):
        assert render("{{ items | join(', ') }}", {"items": [1, 2, 3]}) == "1, 2, 3"

    def test_comparison_tests(self):
        template = "{% if a is greater_than b %}gt{% elif a is less_than b %}lt{% elif a is equals b %}eq{% endif %}"
        assert render(template, {"a": 3, "b": 1}) == "gt"
        assert render(template, {"a": 1, "b": 3}) == "lt"
        assert render(template, {"a": 2, "b": 2}) == "eq"

    def test_syntax_error_raises_render_error(self):
        with pytest.raises(RenderError, match="Template rendering failed"):
            render("{% if %}", {})

    def test_render_template_reads_file(self, tmp_path):
        path = tmp_path / "page.html"
        path.write_text("<title>{{ title }}</title>\n", encoding="utf-8")
        assert render_template(path, {"title": "A & B"}) == "<title>A & B</title>\n"

    def test_missing_template_raises_oserror(self, tmp_path):
        with pytest.raises(OSError):
            render_template(tmp_path / "missing.html", {})


class TestGeometry:
    """Linear mapping onto the plotting rectangle."""

    def test_x_tick_at_midpoint(self):
        assert fragments.interpolate_x(50, 0, 100) == 415

    def test_y_extremes(self):
        assert fragments.interpolate_y(0, 0, 100) == 350
        assert fragments.interpolate_y(100, 0, 100) == 50

    def test_zero_span_does_not_divide(self):
        assert fragments.interpolate_x(5, 5, 5) == fragments.PLOT_LEFT
        assert fragments.interpolate_y(5, 5, 5) == fragments.PLOT_BOTTOM

    def test_format_number(self):
        assert fragments.format_number(415.0) == "415"
        assert fragments.format_number(247.5) == "247.5"
        assert fragments.format_number(True) == "true"


class TestFragments:
    """Pure HTML builders."""

    def test_axis_labels_positions(self):
        axis = {"min": 0, "max": 100, "ticks": [0, 50, 100], "tickLabels": ["0", "50", "100"]}
        html = fragments.build_axis_labels(axis, "x")
        assert '<text x="80" y="375"' in html
        assert '<text x="415" y="375"' in html
        assert '<text x="750" y="375"' in html

    def test_axis_labels_default_bounds(self):
        html = fragments.build_axis_labels({"ticks": [50], "tickLabels": ["50%"]}, "y")
        assert html == '<text x="30" y="200" class="axis-tick" text-anchor="end">50%</text>'

    def test_axis_labels_mismatched_lengths_empty(self):
        assert fragments.build_axis_labels({"ticks": [0, 50], "tickLabels": ["0"]}, "x") == ""
        assert fragments.build_axis_labels({}, "x") == ""

    def test_horizontal_reference_line(self):
        html = fragments.build_reference_line({"y": 95, "label": "Classical Limit", "style": "dashed"})
        assert '<line x1="80" y1="65" x2="750" y2="65" class="reference-line reference-line-dashed"/>' in html
        assert '<text x="755" y="60" class="axis-tick">Classical Limit</text>' in html

    def test_vertical_reference_line_uses_x_axis(self):
        visualization = {"xAxis": {"min": 0, "max": 200}}
        html = fragments.build_reference_line({"x": 100}, visualization)
        assert html == '<line x1="415" y1="50" x2="415" y2="350" class="reference-line"/>'

    def test_no_reference_line(self):
        assert fragments.build_reference_line(None) == ""

    def test_table_headers(self, full_config):
        html = fragments.build_table_headers(full_config["columns"])
        assert html.split(fragments.TH_INDENT) == [
            "<th>Rank</th>",
            "<th>Method</th>",
            "<th>Accuracy</th>",
            "<th>Runtime</th>",
        ]

    def test_navigation_links_position(self, full_config):
        items = fragments.build_navigation_links(full_config).split(fragments.NAV_INDENT)
        assert len(items) == 6
        # position 1 lands after the four site links and Peak Circuits
        assert items[5] == '<li><a href="./" class="active">Quantum Chemistry</a></li>'
        assert items[0] == '<li><a href="../../">Overview</a></li>'

    def test_navigation_links_position_zero(self, full_config):
        full_config["navigation"]["position"] = 0
        items = fragments.build_navigation_links(full_config).split(fragments.NAV_INDENT)
        assert items[4] == '<li><a href="./" class="active">Quantum Chemistry</a></li>'
        assert items[5] == '<li><a href="../peak_circuits/">Peak Circuits</a></li>'

    def test_navigation_links_appended_without_position(self, minimal_config):
        items = fragments.build_navigation_links(minimal_config).split(fragments.NAV_INDENT)
        assert items[-1] == '<li><a href="./" class="active">QC Test</a></li>'

    def test_legend_items_and_css(self, full_config):
        data_points = full_config["visualization"]["dataPoints"]
        items = fragments.build_legend_items(data_points)
        assert '<div class="legend-quantum"></div>' in items
        assert "<span>Classical Hardware</span>" in items
        css = fragments.build_legend_css(data_points)
        assert ".legend-quantum { width: 14px; height: 14px; border: 3px solid #0f62fe; border-radius: 50%; }" in css
        assert ".legend-classical { width: 16px; height: 16px; background: #9B5CFF; }" in css

    def test_content_sections(self, full_config):
        html = fragments.build_content_sections(full_config["content"])
        assert "<h2>About</h2>" in html
        assert "<p>How entries are scored.</p>" in html
        assert '<div class="grid grid-2">' in html
        assert "<h3>Rules</h3>" in html

    def test_empty_content_sections(self, minimal_config):
        assert fragments.build_content_sections(minimal_config["content"]) == ""

    def test_submission_requirements(self, minimal_config):
        html = fragments.build_submission_requirements(minimal_config["columns"])
        assert html.split(fragments.TH_INDENT) == [
            "<li><strong>Rank:</strong> Required information for submission</li>",
            "<li><strong>Reproducibility:</strong> Code, parameters, and setup instructions</li>",
        ]


class TestTableRows:
    """Server-side rendering of ``initialEntries``."""

    def test_threshold_last_satisfied_wins(self):
        thresholds = [{"value": 0, "class": "low"}, {"value": 50, "class": "high"}]
        assert fragments.select_threshold_class(75, thresholds) == "high"
        assert fragments.select_threshold_class(25, thresholds) == "low"
        assert fragments.select_threshold_class(-1, thresholds) == ""

    def test_threshold_descending_order_overwrites(self):
        thresholds = [{"value": 50, "class": "high"}, {"value": 0, "class": "low"}]
        assert fragments.select_threshold_class(75, thresholds) == "low"

    def test_threshold_non_numeric(self):
        assert fragments.select_threshold_class("n/a", [{"value": 0, "class": "low"}]) == ""
        assert fragments.select_threshold_class("97", [{"value": 50, "class": "high"}]) == "high"

    @pytest.mark.parametrize(
        "rank, expected",
        [(1, "rank-1"), ("3", "rank-3"), (4, "rank-other"), ("-", "rank-other"), (0, "rank-other"), (-1, "rank-other")],
    )
    def test_rank_badge_class(self, rank, expected):
        assert fragments.rank_badge_class(rank) == expected

    def test_rows_from_entries(self, full_config):
        html = fragments.build_table_rows(full_config["columns"], full_config["initialEntries"])
        rows = html.split(fragments.TH_INDENT)
        assert rows[0] == (
            '<tr><td><span class="rank-badge rank-1">1</span></td><td>VQE</td>'
            '<td class="high">97</td><td>1h 25min</td></tr>'
        )
        assert '<td class="low">42</td>' in rows[1]

    def test_placeholder_without_entries(self, minimal_config):
        html = fragments.build_table_rows(minimal_config["columns"], [])
        assert html == '<tr><td colspan="1">Loading leaderboard data...</td></tr>'

    def test_rows_follow_default_sort(self, full_config):
        entries = list(reversed(full_config["initialEntries"]))
        rows = fragments.build_table_rows(full_config["columns"], entries).split(fragments.TH_INDENT)
        assert "<td>VQE</td>" in rows[0]
        assert "<td>DMRG</td>" in rows[1]

    def test_sort_descending_puts_missing_last(self):
        columns = [{"id": "score", "name": "Score", "type": "number", "defaultSort": True, "sortDirection": "desc"}]
        entries = [{"score": 3}, {"score": None}, {"score": "10"}, {}, {"score": 7}]
        ordered = [e.get("score") for e in fragments.sort_entries(columns, entries)]
        assert ordered == ["10", 7, 3, None, None]

    def test_sort_time_column_by_minutes(self):
        columns = [{"id": "runtime", "name": "Runtime", "type": "time", "defaultSort": True}]
        entries = [{"runtime": "1h 5min"}, {"runtime": "50 min"}, {"runtime": "2h 0min"}]
        ordered = [e["runtime"] for e in fragments.sort_entries(columns, entries)]
        assert ordered == ["50 min", "1h 5min", "2h 0min"]

    def test_no_default_sort_keeps_order(self, minimal_config):
        entries = [{"rank": 2}, {"rank": 1}]
        assert fragments.sort_entries(minimal_config["columns"], entries) == entries

    def test_time_to_minutes(self):
        assert fragments.time_to_minutes("1h 25min") == 85
        assert fragments.time_to_minutes("5 min") == 5
        assert fragments.time_to_minutes("soon") == 0


class TestClientScript:
    """Generated page JavaScript."""

    def test_embeds_id_and_columns(self, full_config):
        script = generate_client_script(full_config)
        assert 'const LEADERBOARD_ID = "quantum-chemistry";' in script
        assert 'const DATA_URL = "../../leaderboard_data.json";' in script
        assert '"thresholds": [{"value": 0, "class": "low"}, {"value": 50, "class": "high"}]' in script
        assert "__COLUMNS__" not in script

    def test_time_helper_only_with_time_column(self, full_config, minimal_config):
        assert "function convertTimeToMinutes" in generate_client_script(full_config)
        assert "function convertTimeToMinutes" not in generate_client_script(minimal_config)

    def test_sort_settings_embedded(self, full_config, minimal_config):
        script = generate_client_script(full_config)
        assert 'const SORT = {"column": "rank", "type": "number", "direction": "asc"};' in script
        assert "sortEntries(entries).map(renderRow)" in script
        assert "const SORT = null;" in generate_client_script(minimal_config)

    def test_rank_badges_limited_to_podium(self, minimal_config):
        assert "value >= 1 && value <= 3" in generate_client_script(minimal_config)

    def test_chart_defaults_bounds(self, minimal_config):
        script = generate_client_script(minimal_config)
        chart = json.loads(script.split("const CHART = ", 1)[1].split(";\n", 1)[0])
        assert (chart["xMin"], chart["xMax"], chart["yMin"], chart["yMax"]) == (0, 100, 0, 100)
        assert chart["categories"] == {"a": {"shape": "circle", "color": "#000", "label": "A"}}

    def test_script_tag_in_values_is_neutralised(self, minimal_config):
        minimal_config["id"] = "x"
        minimal_config["visualization"]["dataPoints"]["categories"]["a"]["label"] = "</script><b>"
        script = generate_client_script(minimal_config)
        assert "</script>" not in script


class TestPage:
    """Full page rendering with the packaged template."""

    def test_page_data_slots(self, full_config):
        data = build_page_data(full_config)
        assert data["leaderboardDescription"] == full_config["longDescription"]
        assert data["customCss"] == ""
        assert data["xAxisTitle"] == "Qubits"

    def test_page_data_custom_data_url(self, minimal_config):
        script = build_page_data(minimal_config, data_url="../../boards.json")["javascript"]
        assert 'const DATA_URL = "../../boards.json";' in script

    def test_description_falls_back_to_short(self, minimal_config):
        assert build_page_data(minimal_config)["leaderboardDescription"] == "d"

    def test_render_packaged_template(self, full_config):
        full_config["title"] = "Q<Chem> & Co"
        full_config["customCss"] = ".hero { color: red; }"
        html = render_page(full_config, PACKAGED_TEMPLATE)
        assert "<h1>Q<Chem> & Co</h1>" in html
        assert ".hero { color: red; }" in html
        assert 'id="leaderboard-tbody"' in html
        assert '<ul class="nav-links">' in html
        assert '<text x="415" y="375" class="axis-tick" text-anchor="middle">50</text>' in html
        assert "&amp;" not in html
