"""Client-side script embedded in every generated leaderboard page.

The script fetches the shared datastore, picks this leaderboard's record by
id and fills in the stat cards, the table body and the chart. Configuration
values are embedded as JSON literals; the rendering rules (rank badges,
threshold classes, row order, marker placement) match the server-side fragments in
:mod:`leaderboard_generator.render.fragments`.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Mapping, Optional

from leaderboard_generator.render.fragments import (
    DEFAULT_AXIS_MAX,
    DEFAULT_AXIS_MIN,
    PLOT_BOTTOM,
    PLOT_HEIGHT,
    PLOT_LEFT,
    PLOT_RIGHT,
    PLOT_WIDTH,
    default_sort_column,
)

DATA_URL = "../../leaderboard_data.json"

_SCRIPT = """
    (function () {
        const LEADERBOARD_ID = __LEADERBOARD_ID__;
        const DATA_URL = __DATA_URL__;
        const COLUMNS = __COLUMNS__;
        const CHART = __CHART__;
        const PLOT = __PLOT__;
        const SORT = __SORT__;
        const SVG_NS = 'http://www.w3.org/2000/svg';

        async function loadLeaderboardData() {
            try {
                const response = await fetch(DATA_URL);
                const data = await response.json();
                const leaderboardData = data[LEADERBOARD_ID];

                populateStats(leaderboardData.stats);
                populateLeaderboard(leaderboardData.entries);
                populatePerformanceChart(leaderboardData.entries);
            } catch (error) {
                console.error('Error loading leaderboard data:', error);
                showErrorMessage();
            }
        }

        function populateStats(stats) {
            const statsContainer = document.getElementById('stats-container');

            if (!stats) {
                statsContainer.innerHTML = '<div class="error-message">No statistics available</div>';
                return;
            }

            statsContainer.innerHTML = Object.keys(stats).map(key => `
                <div class="stat-card">
                    <div class="stat-number">${stats[key]}</div>
                    <div class="stat-label">${formatStatLabel(key)}</div>
                </div>`).join('');
        }

        function formatStatLabel(key) {
            return key
                .replace(/([A-Z])/g, ' $1')
                .replace(/^./, str => str.toUpperCase());
        }

        function rankClass(rank) {
            const value = parseInt(rank);
            return value >= 1 && value <= 3 ? `rank-${value}` : 'rank-other';
        }

        function thresholdClass(value, thresholds) {
            let cls = '';
            thresholds.forEach(threshold => {
                if (value >= threshold.value) {
                    cls = threshold.class;
                }
            });
            return cls;
        }

        function renderRow(entry) {
            let row = '<tr>';
            COLUMNS.forEach(column => {
                const value = entry[column.id];
                if (column.id === 'rank') {
                    row += `<td><span class="rank-badge ${rankClass(value)}">${value}</span></td>`;
                } else if (column.thresholds.length > 0) {
                    row += `<td class="${thresholdClass(value, column.thresholds)}">${value}</td>`;
                } else {
                    row += `<td>${value}</td>`;
                }
            });
            return row + '</tr>';
        }

        function populateLeaderboard(entries) {
            const tbody = document.getElementById('leaderboard-tbody');

            if (!entries || entries.length === 0) {
                tbody.innerHTML = `<tr><td colspan="${COLUMNS.length}">No entries available</td></tr>`;
                return;
            }

            tbody.innerHTML = sortEntries(entries).map(renderRow).join('');
        }

        function sortKey(value) {
            if (value === undefined || value === null || value === '') {
                return [2, ''];
            }
            if (SORT.type === 'time') {
                return [0, convertTimeToMinutes(value)];
            }
            const number = Number(value);
            return isNaN(number) ? [1, String(value)] : [0, number];
        }

        function sortEntries(entries) {
            if (!SORT) {
                return entries;
            }
            const sign = SORT.direction === 'desc' ? -1 : 1;
            return entries.slice().sort((a, b) => {
                const x = sortKey(a[SORT.column]);
                const y = sortKey(b[SORT.column]);
                if (x[0] !== y[0]) {
                    return x[0] - y[0];
                }
                if (x[0] === 2 || x[1] === y[1]) {
                    return 0;
                }
                return x[1] < y[1] ? -sign : sign;
            });
        }

        function xPosition(value) {
            const span = CHART.xMax - CHART.xMin;
            if (span === 0) {
                return PLOT.left;
            }
            return Math.min(PLOT.left + ((value - CHART.xMin) / span) * PLOT.width, PLOT.right);
        }

        function yPosition(value) {
            const span = CHART.yMax - CHART.yMin;
            if (span === 0) {
                return PLOT.bottom;
            }
            return PLOT.bottom - ((value - CHART.yMin) / span) * PLOT.height;
        }

        function createMarker(shape, color, x, y) {
            let marker;
            if (shape === 'circle') {
                marker = document.createElementNS(SVG_NS, 'circle');
                marker.setAttribute('cx', x);
                marker.setAttribute('cy', y);
                marker.setAttribute('r', '8');
                marker.setAttribute('fill', 'none');
                marker.setAttribute('stroke', color);
                marker.setAttribute('stroke-width', '3');
            } else if (shape === 'square') {
                marker = document.createElementNS(SVG_NS, 'rect');
                marker.setAttribute('x', x - 8);
                marker.setAttribute('y', y - 8);
                marker.setAttribute('width', '16');
                marker.setAttribute('height', '16');
                marker.setAttribute('fill', color);
            } else {
                marker = document.createElementNS(SVG_NS, 'polygon');
                marker.setAttribute('points', `${x},${y - 8} ${x - 8},${y + 8} ${x + 8},${y + 8}`);
                marker.setAttribute('fill', color);
            }
            return marker;
        }

        function populatePerformanceChart(entries) {
            const chartContainer = document.getElementById('chart-data-points');
            chartContainer.innerHTML = '';

            if (!entries || entries.length === 0) {
                return;
            }

            const points = [];
            entries.forEach(entry => {
                const xValue = entry[CHART.xField];
                const yValue = entry[CHART.yField];
                const key = entry[CHART.categoryField];
                const category = CHART.categories[key];
                if (!category) {
                    return;
                }

                const x = xPosition(xValue);
                const y = yPosition(yValue);
                points.push({x, y, color: category.color});

                if (CHART.type === 'bar') {
                    const bar = document.createElementNS(SVG_NS, 'rect');
                    bar.setAttribute('x', x - 10);
                    bar.setAttribute('y', y);
                    bar.setAttribute('width', '20');
                    bar.setAttribute('height', Math.max(PLOT.bottom - y, 0));
                    bar.setAttribute('fill', category.color);
                    bar.setAttribute('fill-opacity', '0.3');
                    chartContainer.appendChild(bar);
                }

                const marker = createMarker(category.shape, category.color, x, y);
                const title = document.createElementNS(SVG_NS, 'title');
                title.textContent = `${entry[key]}: ${xValue}, ${yValue}`;
                marker.appendChild(title);
                chartContainer.appendChild(marker);
            });

            if (CHART.type === 'line' && points.length > 1) {
                points.sort((a, b) => a.x - b.x);
                const line = document.createElementNS(SVG_NS, 'polyline');
                line.setAttribute('points', points.map(p => `${p.x},${p.y}`).join(' '));
                line.setAttribute('fill', 'none');
                line.setAttribute('stroke', points[0].color);
                line.setAttribute('stroke-width', '2');
                chartContainer.insertBefore(line, chartContainer.firstChild);
            }
        }
__HELPERS__
        function showErrorMessage() {
            const statsContainer = document.getElementById('stats-container');
            const tbody = document.getElementById('leaderboard-tbody');

            statsContainer.innerHTML = '<div class="error-message">Error loading statistics data</div>';
            tbody.innerHTML = `<tr><td colspan="${COLUMNS.length}">Error loading leaderboard data</td></tr>`;
        }

        document.addEventListener('DOMContentLoaded', loadLeaderboardData);
    })();
"""

_TIME_HELPER = """
        function convertTimeToMinutes(timeString) {
            // "5 min", "1h 25min", "2h 0min"
            const timeStr = String(timeString).toLowerCase();
            let totalMinutes = 0;

            const hourMatch = timeStr.match(/(\\d+)h/);
            if (hourMatch) {
                totalMinutes += parseInt(hourMatch[1]) * 60;
            }

            const minMatch = timeStr.match(/(\\d+)\\s*min/);
            if (minMatch) {
                totalMinutes += parseInt(minMatch[1]);
            }

            return totalMinutes;
        }
"""


def _js_literal(value: Any) -> str:
    # keep "</script>" inside a string from closing the script element
    return json.dumps(value).replace("</", "<\\/")


def _column_specs(columns: List[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    specs = []
    for column in columns:
        thresholds = (column.get("formatting") or {}).get("thresholds") or []
        specs.append(
            {
                "id": column["id"],
                "thresholds": [{"value": t["value"], "class": t["class"]} for t in thresholds],
            }
        )
    return specs


def _chart_spec(visualization: Mapping[str, Any]) -> Dict[str, Any]:
    x_axis = visualization["xAxis"]
    y_axis = visualization["yAxis"]
    data_points = visualization["dataPoints"]

    def bound(axis, key, default):
        value = axis.get(key)
        return default if value is None else value

    return {
        "type": visualization["type"],
        "xField": x_axis["field"],
        "yField": y_axis["field"],
        "categoryField": data_points["categoryField"],
        "xMin": bound(x_axis, "min", DEFAULT_AXIS_MIN),
        "xMax": bound(x_axis, "max", DEFAULT_AXIS_MAX),
        "yMin": bound(y_axis, "min", DEFAULT_AXIS_MIN),
        "yMax": bound(y_axis, "max", DEFAULT_AXIS_MAX),
        "categories": {
            key: {"shape": category["shape"], "color": category["color"], "label": category["label"]}
            for key, category in data_points["categories"].items()
        },
    }


def _sort_spec(columns: List[Mapping[str, Any]]) -> Optional[Dict[str, Any]]:
    column = default_sort_column(columns)
    if column is None:
        return None
    return {
        "column": column["id"],
        "type": column.get("type", ""),
        "direction": column.get("sortDirection", "asc"),
    }


def generate_client_script(config: Mapping[str, Any], data_url: str = DATA_URL) -> str:
    """Build the page script for one leaderboard.

    Parameters
    ----------
    config : Mapping[str, Any]
        Validated leaderboard configuration.
    data_url : str, default="../../leaderboard_data.json"
        Datastore location relative to the generated page.

    Returns
    -------
    str
        JavaScript source for the page's ``<script>`` block.
    """
    plot = {
        "left": PLOT_LEFT,
        "right": PLOT_RIGHT,
        "width": PLOT_WIDTH,
        "bottom": PLOT_BOTTOM,
        "height": PLOT_HEIGHT,
    }
    has_time_column = any(column.get("type") == "time" for column in config["columns"])

    replacements = {
        "__LEADERBOARD_ID__": _js_literal(config["id"]),
        "__DATA_URL__": _js_literal(data_url),
        "__COLUMNS__": _js_literal(_column_specs(config["columns"])),
        "__CHART__": _js_literal(_chart_spec(config["visualization"])),
        "__PLOT__": _js_literal(plot),
        "__SORT__": _js_literal(_sort_spec(config["columns"])),
        "__HELPERS__": _TIME_HELPER if has_time_column else "",
    }
    script = _SCRIPT
    for token, value in replacements.items():
        script = script.replace(token, value)
    return script
