"""
Shared pytest fixtures for leaderboard generator tests.
"""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path

import pytest

NAV_TEMPLATE = """<!DOCTYPE html>
<html>
<body>
    <header class="header">
        <nav class="nav">
            <a href="{brand}" class="nav-brand">Quantum Benchmarks</a>
            <ul class="nav-links">
                {links}
            </ul>
        </nav>
    </header>
    <main><h1>{heading}</h1></main>
</body>
</html>
"""

MINIMAL_CONFIG = {
    "id": "qc-test",
    "title": "QC Test",
    "shortDescription": "d",
    "columns": [{"id": "rank", "name": "Rank", "type": "number"}],
    "visualization": {
        "type": "scatter",
        "xAxis": {"field": "x", "label": "X"},
        "yAxis": {"field": "y", "label": "Y"},
        "dataPoints": {
            "categoryField": "cat",
            "categories": {"a": {"shape": "circle", "color": "#000", "label": "A"}},
        },
    },
    "content": {"sections": []},
}

FULL_CONFIG = {
    "id": "quantum-chemistry",
    "title": "Quantum Chemistry",
    "shortDescription": "Ground-state energy benchmarks",
    "longDescription": "Molecules solved to chemical accuracy on quantum & classical hardware.",
    "navigation": {"position": 1},
    "columns": [
        {
            "id": "rank",
            "name": "Rank",
            "type": "number",
            "width": "60px",
            "className": "rank-column",
            "sortable": True,
            "defaultSort": True,
            "sortDirection": "asc",
        },
        {"id": "method", "name": "Method", "type": "text"},
        {
            "id": "accuracy",
            "name": "Accuracy",
            "type": "percentage",
            "formatting": {"thresholds": [{"value": 0, "class": "low"}, {"value": 50, "class": "high"}]},
        },
        {"id": "runtime", "name": "Runtime", "type": "time"},
    ],
    "visualization": {
        "type": "scatter",
        "xAxis": {
            "field": "qubits",
            "label": "Qubits",
            "min": 0,
            "max": 100,
            "ticks": [0, 25, 50, 75, 100],
            "tickLabels": ["0", "25", "50", "75", "100"],
        },
        "yAxis": {
            "field": "accuracy",
            "label": "Accuracy",
            "min": 0,
            "max": 100,
            "ticks": [0, 50, 100],
            "tickLabels": ["0%", "50%", "100%"],
        },
        "dataPoints": {
            "categoryField": "hardware",
            "categories": {
                "quantum": {"shape": "circle", "color": "#0f62fe", "label": "Quantum Hardware"},
                "classical": {"shape": "square", "color": "#9B5CFF", "label": "Classical Hardware"},
            },
        },
        "referenceLine": {"y": 95, "label": "Classical Limit", "style": "dashed"},
    },
    "content": {
        "sections": [
            {"title": "About", "type": "text", "content": "How entries are scored."},
            {
                "title": "Resources",
                "type": "cards",
                "cards": [
                    {"title": "Dataset", "content": "Download the molecules."},
                    {"title": "Rules", "content": "Submission rules."},
                ],
            },
        ]
    },
    "initialStats": {"totalEntries": 2, "bestScore": "97%"},
    "initialEntries": [
        {"rank": 1, "method": "VQE", "accuracy": 97, "runtime": "1h 25min", "qubits": 40, "hardware": "quantum"},
        {"rank": 2, "method": "DMRG", "accuracy": 42, "runtime": "5 min", "qubits": 60, "hardware": "classical"},
    ],
}


def nav_page(links: list[str], brand: str = "./", heading: str = "Page") -> str:
    """Render a site page whose nav list holds ``links``."""
    return NAV_TEMPLATE.format(brand=brand, links="\n                ".join(links), heading=heading)


@pytest.fixture(autouse=True)
def reset_root_logger():
    """Remove handlers installed by ``configure_logging`` during a test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


@pytest.fixture
def minimal_config() -> dict:
    """The smallest configuration that passes validation."""
    return copy.deepcopy(MINIMAL_CONFIG)


@pytest.fixture
def full_config() -> dict:
    """A configuration exercising every optional feature."""
    return copy.deepcopy(FULL_CONFIG)


@pytest.fixture
def config_file(tmp_path: Path, full_config: dict) -> Path:
    """``full_config`` written to a JSON file."""
    path = tmp_path / "quantum-chemistry.json"
    path.write_text(json.dumps(full_config), encoding="utf-8")
    return path


@pytest.fixture
def site_root(tmp_path: Path) -> Path:
    """A small site: two root pages, one existing leaderboard and a page without navigation."""
    root = tmp_path / "site"
    root.mkdir()
    base_links = [
        '<li><a href="./" class="active">Overview</a></li>',
        '<li><a href="confidence_bounds.html">Confidence Bounds</a></li>',
        '<li><a href="algorithmic_methods.html">Algorithmic Methods</a></li>',
        '<li><a href="classical_verification.html">Classical Verification</a></li>',
        '<li><a href="leaderboard/peak_circuits/">Peak Circuits</a></li>',
    ]
    (root / "index.html").write_text(nav_page(base_links, heading="Overview"), encoding="utf-8")
    (root / "confidence_bounds.html").write_text(
        nav_page([link.replace(' class="active"', "") for link in base_links], heading="Bounds"),
        encoding="utf-8",
    )
    (root / "notes.html").write_text("<html><body>No navigation here</body></html>", encoding="utf-8")

    peak = root / "leaderboard" / "peak_circuits"
    peak.mkdir(parents=True)
    peak_links = [
        '<li><a href="../../">Overview</a></li>',
        '<li><a href="../../confidence_bounds.html">Confidence Bounds</a></li>',
        '<li><a href="../../algorithmic_methods.html">Algorithmic Methods</a></li>',
        '<li><a href="../../classical_verification.html">Classical Verification</a></li>',
        '<li><a href="./" class="active">Peak Circuits</a></li>',
    ]
    (peak / "index.html").write_text(nav_page(peak_links, brand="../../", heading="Peak"), encoding="utf-8")
    return root
