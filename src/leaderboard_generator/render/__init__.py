"""HTML rendering for generated leaderboard pages."""

from leaderboard_generator.render.client_script import generate_client_script
from leaderboard_generator.render.engine import render, render_template
from leaderboard_generator.render.fragments import select_threshold_class
from leaderboard_generator.render.page import build_page_data, render_page

__all__ = [
    "render",
    "render_template",
    "render_page",
    "build_page_data",
    "generate_client_script",
    "select_threshold_class",
]
