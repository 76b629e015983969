"""
Leaderboard Generator
=====================

Turns a leaderboard configuration into a page of the Quantum Advantage
Framework static site: a rendered ``leaderboard/<id>/index.html``, a record
in the shared ``leaderboard_data.json`` and a link in every page's
navigation menu.

.. module:: leaderboard_generator

"""

from __future__ import annotations

__version__ = "1.0.0"

from leaderboard_generator.pipeline import GenerationResult, generate_leaderboard
from leaderboard_generator.settings import GeneratorSettings, load_settings
from leaderboard_generator.validator import validate

__all__ = ["generate_leaderboard", "GenerationResult", "GeneratorSettings", "load_settings", "validate"]
